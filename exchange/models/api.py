"""Pydantic models for the exchange HTTP service.

Amounts travel as decimal strings in smallest units (validated as uint256),
addresses as 0x-prefixed hex.
"""

from pydantic import BaseModel, Field

from exchange.models.types import Address, Uint256

# =============================================================================
# Requests
# =============================================================================


class CreditRequest(BaseModel):
    """Genesis funding of an account with base asset."""

    amount: Uint256 = Field(description="Base asset to credit, smallest units")


class DeployTokenRequest(BaseModel):
    """Deploy a fixed-supply token."""

    deployer: Address = Field(description="Account receiving the whole supply")
    name: str = Field(min_length=1, max_length=64)
    symbol: str = Field(min_length=1, max_length=16)
    initial_supply: Uint256 = Field(description="Supply in whole units (scaled by 10^18)")


class ApproveRequest(BaseModel):
    """Set an allowance on a token."""

    owner: Address
    spender: Address
    amount: Uint256


class CreatePoolRequest(BaseModel):
    """Register a pool for a token."""

    token: Address


class AddLiquidityRequest(BaseModel):
    sender: Address
    base_amount: Uint256 = Field(description="Base asset deposited")
    max_token_amount: Uint256 = Field(description="Most tokens the pool may pull")


class RemoveLiquidityRequest(BaseModel):
    sender: Address
    share_amount: Uint256 = Field(description="Shares to burn")


class SwapBaseForTokenRequest(BaseModel):
    sender: Address
    base_amount: Uint256
    min_tokens: Uint256 = Field(default="0", description="Slippage bound on tokens received")
    recipient: Address | None = Field(default=None, description="Defaults to the sender")


class SwapTokenForBaseRequest(BaseModel):
    sender: Address
    tokens_sold: Uint256
    min_base: Uint256 = Field(default="0", description="Slippage bound on base received")


class TokenToTokenSwapRequest(BaseModel):
    sender: Address
    tokens_sold: Uint256
    min_tokens_bought: Uint256 = Field(
        default="0", description="Slippage bound on the final output only"
    )
    target_token: Address


# =============================================================================
# Responses
# =============================================================================


class AccountResponse(BaseModel):
    address: Address
    balance: Uint256


class TokenResponse(BaseModel):
    address: Address
    name: str
    symbol: str
    decimals: int
    total_supply: Uint256


class BalanceResponse(BaseModel):
    token: Address
    account: Address
    balance: Uint256
    allowance: Uint256 | None = None


class PoolResponse(BaseModel):
    """Snapshot of a pool's public state."""

    address: Address
    token: Address
    registry: Address
    base_reserve: Uint256
    token_reserve: Uint256
    share_supply: Uint256


class PoolListResponse(BaseModel):
    pools: list[PoolResponse]


class ShareBalanceResponse(BaseModel):
    pool: Address
    account: Address
    shares: Uint256


class AddLiquidityResponse(BaseModel):
    shares_minted: Uint256
    pool: PoolResponse


class RemoveLiquidityResponse(BaseModel):
    base_out: Uint256
    token_out: Uint256
    pool: PoolResponse


class SwapResponse(BaseModel):
    amount_in: Uint256
    amount_out: Uint256
    pool: PoolResponse


class QuoteResponse(BaseModel):
    amount_in: Uint256
    amount_out: Uint256
    reserve_in: Uint256
    reserve_out: Uint256


class RouteQuoteResponse(BaseModel):
    token_in: Address
    token_out: Address
    pool_in: Address
    pool_out: Address
    amount_in: Uint256
    base_amount: Uint256
    amount_out: Uint256


class ErrorResponse(BaseModel):
    """Body returned for every failed operation."""

    error: str = Field(description="Error kind, e.g. InsufficientOutput")
    detail: str
