"""API endpoints for the exchange service.

Handlers are plain (sync) functions: FastAPI runs them on its worker
threads and the ledger lock serializes them into one total order.
Failures raised by the core are turned into JSON errors by the handlers
installed in exchange.api.main.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query

from exchange.amm import constant_product
from exchange.errors import InvalidAddress
from exchange.models.api import (
    AccountResponse,
    AddLiquidityRequest,
    AddLiquidityResponse,
    ApproveRequest,
    BalanceResponse,
    CreatePoolRequest,
    CreditRequest,
    DeployTokenRequest,
    ErrorResponse,
    PoolListResponse,
    PoolResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    RouteQuoteResponse,
    ShareBalanceResponse,
    SwapBaseForTokenRequest,
    SwapResponse,
    SwapTokenForBaseRequest,
    TokenResponse,
    TokenToTokenSwapRequest,
)
from exchange.models.types import ADDRESS_PATTERN, UINT256_PATTERN
from exchange.pool import Pool
from exchange.service import ExchangeService, get_default_service
from exchange.token import FungibleToken

logger = structlog.get_logger()

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    }
)


def get_service() -> ExchangeService:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_service] = lambda: ExchangeService()
    """
    return get_default_service()


def _pool_or_404(service: ExchangeService, token: str) -> Pool:
    try:
        return service.pool(token)
    except InvalidAddress as err:
        raise HTTPException(status_code=404, detail=str(err)) from err


def _token_or_404(service: ExchangeService, token: str) -> FungibleToken:
    try:
        return service.token(token)
    except InvalidAddress as err:
        raise HTTPException(status_code=404, detail=str(err)) from err


def _pool_response(pool: Pool) -> PoolResponse:
    reserves = pool.reserve()
    return PoolResponse(
        address=pool.address,
        token=pool.token_address,
        registry=pool.registry_address,
        base_reserve=str(reserves.base),
        token_reserve=str(reserves.token),
        share_supply=str(pool.share_supply()),
    )


def _token_response(token: FungibleToken) -> TokenResponse:
    return TokenResponse(
        address=token.address,
        name=token.name,
        symbol=token.symbol,
        decimals=token.decimals,
        total_supply=str(token.total_supply()),
    )


# =============================================================================
# Accounts
# =============================================================================


@router.post("/accounts/{address}/credit")
def credit_account(
    request: CreditRequest,
    address: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> AccountResponse:
    """Fund an account with base asset (genesis allocation)."""
    service.ledger.credit(address, int(request.amount))
    return AccountResponse(address=address.lower(), balance=str(service.ledger.balance_of(address)))


@router.get("/accounts/{address}")
def get_account(
    address: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> AccountResponse:
    return AccountResponse(address=address.lower(), balance=str(service.ledger.balance_of(address)))


# =============================================================================
# Tokens
# =============================================================================


@router.post("/tokens", status_code=201)
def deploy_token(
    request: DeployTokenRequest,
    service: ExchangeService = Depends(get_service),
) -> TokenResponse:
    token = service.deploy_token(
        deployer=request.deployer,
        name=request.name,
        symbol=request.symbol,
        initial_supply=int(request.initial_supply),
    )
    return _token_response(token)


@router.get("/tokens/{token}")
def get_token(
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> TokenResponse:
    return _token_response(_token_or_404(service, token))


@router.post("/tokens/{token}/approve")
def approve(
    request: ApproveRequest,
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> BalanceResponse:
    contract = _token_or_404(service, token)
    contract.approve(request.owner, request.spender, int(request.amount))
    return BalanceResponse(
        token=contract.address,
        account=request.owner.lower(),
        balance=str(contract.balance_of(request.owner)),
        allowance=str(contract.allowance(request.owner, request.spender)),
    )


@router.get("/tokens/{token}/balances/{account}")
def token_balance(
    token: str = Path(pattern=ADDRESS_PATTERN),
    account: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> BalanceResponse:
    contract = _token_or_404(service, token)
    return BalanceResponse(
        token=contract.address,
        account=account.lower(),
        balance=str(contract.balance_of(account)),
    )


# =============================================================================
# Pools
# =============================================================================


@router.post("/pools", status_code=201)
def create_pool(
    request: CreatePoolRequest,
    service: ExchangeService = Depends(get_service),
) -> PoolResponse:
    service.registry.create_pool(request.token)
    return _pool_response(service.pool(request.token))


@router.get("/pools")
def list_pools(service: ExchangeService = Depends(get_service)) -> PoolListResponse:
    return PoolListResponse(pools=[_pool_response(pool) for pool in service.pools()])


@router.get("/pools/{token}")
def get_pool(
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> PoolResponse:
    return _pool_response(_pool_or_404(service, token))


@router.get("/pools/{token}/shares/{account}")
def share_balance(
    token: str = Path(pattern=ADDRESS_PATTERN),
    account: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> ShareBalanceResponse:
    pool = _pool_or_404(service, token)
    return ShareBalanceResponse(
        pool=pool.address,
        account=account.lower(),
        shares=str(pool.share_balance_of(account)),
    )


@router.post("/pools/{token}/liquidity")
def add_liquidity(
    request: AddLiquidityRequest,
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> AddLiquidityResponse:
    pool = _pool_or_404(service, token)
    minted = pool.add_liquidity(
        request.sender,
        int(request.base_amount),
        int(request.max_token_amount),
    )
    return AddLiquidityResponse(shares_minted=str(minted), pool=_pool_response(pool))


@router.post("/pools/{token}/liquidity/remove")
def remove_liquidity(
    request: RemoveLiquidityRequest,
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> RemoveLiquidityResponse:
    pool = _pool_or_404(service, token)
    base_out, token_out = pool.remove_liquidity(request.sender, int(request.share_amount))
    return RemoveLiquidityResponse(
        base_out=str(base_out),
        token_out=str(token_out),
        pool=_pool_response(pool),
    )


@router.post("/pools/{token}/swap/base-for-token")
def swap_base_for_token(
    request: SwapBaseForTokenRequest,
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> SwapResponse:
    pool = _pool_or_404(service, token)
    amount_out = pool.swap_base_for_token(
        request.sender,
        int(request.base_amount),
        int(request.min_tokens),
        recipient=request.recipient,
    )
    return SwapResponse(
        amount_in=request.base_amount,
        amount_out=str(amount_out),
        pool=_pool_response(pool),
    )


@router.post("/pools/{token}/swap/token-for-base")
def swap_token_for_base(
    request: SwapTokenForBaseRequest,
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> SwapResponse:
    pool = _pool_or_404(service, token)
    amount_out = pool.swap_token_for_base(
        request.sender,
        int(request.tokens_sold),
        int(request.min_base),
    )
    return SwapResponse(
        amount_in=request.tokens_sold,
        amount_out=str(amount_out),
        pool=_pool_response(pool),
    )


@router.post("/pools/{token}/swap/token-for-token")
def token_to_token_swap(
    request: TokenToTokenSwapRequest,
    token: str = Path(pattern=ADDRESS_PATTERN),
    service: ExchangeService = Depends(get_service),
) -> SwapResponse:
    pool = _pool_or_404(service, token)
    amount_out = pool.token_to_token_swap(
        request.sender,
        int(request.tokens_sold),
        int(request.min_tokens_bought),
        request.target_token,
    )
    return SwapResponse(
        amount_in=request.tokens_sold,
        amount_out=str(amount_out),
        pool=_pool_response(pool),
    )


# =============================================================================
# Quotes
# =============================================================================


@router.get("/pools/{token}/quote")
def quote(
    token: str = Path(pattern=ADDRESS_PATTERN),
    amount: str = Query(pattern=UINT256_PATTERN, description="Amount sold, smallest units"),
    side: str = Query(pattern="^(base|token)$", description="Asset being sold"),
    service: ExchangeService = Depends(get_service),
) -> QuoteResponse:
    """Price a single-pool swap without executing it."""
    pool = _pool_or_404(service, token)
    # Reserves and price come from the same state
    with service.ledger.lock:
        reserves = pool.reserve()
        if side == "base":
            reserve_in, reserve_out = reserves.base, reserves.token
        else:
            reserve_in, reserve_out = reserves.token, reserves.base
        result = constant_product.quote(int(amount), reserve_in, reserve_out)
    return QuoteResponse(
        amount_in=str(result.amount_in),
        amount_out=str(result.amount_out),
        reserve_in=str(result.reserve_in),
        reserve_out=str(result.reserve_out),
    )


@router.get("/quote/token-to-token")
def quote_token_to_token(
    token_in: str = Query(pattern=ADDRESS_PATTERN),
    token_out: str = Query(pattern=ADDRESS_PATTERN),
    amount: str = Query(pattern=UINT256_PATTERN, description="Amount sold, smallest units"),
    service: ExchangeService = Depends(get_service),
) -> RouteQuoteResponse:
    """Price a two-hop token-to-token swap without executing it."""
    route = service.quote_token_to_token(token_in, token_out, int(amount))
    return RouteQuoteResponse(
        token_in=route.token_in,
        token_out=route.token_out,
        pool_in=route.pool_in,
        pool_out=route.pool_out,
        amount_in=str(route.amount_in),
        base_amount=str(route.base_amount),
        amount_out=str(route.amount_out),
    )
