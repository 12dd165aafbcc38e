"""In-process exchange: one ledger, one registry, and lookups over them.

ExchangeService is what the HTTP layer talks to. It owns the ledger and the
registry, deploys tokens on request, and resolves addresses to contract
objects. All value-moving logic stays in Pool.
"""

from __future__ import annotations

import threading

import structlog

from exchange.errors import InvalidAddress
from exchange.ledger import Ledger
from exchange.models.types import require_address
from exchange.pool import Pool
from exchange.registry import PoolRegistry
from exchange.routing import RouteQuote, quote_token_to_token
from exchange.token import FixedSupplyToken, FungibleToken

logger = structlog.get_logger()

# Label of the account that deploys the registry
OPERATOR_LABEL = "operator"


class ExchangeService:
    """A ledger with a registry deployed on it.

    Args:
        ledger: Ledger to run on. If None, a fresh one is created.
    """

    def __init__(self, ledger: Ledger | None = None) -> None:
        self.ledger = ledger or Ledger()
        self.operator = self.ledger.create_account(OPERATOR_LABEL)
        self.registry = PoolRegistry(self.ledger, deployer=self.operator)
        logger.info(
            "exchange_started",
            operator=self.operator,
            registry=self.registry.address,
        )

    def deploy_token(
        self,
        deployer: str,
        name: str,
        symbol: str,
        initial_supply: int,
    ) -> FixedSupplyToken:
        """Deploy a fixed-supply token, minting `initial_supply` whole units to the deployer."""
        return FixedSupplyToken(self.ledger, deployer, name, symbol, initial_supply)

    def token(self, token_address: str) -> FungibleToken:
        """Resolve a token contract.

        Raises:
            InvalidAddress: If no token is deployed at the address
        """
        contract = self.ledger.find_contract(require_address(token_address, "token address"))
        if not isinstance(contract, FungibleToken) or isinstance(contract, Pool):
            raise InvalidAddress(f"No token at {token_address}")
        return contract

    def pool(self, token_address: str) -> Pool:
        """Resolve the pool registered for a token.

        Raises:
            InvalidAddress: If the token has no pool
        """
        pool = self.registry.pool_for(require_address(token_address, "token address"))
        if pool is None:
            raise InvalidAddress(f"No pool registered for token {token_address}")
        return pool

    def pools(self) -> list[Pool]:
        """All registered pools in creation order."""
        return [self.pool(token) for token, _ in self.registry]

    def quote_token_to_token(self, token_in: str, token_out: str, amount_in: int) -> RouteQuote:
        return quote_token_to_token(
            self.ledger, self.registry.address, token_in, token_out, amount_in
        )


# Process-wide instance used by the HTTP service
_default_service: ExchangeService | None = None
_default_service_lock = threading.Lock()


def get_default_service() -> ExchangeService:
    """Return the process-wide exchange, creating it on first use."""
    global _default_service
    if _default_service is None:
        with _default_service_lock:
            if _default_service is None:
                _default_service = ExchangeService()
    return _default_service


__all__ = [
    "ExchangeService",
    "get_default_service",
]
