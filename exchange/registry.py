"""Pool registry: one pool per token.

The registry deploys pools and is the directory pools consult to route
token-to-token swaps. Entries are permanent: a token, once registered, keeps
its pool forever, and registering it again is an error rather than a no-op.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import structlog

from exchange.errors import InvalidAddress, PoolAlreadyExists
from exchange.ledger import Ledger
from exchange.models.types import is_valid_address, normalize_address, require_address
from exchange.pool import Pool

logger = structlog.get_logger()


class PoolRegistry:
    """Registry ("factory") of pools keyed by token address.

    The registry is itself deployed on the ledger, and every pool it creates
    records the registry's address. Pools find each other through that
    address instead of holding references to the registry.
    """

    def __init__(self, ledger: Ledger, deployer: str) -> None:
        self._ledger = ledger
        self.deployer = require_address(deployer, "deployer")
        self.address = ledger.next_contract_address(self.deployer)
        # Insertion-ordered: iteration follows creation order
        self._pools: dict[str, str] = {}
        ledger.register(self)

    def __repr__(self) -> str:
        return f"PoolRegistry({self.address}, pools={len(self._pools)})"

    # --- Snapshot support for atomic scopes ---

    def snapshot_state(self) -> dict[str, str]:
        return dict(self._pools)

    def restore_state(self, state: dict[str, Any]) -> None:
        self._pools = dict(state)

    # --- Registry operations ---

    def create_pool(self, token_address: str) -> str:
        """Deploy a pool for `token_address` and record it.

        Returns:
            Address of the new pool

        Raises:
            InvalidAddress: If `token_address` is the zero address or malformed
            PoolAlreadyExists: If the token already has a pool
        """
        token_address = require_address(token_address, "token address")

        with self._ledger.atomic("create_pool", registry=self.address, token=token_address):
            if token_address in self._pools:
                raise PoolAlreadyExists(
                    f"Pool for {token_address} already exists at {self._pools[token_address]}"
                )
            pool = Pool(
                self._ledger,
                deployer=self.address,
                token_address=token_address,
                registry_address=self.address,
            )
            self._pools[token_address] = pool.address

        logger.info(
            "pool_created",
            registry=self.address,
            token=token_address,
            pool=pool.address,
            pool_count=len(self._pools),
        )
        return pool.address

    def get_pool(self, token_address: str) -> str | None:
        """Pool address for a token, or None if the token has no pool.

        Malformed and zero addresses are never registered, so they resolve
        to None as well.
        """
        if not isinstance(token_address, str) or not is_valid_address(
            normalize_address(token_address)
        ):
            return None
        return self._pools.get(normalize_address(token_address))

    def pool_for(self, token_address: str) -> Pool | None:
        """Resolve a token straight to its Pool object.

        Raises:
            InvalidAddress: If the registered address does not hold a pool
        """
        pool_address = self.get_pool(token_address)
        if pool_address is None:
            return None
        pool = self._ledger.contract(pool_address)
        if not isinstance(pool, Pool):
            raise InvalidAddress(f"{pool_address} registered for {token_address} is not a pool")
        return pool

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    def __contains__(self, token_address: object) -> bool:
        return isinstance(token_address, str) and self.get_pool(token_address) is not None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        """Iterate (token_address, pool_address) pairs in creation order."""
        return iter(list(self._pools.items()))

    def __len__(self) -> int:
        return len(self._pools)


__all__ = [
    "PoolRegistry",
]
