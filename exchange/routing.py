"""Token-to-token routing through the base asset.

A token-to-token trade always crosses exactly two pools: the input token's
pool sells the token for base asset, and the output token's pool sells that
base asset for the output token. This module resolves the second pool
through a registry and prices the whole route without moving value. The
value-moving path lives in Pool.token_to_token_swap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

from exchange.errors import InvalidAddress, InvalidAmount
from exchange.models.types import require_address

if TYPE_CHECKING:
    from exchange.ledger import Ledger
    from exchange.pool import Pool

logger = structlog.get_logger()


@runtime_checkable
class PoolDirectory(Protocol):
    """Anything that resolves a token address to its pool address."""

    def get_pool(self, token_address: str) -> str | None: ...


@dataclass(frozen=True)
class RouteQuote:
    """Priced two-hop route (token_in -> base -> token_out)."""

    token_in: str
    token_out: str
    pool_in: str
    pool_out: str
    amount_in: int
    base_amount: int
    amount_out: int


def resolve_target_pool(ledger: Ledger, registry_address: str, target_token: str) -> Pool:
    """Find the pool serving `target_token` through the registry at `registry_address`.

    Raises:
        InvalidAddress: If no registry is deployed at `registry_address`, or
            the registry has no pool for `target_token`
    """
    from exchange.pool import Pool

    target_token = require_address(target_token, "target token")
    registry = ledger.find_contract(registry_address)
    if not isinstance(registry, PoolDirectory):
        raise InvalidAddress(f"No pool registry at {registry_address}")

    pool_address = registry.get_pool(target_token)
    if pool_address is None:
        raise InvalidAddress(f"No pool registered for token {target_token}")

    pool = ledger.contract(pool_address)
    if not isinstance(pool, Pool):
        raise InvalidAddress(f"{pool_address} is not a pool")
    return pool


def quote_token_to_token(
    ledger: Ledger,
    registry_address: str,
    token_in: str,
    token_out: str,
    amount_in: int,
) -> RouteQuote:
    """Price selling `amount_in` of `token_in` for `token_out`.

    The first leg only moves the input pool's reserves and the second leg
    only the output pool's, so the quote equals what token_to_token_swap
    would pay if executed next.

    Raises:
        InvalidAddress: If either token has no pool, or both resolve to the same pool
        DivisionByZero: If either pool is empty
    """
    if amount_in < 0:
        raise InvalidAmount(f"Amount must be non-negative: {amount_in}")

    with ledger.lock:
        pool_in = resolve_target_pool(ledger, registry_address, token_in)
        pool_out = resolve_target_pool(ledger, registry_address, token_out)
        if pool_in.address == pool_out.address:
            raise InvalidAddress("Input and output tokens resolve to the same pool")

        base_amount = pool_in.get_base_amount(amount_in)
        amount_out = pool_out.get_token_amount(base_amount)

    logger.debug(
        "route_quoted",
        token_in=pool_in.token_address,
        token_out=pool_out.token_address,
        amount_in=amount_in,
        base_amount=base_amount,
        amount_out=amount_out,
    )
    return RouteQuote(
        token_in=pool_in.token_address,
        token_out=pool_out.token_address,
        pool_in=pool_in.address,
        pool_out=pool_out.address,
        amount_in=amount_in,
        base_amount=base_amount,
        amount_out=amount_out,
    )


__all__ = [
    "PoolDirectory",
    "RouteQuote",
    "resolve_target_pool",
    "quote_token_to_token",
]
