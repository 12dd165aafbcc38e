"""Exchange error classes.

Every failed operation surfaces one of these to the caller. The operation's
effects are rolled back before the error leaves the ledger's atomic scope.
Arithmetic failures come from SafeInt and are re-exported here so callers
have a single import for the whole taxonomy.
"""

from exchange.safe_int import ArithmeticOverflow, DivisionByZero, SafeIntError, Underflow


class ExchangeError(Exception):
    """Base error for exchange operations."""

    pass


class InvalidAddress(ExchangeError):
    """Zero/null or unknown address where a concrete token, pool or account is required."""

    pass


class PoolAlreadyExists(ExchangeError):
    """A pool is already registered for this token."""

    pass


class InvalidAmount(ExchangeError):
    """Liquidity ratio/sufficiency violated, or withdrawal exceeds share balance."""

    pass


class InsufficientOutput(ExchangeError):
    """Computed swap output is below the caller's minimum."""

    pass


class TransferFailed(ExchangeError):
    """Token or base-asset transfer rejected (balance or allowance too low)."""

    pass


__all__ = [
    "ExchangeError",
    "InvalidAddress",
    "PoolAlreadyExists",
    "InvalidAmount",
    "InsufficientOutput",
    "TransferFailed",
    "SafeIntError",
    "ArithmeticOverflow",
    "DivisionByZero",
    "Underflow",
]
