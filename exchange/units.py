"""Conversions between human-readable amounts and 18-decimal smallest units.

All arithmetic on amounts happens on integers; these helpers exist for
tests, fixtures and display only. Decimal work uses a 78-digit context so
full uint256 values convert exactly.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from exchange.constants import DECIMALS, WEI

# 78 digits of precision: enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def to_wei(value: int | str | Decimal) -> int:
    """Convert a whole-unit amount to smallest units.

    Args:
        value: Amount in whole units, e.g. 1, "4.8" or Decimal("0.5")

    Returns:
        Integer amount scaled by 10^18

    Raises:
        ValueError: If the value is negative, not a number, or has more than
            18 fractional digits
    """
    if isinstance(value, float):
        raise TypeError("to_wei requires int, str or Decimal, not float")
    try:
        amount = Decimal(str(value))
    except decimal.InvalidOperation as err:
        raise ValueError(f"Not a decimal amount: {value!r}") from err
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Amount must be a finite non-negative number: {value!r}")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        scaled = amount * WEI
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount has more than {DECIMALS} decimals: {value!r}")
        return int(scaled)


def from_wei(amount: int) -> str:
    """Format a smallest-unit amount as a whole-unit decimal string.

    Trailing fractional zeros are dropped but at least one fractional digit
    is kept, so 1001 * 10^18 formats as "1001.0".
    """
    if amount < 0:
        raise ValueError(f"Amount must be non-negative: {amount}")
    whole, fraction = divmod(amount, WEI)
    fraction_digits = f"{fraction:0{DECIMALS}d}".rstrip("0") or "0"
    return f"{whole}.{fraction_digits}"


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "to_wei",
    "from_wei",
]
