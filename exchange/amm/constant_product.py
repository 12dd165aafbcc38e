"""Constant-product pricing.

Uses the formula x * y = k with a 1% fee on input amounts. The fee is not
paid out anywhere: it stays in the reserves, which is how liquidity
providers earn.
"""

from __future__ import annotations

from exchange.amm.base import AMM
from exchange.constants import FEE_DENOMINATOR, FEE_MULTIPLIER
from exchange.errors import DivisionByZero, InvalidAmount
from exchange.safe_int import S


class ConstantProduct(AMM):
    """Constant-product AMM math.

    Formula: amount_out = (in * 99 * res_out) / (res_in * 100 + in * 99)

    The 99/100 factor accounts for the 1% fee.
    """

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
    ) -> int:
        """Calculate output amount using the constant product formula.

        Every intermediate product is checked against the uint256 range, and
        the final division truncates toward zero.

        Args:
            amount_in: Input amount
            reserve_in: Reserve of the input asset in the pool
            reserve_out: Reserve of the output asset in the pool

        Returns:
            Output amount

        Raises:
            InvalidAmount: If any amount is negative
            DivisionByZero: If either reserve is zero
            ArithmeticOverflow: If an intermediate value exceeds uint256
        """
        if amount_in < 0 or reserve_in < 0 or reserve_out < 0:
            raise InvalidAmount(
                f"Amounts must be non-negative: in={amount_in} "
                f"reserve_in={reserve_in} reserve_out={reserve_out}"
            )
        if reserve_in == 0 or reserve_out == 0:
            raise DivisionByZero(
                f"Empty reserves: reserve_in={reserve_in} reserve_out={reserve_out}"
            )

        amount_in_with_fee = S(amount_in) * S(FEE_MULTIPLIER)
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * S(FEE_DENOMINATOR) + amount_in_with_fee

        return (numerator // denominator).value


# Singleton instance
constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
]
