"""Base classes for AMM pricing implementations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SwapQuote:
    """Result of pricing a swap against a reserve pair (no state change)."""

    amount_in: int
    amount_out: int
    reserve_in: int
    reserve_out: int


class AMM(ABC):
    """Abstract base class for AMM pricing.

    Pricing is pure: it reads reserves passed in by the caller and never
    touches pool state. Only the exact-input direction is defined.
    """

    @abstractmethod
    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
    ) -> int:
        """Calculate output amount for a given input.

        Args:
            amount_in: Input amount
            reserve_in: Reserve of the input asset in the pool
            reserve_out: Reserve of the output asset in the pool

        Returns:
            Output amount
        """
        ...

    def quote(self, amount_in: int, reserve_in: int, reserve_out: int) -> SwapQuote:
        """Price a swap and return the amounts together with the reserves used."""
        return SwapQuote(
            amount_in=amount_in,
            amount_out=self.get_amount_out(amount_in, reserve_in, reserve_out),
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
