"""AMM (Automated Market Maker) pricing."""

from exchange.amm.base import AMM, SwapQuote
from exchange.amm.constant_product import ConstantProduct, constant_product

__all__ = [
    "AMM",
    "SwapQuote",
    "ConstantProduct",
    "constant_product",
]
