"""Constant-product exchange: liquidity pools, a pool registry and two-hop routing."""

from exchange.ledger import Ledger
from exchange.pool import Pool, Reserves
from exchange.registry import PoolRegistry
from exchange.token import FixedSupplyToken, FungibleToken

__version__ = "0.1.0"
__all__ = [
    "Ledger",
    "Pool",
    "Reserves",
    "PoolRegistry",
    "FungibleToken",
    "FixedSupplyToken",
    "__version__",
]
