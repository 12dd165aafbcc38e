"""Pydantic models and shared types for the exchange."""

from exchange.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    ErrorResponse,
    PoolResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    RouteQuoteResponse,
    SwapResponse,
)
from exchange.models.types import Address, Uint256, normalize_address

__all__ = [
    # Types
    "Address",
    "Uint256",
    "normalize_address",
    # Service models
    "AddLiquidityRequest",
    "AddLiquidityResponse",
    "RemoveLiquidityRequest",
    "RemoveLiquidityResponse",
    "SwapResponse",
    "QuoteResponse",
    "RouteQuoteResponse",
    "PoolResponse",
    "ErrorResponse",
]
