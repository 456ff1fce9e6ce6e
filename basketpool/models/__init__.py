"""Pydantic models for configuration and the quote API."""

from basketpool.models.config import (
    AssetParams,
    PoolParams,
    TickBoundSpec,
    load_asset_configs,
)
from basketpool.models.quote import (
    QuoteKind,
    QuoteRequest,
    QuoteResponse,
    SwapKind,
    SwapRequest,
    SwapResponse,
)
from basketpool.models.types import Uint256

__all__ = [
    # Configuration
    "AssetParams",
    "PoolParams",
    "TickBoundSpec",
    "load_asset_configs",
    # Quote API
    "QuoteKind",
    "QuoteRequest",
    "QuoteResponse",
    "SwapKind",
    "SwapRequest",
    "SwapResponse",
    # Types
    "Uint256",
]
