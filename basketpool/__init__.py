"""Basket pool - allocation-tick pricing for a multi-asset reserve pool."""

__version__ = "0.1.0"

from basketpool.config import DEFAULT_POOL_SETTINGS, PoolSettings  # noqa: E402
from basketpool.pool import ReservePool  # noqa: E402
from basketpool.pricing import AssetConfig, TickBoundary  # noqa: E402

__all__ = [
    "AssetConfig",
    "DEFAULT_POOL_SETTINGS",
    "PoolSettings",
    "ReservePool",
    "TickBoundary",
    "__version__",
]
