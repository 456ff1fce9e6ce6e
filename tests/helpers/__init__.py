"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Asset identifiers, amounts and the default tick bounds
- factories: Tick, config and pool factory functions
"""

from tests.helpers.constants import (
    ASSET_A,
    ASSET_B,
    ASSET_C,
    ASSET_DECIMALS,
    DEFAULT_BOUNDS,
    E18,
    ROUND_TRIP_TOLERANCE,
    SEED_AMOUNT,
)
from tests.helpers.factories import (
    allocation_q,
    is_close,
    make_asset_config,
    make_asset_params,
    make_pool,
    make_three_asset_configs,
    make_tick,
    max_crossing_deposit,
    relative_error,
)

__all__ = [
    # Constants
    "ASSET_A",
    "ASSET_B",
    "ASSET_C",
    "ASSET_DECIMALS",
    "DEFAULT_BOUNDS",
    "E18",
    "ROUND_TRIP_TOLERANCE",
    "SEED_AMOUNT",
    # Factories
    "allocation_q",
    "is_close",
    "make_asset_config",
    "make_asset_params",
    "make_pool",
    "make_three_asset_configs",
    "make_tick",
    "max_crossing_deposit",
    "relative_error",
]
