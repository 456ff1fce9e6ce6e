"""Reserve accounting and guard rails."""

from basketpool.pool.guards import (
    assert_allocation_bounds,
    calc_max_individual_delta,
    calc_max_individual_withdrawal,
    max_allocation_check,
    min_allocation_check,
)
from basketpool.pool.reserve_pool import ReservePool
from basketpool.pool.results import Receipt, ReserveDelta
from basketpool.pool.state import AssetReserve, PoolReserveState

__all__ = [
    # Pool
    "ReservePool",
    # State
    "AssetReserve",
    "PoolReserveState",
    # Results
    "Receipt",
    "ReserveDelta",
    # Guards
    "assert_allocation_bounds",
    "calc_max_individual_delta",
    "calc_max_individual_withdrawal",
    "max_allocation_check",
    "min_allocation_check",
]
