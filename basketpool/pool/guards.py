"""Allocation guard rails for the proportional mint/burn path.

The checks are saturating: an empty pool, a max allocation of 1.0 or a min
allocation of 0 always pass. Comparisons cross-multiply so they are exact.
"""

from __future__ import annotations

from basketpool.constants import ALLOCATION_ONE, ONE
from basketpool.errors import AllocationBoundError
from basketpool.pricing.step import calc_step_max_deposit, calc_step_max_withdrawal
from basketpool.pricing.ticks import AssetConfig, allocation_fraction

__all__ = [
    "max_allocation_check",
    "min_allocation_check",
    "assert_allocation_bounds",
    "calc_max_individual_delta",
    "calc_max_individual_withdrawal",
]


def max_allocation_check(config: AssetConfig, specific_reserves: int, total_reserves: int) -> bool:
    """True if the asset's allocation is at or below its max allocation."""
    if total_reserves == 0 or config.max_allocation >= ALLOCATION_ONE:
        return True
    return specific_reserves * ONE <= config.maximum * total_reserves


def min_allocation_check(config: AssetConfig, specific_reserves: int, total_reserves: int) -> bool:
    """True if the asset's allocation is at or above its min allocation."""
    if total_reserves == 0 or config.min_allocation == 0:
        return True
    return specific_reserves * ONE >= config.minimum * total_reserves


def assert_allocation_bounds(
    config: AssetConfig,
    before: tuple[int, int],
    after: tuple[int, int],
) -> None:
    """Reject a change that leaves an asset outside its allocation bounds.

    A change that starts outside the bounds passes when it moves the
    allocation strictly towards them.

    Args:
        config: Asset configuration
        before: (specific_reserves, total_reserves) before the change
        after: (specific_reserves, total_reserves) after the change

    Raises:
        AllocationBoundError: If the change ends outside the bounds without
            strictly improving
    """
    old = allocation_fraction(*before)
    new = allocation_fraction(*after)

    if not max_allocation_check(config, *after):
        if max_allocation_check(config, *before) or new >= old:
            raise AllocationBoundError(f"{config.asset}: allocation above max allocation")
    if not min_allocation_check(config, *after):
        if min_allocation_check(config, *before) or new <= old:
            raise AllocationBoundError(f"{config.asset}: allocation below min allocation")


def calc_max_individual_delta(target_allocation: int, specific_reserves: int, total_reserves: int) -> int:
    """Largest single-asset deposit that does not pass the target allocation."""
    return calc_step_max_deposit(target_allocation, specific_reserves, total_reserves)


def calc_max_individual_withdrawal(
    target_allocation: int, specific_reserves: int, total_reserves: int
) -> int:
    """Largest single-asset withdrawal that does not pass the target allocation."""
    return calc_step_max_withdrawal(target_allocation, specific_reserves, total_reserves)
