"""Tick tables and the tick locator.

An asset's price curve is split into contiguous allocation bands ("ticks").
Each tick carries a linear price, a slope and two directional fees, all
stored in their packed widths. Properties expose the canonical Q128 view.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

from basketpool.constants import ALLOCATION_ONE, ONE
from basketpool.errors import ConfigurationError
from basketpool.math.fixed_point import (
    allocation_to_fixed,
    fee_to_fixed,
    price_to_fixed,
    slope_to_fixed,
)

__all__ = [
    "TickBoundary",
    "AssetConfig",
    "TickPosition",
    "TickLocation",
    "allocation_fraction",
    "allocation_fixed",
    "locate_tick",
    "get_tick_lower_bound_index",
]


@dataclass(frozen=True)
class TickBoundary:
    """One allocation band of an asset's price curve.

    All fields hold packed values.

    Attributes:
        lower_allocation: Inclusive lower edge (0.88)
        upper_allocation: Exclusive upper edge (0.88); inclusive only for the
            last tick, where it equals the asset's max allocation
        base_price: Price at lower_allocation (1.31)
        price_slope: Price decrease per unit of allocation (7.41), never negative
        increase_fee: Fraction deducted from a deposit's minted output (0.32)
        decrease_fee: Fraction added on top of a withdrawal's burned input (0.32)
    """

    lower_allocation: int
    upper_allocation: int
    base_price: int
    price_slope: int = 0
    increase_fee: int = 0
    decrease_fee: int = 0

    @property
    def lower(self) -> int:
        """Lower edge as Q128."""
        return allocation_to_fixed(self.lower_allocation)

    @property
    def upper(self) -> int:
        """Upper edge as Q128."""
        return allocation_to_fixed(self.upper_allocation)

    @property
    def price(self) -> int:
        """Base price as Q128."""
        return price_to_fixed(self.base_price)

    @property
    def slope(self) -> int:
        """Price slope as Q128."""
        return slope_to_fixed(self.price_slope)

    @property
    def increase_fee_fixed(self) -> int:
        """Deposit fee fraction as Q128."""
        return fee_to_fixed(self.increase_fee)

    @property
    def decrease_fee_fixed(self) -> int:
        """Withdrawal fee fraction as Q128."""
        return fee_to_fixed(self.decrease_fee)


@dataclass(frozen=True)
class AssetConfig:
    """Pricing configuration for one reserve asset.

    Replaced wholesale by the configuration provider, never mutated.

    Attributes:
        asset: Asset identifier (usually a token address)
        decimals: Native decimal precision of the asset
        target_allocation: Target share of total reserves (0.88)
        max_allocation: Largest permitted share of total reserves (0.88)
        ticks: Ordered, contiguous tick table covering
            [ticks[0].lower_allocation, max_allocation]
    """

    asset: str
    decimals: int
    target_allocation: int
    max_allocation: int
    ticks: tuple[TickBoundary, ...]

    def __post_init__(self) -> None:
        if not self.ticks:
            raise ConfigurationError(f"{self.asset}: tick table is empty")
        if self.decimals < 0:
            raise ConfigurationError(f"{self.asset}: decimals cannot be negative")
        if not 0 <= self.target_allocation <= ALLOCATION_ONE:
            raise ConfigurationError(f"{self.asset}: target allocation out of range")
        if not 0 < self.max_allocation <= ALLOCATION_ONE:
            raise ConfigurationError(f"{self.asset}: max allocation out of range")
        for tick in self.ticks:
            if tick.lower_allocation >= tick.upper_allocation:
                raise ConfigurationError(
                    f"{self.asset}: tick bounds must be strictly increasing "
                    f"({tick.lower_allocation} >= {tick.upper_allocation})"
                )
        for prev, nxt in zip(self.ticks, self.ticks[1:]):
            if prev.upper_allocation != nxt.lower_allocation:
                raise ConfigurationError(f"{self.asset}: tick table is not contiguous")
        if self.ticks[-1].upper_allocation != self.max_allocation:
            raise ConfigurationError(f"{self.asset}: last tick must end at max allocation")

    @property
    def min_allocation(self) -> int:
        """Lowest configured allocation (packed), the first tick's lower edge."""
        return self.ticks[0].lower_allocation

    @property
    def tick_count(self) -> int:
        return len(self.ticks)

    @property
    def target(self) -> int:
        """Target allocation as Q128."""
        return allocation_to_fixed(self.target_allocation)

    @property
    def maximum(self) -> int:
        """Max allocation as Q128."""
        return allocation_to_fixed(self.max_allocation)

    @property
    def minimum(self) -> int:
        """Min allocation as Q128."""
        return allocation_to_fixed(self.min_allocation)


class TickPosition(str, Enum):
    """Where an allocation sits relative to the configured tick domain."""

    IN_DOMAIN = "in_domain"
    BELOW_DOMAIN = "below_domain"
    ABOVE_DOMAIN = "above_domain"


@dataclass(frozen=True)
class TickLocation:
    """Result of locating an allocation in a tick table.

    index is always a valid tick index. For allocations outside the domain it
    is clamped to the nearest edge tick and position says which side.
    """

    index: int
    position: TickPosition

    @property
    def in_domain(self) -> bool:
        return self.position is TickPosition.IN_DOMAIN


def allocation_fraction(specific_reserves: int, total_reserves: int) -> Fraction:
    """Exact allocation of an asset; an empty pool has allocation 0."""
    if total_reserves <= 0:
        return Fraction(0)
    return Fraction(specific_reserves, total_reserves)


def allocation_fixed(specific_reserves: int, total_reserves: int) -> int:
    """Allocation of an asset as Q128, floored; an empty pool has allocation 0."""
    if total_reserves <= 0:
        return 0
    return (specific_reserves * ONE) // total_reserves


def locate_tick(config: AssetConfig, specific_reserves: int, total_reserves: int) -> TickLocation:
    """Find the tick whose half-open domain contains the asset's allocation.

    Interior boundaries belong to the tick they open. The last tick's upper
    edge (the max allocation) is inclusive.

    Args:
        config: Asset configuration with its tick table
        specific_reserves: Canonical reserves of the asset
        total_reserves: Canonical reserves of the whole pool

    Returns:
        TickLocation with a clamped index and the domain position
    """
    allocation = allocation_fraction(specific_reserves, total_reserves)
    lowers = [Fraction(tick.lower, ONE) for tick in config.ticks]
    last = len(lowers) - 1

    if allocation < lowers[0]:
        return TickLocation(0, TickPosition.BELOW_DOMAIN)
    if allocation > Fraction(config.maximum, ONE):
        return TickLocation(last, TickPosition.ABOVE_DOMAIN)

    index = bisect.bisect_right(lowers, allocation) - 1
    return TickLocation(index, TickPosition.IN_DOMAIN)


def get_tick_lower_bound_index(
    config: AssetConfig, specific_reserves: int, total_reserves: int
) -> int:
    """Total, clamped tick lookup.

    Never fails: allocations at or below the first lower edge give 0 and
    allocations at or above the max allocation give the last index.
    """
    return locate_tick(config, specific_reserves, total_reserves).index
