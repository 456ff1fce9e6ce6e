"""Tests for tick tables and the tick locator."""

import pytest

from basketpool.constants import ALLOCATION_ONE, ONE
from basketpool.errors import ConfigurationError
from basketpool.math.fixed_point import allocation_from_decimal
from basketpool.pricing.ticks import (
    AssetConfig,
    TickPosition,
    allocation_fixed,
    allocation_fraction,
    get_tick_lower_bound_index,
    locate_tick,
)
from tests.helpers import allocation_q, make_asset_config, make_tick


@pytest.fixture
def three_tick_config() -> AssetConfig:
    """Ticks [0.1, 0.2), [0.2, 0.3), [0.3, 0.5]."""
    return make_asset_config(
        [
            make_tick("0.1", "0.2", "1.02", "0.1"),
            make_tick("0.2", "0.3", "1.01", "0.1"),
            make_tick("0.3", "0.5", "1", "0.05"),
        ],
        target="0.25",
    )


class TestTickBoundary:
    """Tests for the Q128 view of packed tick fields."""

    def test_properties_widen_packed_fields(self):
        tick = make_tick("0", "0.5", "1", "0.5", increase_fee="0.5")
        assert tick.lower == 0
        assert tick.upper == ONE // 2
        assert tick.price == ONE
        assert tick.slope == ONE // 2
        assert tick.increase_fee_fixed == ONE // 2
        assert tick.decrease_fee_fixed == 0


class TestAssetConfigValidation:
    """Tests for tick table validation."""

    def test_valid_config(self, three_tick_config):
        assert three_tick_config.tick_count == 3
        assert three_tick_config.min_allocation == allocation_from_decimal("0.1")
        assert three_tick_config.maximum == ONE // 2

    def test_empty_table_raises(self):
        with pytest.raises(ConfigurationError, match="empty"):
            AssetConfig("x", 18, 0, ALLOCATION_ONE, ())

    def test_gap_between_ticks_raises(self):
        with pytest.raises(ConfigurationError, match="contiguous"):
            make_asset_config([make_tick("0", "0.2"), make_tick("0.3", "1")])

    def test_inverted_tick_raises(self):
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            make_asset_config([make_tick("0.4", "0.2")])

    def test_last_tick_must_end_at_max(self):
        tick = make_tick("0", "0.5")
        with pytest.raises(ConfigurationError, match="max allocation"):
            AssetConfig("x", 18, 0, allocation_from_decimal("0.6"), (tick,))

    def test_target_out_of_range_raises(self):
        tick = make_tick("0", "1")
        with pytest.raises(ConfigurationError, match="target"):
            AssetConfig("x", 18, ALLOCATION_ONE + 1, ALLOCATION_ONE, (tick,))


class TestAllocation:
    """Tests for allocation helpers."""

    def test_empty_pool_has_zero_allocation(self):
        assert allocation_fraction(0, 0) == 0
        assert allocation_fixed(5, 0) == 0

    def test_allocation_fixed_floors(self):
        assert allocation_fixed(1, 2) == ONE // 2
        assert allocation_fixed(1, 3) == ONE // 3


class TestLocateTick:
    """Tests for the tick locator."""

    def test_interior_boundary_belongs_to_upper_tick(self, three_tick_config):
        """An allocation exactly on a boundary opens the next tick."""
        boundary = allocation_q("0.2")
        assert locate_tick(three_tick_config, boundary, ONE).index == 1
        assert locate_tick(three_tick_config, boundary - 1, ONE).index == 0

    def test_first_lower_edge_is_in_domain(self, three_tick_config):
        lower = allocation_q("0.1")
        location = locate_tick(three_tick_config, lower, ONE)
        assert location.index == 0
        assert location.in_domain

    def test_max_allocation_is_inclusive(self, three_tick_config):
        """The last tick's upper edge is in the domain."""
        location = locate_tick(three_tick_config, ONE // 2, ONE)
        assert location.index == 2
        assert location.position is TickPosition.IN_DOMAIN

    def test_above_max_is_clamped(self, three_tick_config):
        location = locate_tick(three_tick_config, ONE // 2 + 1, ONE)
        assert location.index == 2
        assert location.position is TickPosition.ABOVE_DOMAIN

    def test_below_first_tick_is_clamped(self, three_tick_config):
        location = locate_tick(three_tick_config, allocation_q("0.1") - 1, ONE)
        assert location.index == 0
        assert location.position is TickPosition.BELOW_DOMAIN

    def test_empty_pool_is_below_domain(self, three_tick_config):
        assert locate_tick(three_tick_config, 0, 0).position is TickPosition.BELOW_DOMAIN

    def test_total_and_monotonic(self, three_tick_config):
        """Every allocation in [0, 1] maps to a tick, in non-decreasing order."""
        total = 10**18
        indices = [
            get_tick_lower_bound_index(three_tick_config, r, total)
            for r in range(0, total + 1, 10**16)
        ]
        assert indices == sorted(indices)
        assert indices[0] == 0
        assert indices[-1] == 2
        assert set(indices) == {0, 1, 2}
