"""Tests for equalization towards target allocations and the bounty."""

from dataclasses import replace

import pytest

from basketpool.config import PoolSettings
from basketpool.constants import ALLOCATION_ONE
from basketpool.errors import BountyExceedsSurplusError, TargetAllocationError
from basketpool.math.fixed_point import decimal_to_fixed, mul_up
from basketpool.pool import ReservePool
from tests.helpers import ASSET_A, ASSET_B, ASSET_C, E18, SEED_AMOUNT, make_asset_config

MINT_FEE = decimal_to_fixed("0.01")


@pytest.fixture
def fee_pool(asset_configs) -> ReservePool:
    """Seeded pool that has collected mint fees."""
    pool = ReservePool(asset_configs, PoolSettings(mint_fee=MINT_FEE))
    pool.mint(SEED_AMOUNT)
    return pool


@pytest.fixture
def retargeted_pool(fee_pool, asset_configs) -> ReservePool:
    """Fee pool with ASSET_A targeted to zero and the others to one half."""
    config_a, config_b, config_c = asset_configs
    fee_pool.update_asset_configs(
        [
            replace(config_a, target_allocation=0),
            replace(config_b, target_allocation=2**87),
            replace(config_c, target_allocation=ALLOCATION_ONE - 2**87),
        ]
    )
    return fee_pool


class TestEqualizationVector:
    """Tests for measuring distance from target."""

    def test_empty_pool_is_equalized(self, pool):
        assert pool.get_equalization_vector() == {ASSET_A: 0, ASSET_B: 0, ASSET_C: 0}
        assert pool.is_equalized()
        assert pool.total_reserves_discrepancy() == 0

    def test_proportional_mint_keeps_pool_equalized(self, seeded_pool):
        assert seeded_pool.is_equalized()
        with pytest.raises(TargetAllocationError, match="already equalized"):
            seeded_pool.equalize_to_target()

    def test_retargeted_pool(self, retargeted_pool):
        vector = retargeted_pool.get_equalization_vector()
        assert vector[ASSET_A] == -retargeted_pool.specific_reserves(ASSET_A)
        assert vector[ASSET_B] > 0
        assert vector[ASSET_C] > 0
        assert not retargeted_pool.is_equalized()
        assert retargeted_pool.total_reserves_discrepancy() == sum(abs(v) for v in vector.values())


class TestSwapTowardsTarget:
    """Tests for 1:1 equalizing swaps."""

    def test_deposit_past_target_raises(self, retargeted_pool):
        state = retargeted_pool.state
        with pytest.raises(TargetAllocationError, match="deposit exceeds target allocation"):
            retargeted_pool.swap_towards_target(ASSET_A, 1)
        assert retargeted_pool.state is state

    def test_withdrawal_away_from_target_raises(self, retargeted_pool):
        with pytest.raises(TargetAllocationError, match="withdrawal exceeds target allocation"):
            retargeted_pool.swap_towards_target(ASSET_B, -1)

    def test_withdrawal_past_zero_target_raises(self, retargeted_pool):
        native = retargeted_pool.native_reserves(ASSET_A)
        with pytest.raises(TargetAllocationError):
            retargeted_pool.swap_towards_target(ASSET_A, -(native + 1))

    def test_withdrawal_burns_one_for_one(self, retargeted_pool):
        before = retargeted_pool.specific_reserves(ASSET_A)
        receipt = retargeted_pool.swap_towards_target(ASSET_A, -E18)

        assert receipt.basket_burned == E18
        assert receipt.bounty_paid == 0
        assert retargeted_pool.specific_reserves(ASSET_A) == before - E18

    def test_deposit_mints_one_for_one(self, retargeted_pool):
        """100 units of the 20-decimal asset mint 100 basket units."""
        receipt = retargeted_pool.swap_towards_target(ASSET_B, 100 * E18 * 100)
        assert receipt.basket_minted == 100 * E18
        assert receipt.leg(ASSET_B).canonical == 100 * E18

    def test_whole_balance_can_be_withdrawn(self, retargeted_pool):
        native = retargeted_pool.native_reserves(ASSET_A)
        receipt = retargeted_pool.swap_towards_target(ASSET_A, -native)
        assert receipt.basket_burned == native
        assert retargeted_pool.specific_reserves(ASSET_A) == 0

    def test_zero_amount_raises(self, retargeted_pool):
        with pytest.raises(ValueError):
            retargeted_pool.swap_towards_target(ASSET_A, 0)


class TestEqualizationBounty:
    """Tests for the bounty funded from collected fees."""

    def test_fees_collected(self, fee_pool):
        assert fee_pool.fees_collected == mul_up(SEED_AMOUNT, MINT_FEE)
        assert fee_pool.surplus == fee_pool.fees_collected

    def test_bounty_must_be_covered_by_fees(self, fee_pool):
        with pytest.raises(BountyExceedsSurplusError, match="not enough fees to cover bounty"):
            fee_pool.increase_equalization_bounty(fee_pool.fees_collected + 1)
        assert fee_pool.equalization_bounty == 0

    def test_bounty_reduces_surplus(self, fee_pool):
        fee_pool.increase_equalization_bounty(1000 * E18)
        fee_pool.increase_equalization_bounty(500 * E18)
        assert fee_pool.equalization_bounty == 1500 * E18
        assert fee_pool.surplus == fee_pool.fees_collected - 1500 * E18

    def test_withdrawal_is_subsidised_by_bounty(self, retargeted_pool):
        fees = retargeted_pool.fees_collected
        retargeted_pool.increase_equalization_bounty(1000 * E18)

        receipt = retargeted_pool.swap_towards_target(ASSET_A, -5000 * E18)

        assert receipt.basket_burned == 4000 * E18
        assert receipt.bounty_paid == 1000 * E18
        assert retargeted_pool.equalization_bounty == 0
        assert retargeted_pool.fees_collected == fees - 1000 * E18

    def test_small_withdrawal_pays_partial_bounty(self, retargeted_pool):
        retargeted_pool.increase_equalization_bounty(5 * E18)

        receipt = retargeted_pool.swap_towards_target(ASSET_A, -E18)

        assert receipt.basket_burned == 0
        assert receipt.bounty_paid == E18
        assert retargeted_pool.equalization_bounty == 4 * E18

    def test_deposit_receives_bounty_on_top(self, retargeted_pool):
        retargeted_pool.increase_equalization_bounty(5 * E18)

        receipt = retargeted_pool.swap_towards_target(ASSET_C, 10 * 10**6)

        assert receipt.basket_minted == 15 * E18
        assert receipt.bounty_paid == 5 * E18
        assert retargeted_pool.equalization_bounty == 0

    def test_small_deposit_pays_partial_bounty(self, retargeted_pool):
        """A one-unit deposit of the 6-decimal asset earns only its canonical value."""
        retargeted_pool.increase_equalization_bounty(5 * E18)

        receipt = retargeted_pool.swap_towards_target(ASSET_C, 1)

        assert receipt.basket_minted == 2 * 10**12
        assert receipt.bounty_paid == 10**12
        assert retargeted_pool.equalization_bounty == 5 * E18 - 10**12

    def test_dust_deposit_earns_no_bounty(self, retargeted_pool):
        """One native unit of the 20-decimal asset is below one canonical unit."""
        retargeted_pool.increase_equalization_bounty(10_000 * E18)

        receipt = retargeted_pool.swap_towards_target(ASSET_B, 1)

        assert receipt.basket_minted == 0
        assert receipt.bounty_paid == 0
        assert retargeted_pool.equalization_bounty == 10_000 * E18


class TestEqualizeToTarget:
    """Tests for equalizing one asset or the whole pool."""

    def test_whole_pool(self, retargeted_pool):
        retargeted_pool.increase_equalization_bounty(1000 * E18)
        vector = retargeted_pool.get_equalization_vector()

        receipt = retargeted_pool.equalize_to_target()

        assert retargeted_pool.is_equalized()
        assert retargeted_pool.specific_reserves(ASSET_A) == 0
        assert retargeted_pool.native_reserves(ASSET_A) == 0
        assert len(receipt.legs) == 3
        assert receipt.bounty_paid == 1000 * E18
        assert receipt.basket_minted - receipt.basket_burned == sum(vector.values()) + 1000 * E18
        assert retargeted_pool.equalization_bounty == 0

    def test_whole_pool_bounty_capped_by_discrepancy(self, retargeted_pool):
        """Closing a small residual discrepancy earns only that much bounty."""
        native = retargeted_pool.native_reserves(ASSET_A)
        retargeted_pool.swap_towards_target(ASSET_A, -(native - 100))
        retargeted_pool.increase_equalization_bounty(5 * E18)
        discrepancy = retargeted_pool.total_reserves_discrepancy()
        assert not retargeted_pool.is_equalized()
        assert discrepancy < 5 * E18

        receipt = retargeted_pool.equalize_to_target()

        assert retargeted_pool.is_equalized()
        assert receipt.bounty_paid == discrepancy
        assert retargeted_pool.equalization_bounty == 5 * E18 - discrepancy

    def test_single_asset_withdrawal(self, retargeted_pool):
        receipt = retargeted_pool.equalize_to_target(ASSET_A)
        assert receipt.leg(ASSET_A).canonical < 0
        assert retargeted_pool.specific_reserves(ASSET_A) == 0

        with pytest.raises(TargetAllocationError, match="already at its target"):
            retargeted_pool.equalize_to_target(ASSET_A)

    def test_single_asset_deposit(self, retargeted_pool):
        receipt = retargeted_pool.equalize_to_target(ASSET_B)
        assert receipt.leg(ASSET_B).canonical > 0
        assert abs(retargeted_pool.get_equalization_vector()[ASSET_B]) <= 1

    def test_full_target_cannot_be_reached(self):
        pool = ReservePool([make_asset_config(target="1")])
        pool.mint(E18)
        with pytest.raises(TargetAllocationError, match="cannot be reached"):
            pool.equalize_to_target(ASSET_A)
