"""Tests for pricing across tick boundaries."""

from decimal import Decimal, localcontext

import pytest

from basketpool.constants import ONE
from basketpool.errors import PoolMathError
from basketpool.pricing.crossing import (
    compute_burn_given_withdrawal,
    compute_deposit_given_mint,
    compute_mint_given_deposit,
    compute_withdrawal_given_burn,
)
from basketpool.pricing.step import calc_step_max_deposit, calc_step_mint
from tests.helpers import E18, is_close, make_asset_config, make_tick, max_crossing_deposit

R = 3 * 10**24


@pytest.fixture
def continuous_config():
    """Two ticks on one continuous price line 1 - 0.2 * allocation."""
    return make_asset_config(
        [
            make_tick("0", "0.5", "1", "0.2"),
            make_tick("0.5", "1", "0.9", "0.2"),
        ]
    )


@pytest.fixture
def capped_config():
    """Two ticks ending at a max allocation of 0.5."""
    return make_asset_config(
        [
            make_tick("0.1", "0.3", "1", "0.1"),
            make_tick("0.3", "0.5", "0.98", "0.1"),
        ],
        target="0.3",
    )


class TestDepositCrossing:
    """Tests for deposits spanning more than one tick."""

    def test_two_tick_deposit_is_sum_of_steps(self, continuous_config):
        """A crossing deposit mints what its per-tick pieces mint."""
        r, total, deposit = 4 * 10**17, E18, 3 * 10**17
        first, second = continuous_config.ticks

        result = compute_mint_given_deposit(continuous_config, r, total, deposit)

        capacity = calc_step_max_deposit(first.upper_allocation, r, total)
        assert 0 < capacity < deposit
        step0 = calc_step_mint(first, r, total, capacity)
        step1 = calc_step_mint(second, r + capacity, total + capacity, deposit - capacity)
        assert result.amount == step0.amount + step1.amount
        assert result.start_tick == 0
        assert result.end_tick == 1
        assert result.ticks_crossed == 1

    def test_two_tick_deposit_matches_reference_integral(self, continuous_config):
        """Crossing a boundary of a continuous curve gives the single integral."""
        r, total, deposit = 4 * 10**17, E18, 3 * 10**17
        with localcontext() as ctx:
            ctx.prec = 50
            distance = Decimal(total - r)
            log_term = (Decimal(total + deposit) / Decimal(total)).ln()
            expected = Decimal("0.8") * deposit + Decimal("0.2") * distance * log_term

        result = compute_mint_given_deposit(continuous_config, r, total, deposit)
        assert is_close(result.amount, expected)

    def test_deposit_up_to_max_allocation(self, capped_config):
        """Reaching the max allocation exactly succeeds; one unit more fails."""
        r, total = 2 * 10**17, E18
        first = capped_config.ticks[0]
        cap0 = calc_step_max_deposit(first.upper_allocation, r, total)
        cap1 = calc_step_max_deposit(capped_config.max_allocation, r + cap0, total + cap0)
        deposit = cap0 + cap1

        result = compute_mint_given_deposit(capped_config, r, total, deposit)
        assert result.end_tick == 1
        assert (r + deposit) * ONE <= capped_config.maximum * (total + deposit)

        with pytest.raises(PoolMathError):
            compute_mint_given_deposit(capped_config, r, total, deposit + 1)

    @pytest.mark.parametrize(
        "slope,second_price,r",
        [
            ("0.1", "0.98", 3 * 10**17 + 777),
            ("0.1", "0.98", 2 * 10**17),
            ("0.7", "0.86", 2 * 10**17),
            ("0.7", "0.86", 3 * 10**17 + 777),
            ("0.7", "0.86", 45 * 10**16 + 1),
        ],
    )
    def test_largest_mint_stays_within_max_allocation(self, slope, second_price, r):
        """Inverting the largest feasible mint never overshoots the max allocation."""
        config = make_asset_config(
            [
                make_tick("0.1", "0.3", "1", slope),
                make_tick("0.3", "0.5", second_price, slope),
            ],
            target="0.3",
        )
        total = E18
        limit = max_crossing_deposit(config, r, total)
        mint = compute_mint_given_deposit(config, r, total, limit).amount

        result = compute_deposit_given_mint(config, r, total, mint)

        assert result.amount <= limit
        assert (r + result.amount) * ONE <= config.maximum * (total + result.amount)
        assert compute_mint_given_deposit(config, r, total, result.amount).amount >= mint

    def test_mint_beyond_max_allocation_raises(self, capped_config):
        with pytest.raises(PoolMathError):
            compute_deposit_given_mint(capped_config, 2 * 10**17, E18, E18)

    def test_deposit_above_domain_raises(self, config_a):
        with pytest.raises(PoolMathError, match="above max allocation"):
            compute_mint_given_deposit(config_a, 18 * 10**23, R, E18)

    def test_deposit_below_domain_starts_in_first_tick(self, config_a):
        result = compute_mint_given_deposit(config_a, R // 20, R, R // 100)
        assert result.start_tick == 0
        assert result.amount > 0

    def test_zero_deposit_mints_nothing(self, config_a):
        result = compute_mint_given_deposit(config_a, 9 * 10**23, R, 0)
        assert result.amount == 0
        assert result.fee == 0

    def test_negative_amount_raises(self, config_a):
        with pytest.raises(PoolMathError):
            compute_mint_given_deposit(config_a, 9 * 10**23, R, -1)


class TestWithdrawalCrossing:
    """Tests for withdrawals spanning more than one tick."""

    def test_withdrawal_past_first_tick_raises(self, config_a):
        """Allocation 0.2 cannot fall to about 0.06 with a first tick at 0.111."""
        with pytest.raises(PoolMathError, match="first tick"):
            compute_burn_given_withdrawal(config_a, 6 * 10**23, R, 45 * 10**22)

    def test_burn_past_first_tick_raises(self, config_a):
        with pytest.raises(PoolMathError):
            compute_withdrawal_given_burn(config_a, 6 * 10**23, R, 10**30)

    def test_withdrawal_exceeding_reserves_raises(self, config_a):
        with pytest.raises(PoolMathError, match="exceeds reserves"):
            compute_burn_given_withdrawal(config_a, 10**20, R, 10**20 + 1)

    def test_withdrawal_above_domain_starts_in_last_tick(self, config_a):
        """An over-allocated asset can still be withdrawn."""
        result = compute_burn_given_withdrawal(config_a, 18 * 10**23, R, 6 * 10**23)
        assert result.start_tick == config_a.tick_count - 1
        assert result.end_tick == config_a.tick_count - 1

    def test_withdrawal_below_domain_raises(self, config_a):
        with pytest.raises(PoolMathError, match="below min allocation"):
            compute_withdrawal_given_burn(config_a, R // 20, R, E18)


class TestCrossingRoundTrips:
    """Tests that crossing inverses undo each other."""

    def test_deposit_round_trip_across_boundary(self, config_a):
        """Allocation 0.3 -> 0.4 crosses the 0.333 boundary."""
        r, deposit = 9 * 10**23, 5 * 10**23
        minted = compute_mint_given_deposit(config_a, r, R, deposit)
        assert (minted.start_tick, minted.end_tick) == (1, 2)

        required = compute_deposit_given_mint(config_a, r, R, minted.amount)
        assert is_close(required.amount, deposit)
        assert (required.start_tick, required.end_tick) == (1, 2)

    def test_withdrawal_round_trip_across_boundary(self, config_a):
        """Allocation 0.4 -> 0.25 crosses the 0.333 boundary."""
        r, withdrawal = 12 * 10**23, 6 * 10**23
        burned = compute_burn_given_withdrawal(config_a, r, R, withdrawal)
        assert (burned.start_tick, burned.end_tick) == (2, 1)

        paid = compute_withdrawal_given_burn(config_a, r, R, burned.amount)
        assert is_close(paid.amount, withdrawal)

    def test_fees_accumulate_over_ticks(self, config_a):
        """Fees of every crossed tick are charged."""
        r = 9 * 10**23
        crossing = compute_mint_given_deposit(config_a, r, R, 5 * 10**23)
        single = compute_mint_given_deposit(config_a, r, R, 10**22)
        assert single.ticks_crossed == 0
        assert crossing.fee > single.fee > 0
