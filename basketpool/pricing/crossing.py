"""Multi-tick crossing.

Extends the single-tick step pricer to operations large enough to cross one or
more tick boundaries. Each loop iteration either settles the residual inside
the current tick or settles exactly up to the tick's boundary, advances the
reserve levels to that boundary and moves to the neighbouring tick. The loop
runs at most once per tick, independent of the amount.

Running past the first or last configured tick is a hard failure
(PoolMathError), never a clamp.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from basketpool.constants import UINT256_MAX
from basketpool.errors import PoolMathError
from basketpool.pricing.step import (
    calc_step_burn,
    calc_step_deposit,
    calc_step_max_deposit,
    calc_step_max_withdrawal,
    calc_step_mint,
    calc_step_withdrawal,
)
from basketpool.pricing.ticks import AssetConfig, TickPosition, locate_tick

logger = structlog.get_logger()

__all__ = [
    "CrossingResult",
    "compute_mint_given_deposit",
    "compute_deposit_given_mint",
    "compute_withdrawal_given_burn",
    "compute_burn_given_withdrawal",
]


@dataclass(frozen=True)
class CrossingResult:
    """Outcome of a (possibly multi-tick) pricing computation.

    Attributes:
        amount: Solved side of the operation, summed over every crossed tick
        fee: Basket-unit fee, summed over every crossed tick
        start_tick: Tick index the computation started in
        end_tick: Tick index the computation finished in
    """

    amount: int
    fee: int
    start_tick: int
    end_tick: int

    @property
    def ticks_crossed(self) -> int:
        return abs(self.end_tick - self.start_tick)


def _start_index_for_increase(config: AssetConfig, specific_reserves: int, total_reserves: int) -> int:
    """Tick an allocation-increasing operation starts in.

    Starting below the domain is allowed (the operation moves towards it);
    starting above the maximum is not.
    """
    location = locate_tick(config, specific_reserves, total_reserves)
    if location.position is TickPosition.ABOVE_DOMAIN:
        raise PoolMathError(f"{config.asset}: allocation already above max allocation")
    return location.index


def _start_index_for_decrease(config: AssetConfig, specific_reserves: int, total_reserves: int) -> int:
    """Tick an allocation-decreasing operation starts in."""
    location = locate_tick(config, specific_reserves, total_reserves)
    if location.position is TickPosition.BELOW_DOMAIN:
        raise PoolMathError(f"{config.asset}: allocation already below min allocation")
    return location.index


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise PoolMathError(f"amount cannot be negative: {amount}")


def compute_mint_given_deposit(
    config: AssetConfig, specific_reserves: int, total_reserves: int, deposit: int
) -> CrossingResult:
    """Basket units minted for depositing an asset.

    Args:
        config: Configuration of the deposited asset
        specific_reserves: Canonical reserves of the asset before the deposit
        total_reserves: Canonical reserves of the pool before the deposit
        deposit: Canonical amount deposited

    Returns:
        CrossingResult with the net minted amount and the total fee

    Raises:
        PoolMathError: If the deposit would push the allocation past the max
    """
    _check_amount(deposit)
    index = start = _start_index_for_increase(config, specific_reserves, total_reserves)
    last = config.tick_count - 1
    r, total, remaining = specific_reserves, total_reserves, deposit
    minted = fee = 0

    while True:
        tick = config.ticks[index]
        capacity = calc_step_max_deposit(tick.upper_allocation, r, total)
        if remaining <= capacity:
            step = calc_step_mint(tick, r, total, remaining)
            return CrossingResult(minted + step.amount, fee + step.fee, start, index)

        step = calc_step_mint(tick, r, total, capacity)
        minted += step.amount
        fee += step.fee
        r += capacity
        total += capacity
        remaining -= capacity
        if index == last:
            raise PoolMathError(f"{config.asset}: deposit crosses past the last tick")
        index += 1
        logger.debug("tick_crossed", asset=config.asset, direction="up", tick=index)


def compute_deposit_given_mint(
    config: AssetConfig, specific_reserves: int, total_reserves: int, mint: int
) -> CrossingResult:
    """Deposit required to mint a net amount of basket units.

    Args:
        config: Configuration of the deposited asset
        specific_reserves: Canonical reserves of the asset before the deposit
        total_reserves: Canonical reserves of the pool before the deposit
        mint: Net basket units to mint

    Returns:
        CrossingResult with the required canonical deposit and the total fee

    Raises:
        PoolMathError: If the mint cannot be reached below the max allocation
    """
    _check_amount(mint)
    index = start = _start_index_for_increase(config, specific_reserves, total_reserves)
    last = config.tick_count - 1
    r, total, remaining = specific_reserves, total_reserves, mint
    deposit = fee = 0

    while True:
        tick = config.ticks[index]
        capacity = calc_step_max_deposit(tick.upper_allocation, r, total)
        if capacity == UINT256_MAX:
            step = calc_step_deposit(tick, r, total, remaining)
            return CrossingResult(deposit + step.amount, fee + step.fee, start, index)

        full = calc_step_mint(tick, r, total, capacity)
        if remaining <= full.amount:
            # the whole capacity already mints enough
            step = calc_step_deposit(tick, r, total, remaining)
            amount = min(step.amount, capacity)
            return CrossingResult(deposit + amount, fee + step.fee, start, index)

        deposit += capacity
        fee += full.fee
        r += capacity
        total += capacity
        remaining -= full.amount
        if index == last:
            raise PoolMathError(f"{config.asset}: deposit crosses past the last tick")
        index += 1
        logger.debug("tick_crossed", asset=config.asset, direction="up", tick=index)


def compute_withdrawal_given_burn(
    config: AssetConfig, specific_reserves: int, total_reserves: int, burn: int
) -> CrossingResult:
    """Asset withdrawn for burning basket units.

    Args:
        config: Configuration of the withdrawn asset
        specific_reserves: Canonical reserves of the asset before the withdrawal
        total_reserves: Canonical reserves of the pool before the withdrawal
        burn: Basket units burned, fee included

    Returns:
        CrossingResult with the canonical withdrawal and the total fee

    Raises:
        PoolMathError: If the burn would push the allocation below the first tick
    """
    _check_amount(burn)
    index = start = _start_index_for_decrease(config, specific_reserves, total_reserves)
    r, total, remaining = specific_reserves, total_reserves, burn
    withdrawn = fee = 0

    while True:
        tick = config.ticks[index]
        capacity = calc_step_max_withdrawal(tick.lower_allocation, r, total)
        full = calc_step_burn(tick, r, total, capacity)
        if remaining <= full.amount:
            step = calc_step_withdrawal(tick, r, total, remaining)
            return CrossingResult(withdrawn + step.amount, fee + step.fee, start, index)

        withdrawn += capacity
        fee += full.fee
        r -= capacity
        total -= capacity
        remaining -= full.amount
        if index == 0:
            raise PoolMathError(f"{config.asset}: withdrawal crosses past the first tick")
        index -= 1
        logger.debug("tick_crossed", asset=config.asset, direction="down", tick=index)


def compute_burn_given_withdrawal(
    config: AssetConfig, specific_reserves: int, total_reserves: int, withdrawal: int
) -> CrossingResult:
    """Basket units that must be burned to withdraw an amount of an asset.

    Args:
        config: Configuration of the withdrawn asset
        specific_reserves: Canonical reserves of the asset before the withdrawal
        total_reserves: Canonical reserves of the pool before the withdrawal
        withdrawal: Canonical amount to withdraw

    Returns:
        CrossingResult with the total burn (fees included) and the total fee

    Raises:
        PoolMathError: If the withdrawal exceeds the reserves or would push the
            allocation below the first tick
    """
    _check_amount(withdrawal)
    if withdrawal > specific_reserves:
        raise PoolMathError(f"{config.asset}: withdrawal {withdrawal} exceeds reserves")
    index = start = _start_index_for_decrease(config, specific_reserves, total_reserves)
    r, total, remaining = specific_reserves, total_reserves, withdrawal
    burned = fee = 0

    while True:
        tick = config.ticks[index]
        capacity = calc_step_max_withdrawal(tick.lower_allocation, r, total)
        if remaining <= capacity:
            step = calc_step_burn(tick, r, total, remaining)
            return CrossingResult(burned + step.amount, fee + step.fee, start, index)

        step = calc_step_burn(tick, r, total, capacity)
        burned += step.amount
        fee += step.fee
        r -= capacity
        total -= capacity
        remaining -= capacity
        if index == 0:
            raise PoolMathError(f"{config.asset}: withdrawal crosses past the first tick")
        index -= 1
        logger.debug("tick_crossed", asset=config.asset, direction="down", tick=index)
