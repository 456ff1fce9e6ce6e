"""Single-tick step pricer.

Inside one tick the price is linear in allocation:

    price(a) = P - S * (a - L)

where L is the tick's lower edge, P its base price and S its slope. Depositing
t units into an asset with reserves r out of total reserves R moves its
allocation along a(t) = (r + t) / (R + t) = 1 - d / (R + t) with d = R - r, so
the basket units minted by a deposit of x integrate in closed form:

    I(x) = K * x + S * d * ln((R + x) / R),     K = P - S * (1 - L)

and the basket units burned by a withdrawal of x are

    B(x) = K * x + S * d * ln(R / (R - x)).

Neither integral has an elementary inverse (solving for x needs the Lambert W
function), so the inverse direction is computed iteratively rather than in
closed form. I is increasing and concave, B increasing and convex, which makes
Newton's method monotone there: iterates approach the root from below for
deposits and from above for withdrawals. Each step is rounded in the pool's
favour, so the loop ends on the first iterate that satisfies the target, and
it is capped at MAX_NEWTON_ITERATIONS.

Amounts are canonical-scale integers; prices, slopes and fees are Q128.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from basketpool.constants import ALLOCATION_ONE, MAX_NEWTON_ITERATIONS, ONE, UINT256_MAX
from basketpool.errors import PoolMathError
from basketpool.math.fixed_point import (
    allocation_to_fixed,
    mul_div,
    mul_div_up,
    mul_down,
    mul_up,
)
from basketpool.math.log import ln_ratio
from basketpool.pricing.ticks import TickBoundary, allocation_fixed, allocation_fraction

__all__ = [
    "StepResult",
    "calc_price",
    "calc_step_max_deposit",
    "calc_step_max_withdrawal",
    "calc_step_mint",
    "calc_step_deposit",
    "calc_step_withdrawal",
    "calc_step_burn",
    "deposit_integral",
    "withdrawal_integral",
]


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single-tick computation.

    Attributes:
        amount: The solved side of the operation (basket units minted or
            burned, or asset units deposited or withdrawn)
        fee: Basket units charged as fee
    """

    amount: int
    fee: int


# =============================================================================
# Price curve
# =============================================================================


def _linear_coefficient(tick: TickBoundary) -> int:
    """K = P - S * (1 - L) as a signed Q128 value."""
    return tick.price - mul_up(tick.slope, ONE - tick.lower)


def _marginal_price(k: int, slope: int, distance: int, total_reserves: int) -> int:
    """Price at allocation 1 - distance / total_reserves, as Q128."""
    return k + (slope * distance) // total_reserves


def calc_price(tick: TickBoundary, specific_reserves: int, total_reserves: int) -> int:
    """Spot price of an asset inside a tick.

    Args:
        tick: Tick the allocation is expected to be in
        specific_reserves: Canonical reserves of the asset
        total_reserves: Canonical reserves of the pool

    Returns:
        Price as Q128

    Raises:
        PoolMathError: If the allocation is outside [lower, upper)
    """
    allocation = allocation_fraction(specific_reserves, total_reserves)
    if not Fraction(tick.lower, ONE) <= allocation < Fraction(tick.upper, ONE):
        raise PoolMathError(f"allocation {float(allocation):.18f} outside tick range")
    offset = allocation_fixed(specific_reserves, total_reserves) - tick.lower
    return tick.price - mul_down(tick.slope, offset)


# =============================================================================
# Boundary capacity
# =============================================================================


def calc_step_max_deposit(boundary: int, specific_reserves: int, total_reserves: int) -> int:
    """Largest deposit that keeps the allocation at or below a boundary.

    Solves (r + x) / (R + x) = b, floored so the result never overshoots.

    Args:
        boundary: Packed 0.88 allocation boundary
        specific_reserves: Canonical reserves of the asset
        total_reserves: Canonical reserves of the pool

    Returns:
        Deposit limit in canonical units; UINT256_MAX when the boundary is
        1.0, zero when the boundary is zero or already behind the allocation
    """
    if boundary >= ALLOCATION_ONE:
        return UINT256_MAX
    if boundary <= 0:
        return 0
    b = allocation_to_fixed(boundary)
    numerator = b * total_reserves - specific_reserves * ONE
    if numerator <= 0:
        return 0
    return numerator // (ONE - b)


def calc_step_max_withdrawal(boundary: int, specific_reserves: int, total_reserves: int) -> int:
    """Largest withdrawal that keeps the allocation at or above a boundary.

    Solves (r - x) / (R - x) = b, floored so the result never overshoots.

    Args:
        boundary: Packed 0.88 allocation boundary
        specific_reserves: Canonical reserves of the asset
        total_reserves: Canonical reserves of the pool

    Returns:
        Withdrawal limit in canonical units; the whole balance when the
        boundary is zero
    """
    if boundary <= 0:
        return specific_reserves
    if boundary >= ALLOCATION_ONE:
        return 0
    b = allocation_to_fixed(boundary)
    numerator = specific_reserves * ONE - b * total_reserves
    if numerator <= 0:
        return 0
    return min(numerator // (ONE - b), specific_reserves)


# =============================================================================
# Closed-form integrals
# =============================================================================


def _combine(linear: int, logarithmic: int, round_up: bool) -> int:
    """(linear * ONE + logarithmic) / ONE^2 with directed rounding."""
    numerator = linear * ONE + logarithmic
    if round_up:
        return -((-numerator) // (ONE * ONE))
    return numerator // (ONE * ONE)


def deposit_integral(
    tick: TickBoundary,
    specific_reserves: int,
    total_reserves: int,
    amount: int,
    *,
    round_up: bool = False,
) -> int:
    """Gross basket units for depositing amount into the tick, before fees."""
    if amount == 0:
        return 0
    k = _linear_coefficient(tick)
    distance = total_reserves - specific_reserves
    logarithmic = 0
    if tick.slope and distance > 0:
        log_value = ln_ratio(total_reserves + amount, total_reserves)
        logarithmic = tick.slope * distance * log_value
    return _combine(k * amount, logarithmic, round_up)


def withdrawal_integral(
    tick: TickBoundary,
    specific_reserves: int,
    total_reserves: int,
    amount: int,
    *,
    round_up: bool = False,
) -> int:
    """Gross basket units for withdrawing amount from the tick, before fees."""
    if amount == 0:
        return 0
    if amount > specific_reserves:
        raise PoolMathError(f"withdrawal {amount} exceeds reserves {specific_reserves}")
    k = _linear_coefficient(tick)
    distance = total_reserves - specific_reserves
    logarithmic = 0
    if tick.slope and distance > 0:
        log_value = ln_ratio(total_reserves, total_reserves - amount)
        logarithmic = tick.slope * distance * log_value
    return _combine(k * amount, logarithmic, round_up)


def _require_positive(price: int) -> int:
    if price <= 0:
        raise PoolMathError(f"non-positive price in tick: {price}")
    return price


def _invert_deposit(tick: TickBoundary, specific_reserves: int, total_reserves: int, target: int) -> int:
    """Smallest deposit whose gross integral reaches target."""
    if target == 0:
        return 0
    k = _linear_coefficient(tick)
    slope = tick.slope
    distance = total_reserves - specific_reserves
    if slope == 0 or distance <= 0:
        return mul_div_up(target, ONE, _require_positive(k))

    start_price = _require_positive(_marginal_price(k, slope, distance, total_reserves))
    x = mul_div(target, ONE, start_price)
    for _ in range(MAX_NEWTON_ITERATIONS):
        value = deposit_integral(tick, specific_reserves, total_reserves, x)
        if value >= target:
            return x
        price = _require_positive(_marginal_price(k, slope, distance, total_reserves + x))
        x += mul_div_up(target - value, ONE, price)
    raise PoolMathError("deposit inverse did not converge")


def _invert_withdrawal(
    tick: TickBoundary, specific_reserves: int, total_reserves: int, target: int
) -> int:
    """Largest withdrawal whose gross integral stays within target."""
    if target == 0:
        return 0
    k = _linear_coefficient(tick)
    slope = tick.slope
    distance = total_reserves - specific_reserves
    if slope == 0 or distance <= 0:
        return min(mul_div(target, ONE, _require_positive(k)), specific_reserves)

    start_price = _require_positive(_marginal_price(k, slope, distance, total_reserves))
    x = min(mul_div(target, ONE, start_price), specific_reserves)
    for _ in range(MAX_NEWTON_ITERATIONS):
        value = withdrawal_integral(tick, specific_reserves, total_reserves, x, round_up=True)
        if value <= target:
            return x
        price = _require_positive(_marginal_price(k, slope, distance, total_reserves - x))
        x = max(x - mul_div_up(value - target, ONE, price), 0)
    raise PoolMathError("withdrawal inverse did not converge")


def _fee_on_top(amount: int, fee: int) -> int:
    """Fee that, added to amount, makes fee a fraction fee of the total."""
    if fee >= ONE:
        raise PoolMathError(f"fee fraction must be below 1.0: {fee}")
    return mul_div_up(amount, fee, ONE - fee)


# =============================================================================
# Step operations
# =============================================================================


def calc_step_mint(
    tick: TickBoundary, specific_reserves: int, total_reserves: int, deposit: int
) -> StepResult:
    """Basket units minted for a deposit that stays inside the tick.

    The increase fee is deducted from the gross output, so the minted amount
    plus the fee always equals the gross integral.

    Returns:
        StepResult with the net minted amount and the fee
    """
    gross = deposit_integral(tick, specific_reserves, total_reserves, deposit)
    if gross < 0:
        raise PoolMathError("negative mint output")
    fee = mul_up(gross, tick.increase_fee_fixed)
    return StepResult(amount=gross - fee, fee=fee)


def calc_step_deposit(
    tick: TickBoundary, specific_reserves: int, total_reserves: int, mint: int
) -> StepResult:
    """Deposit required for a net mint that stays inside the tick.

    Returns:
        StepResult with the required deposit and the fee
    """
    fee = _fee_on_top(mint, tick.increase_fee_fixed)
    deposit = _invert_deposit(tick, specific_reserves, total_reserves, mint + fee)
    return StepResult(amount=deposit, fee=fee)


def calc_step_withdrawal(
    tick: TickBoundary, specific_reserves: int, total_reserves: int, burn: int
) -> StepResult:
    """Withdrawal paid out for burning basket units inside the tick.

    The decrease fee is taken from the burned amount before solving for the
    withdrawal, mirroring calc_step_burn.

    Returns:
        StepResult with the withdrawn amount and the fee
    """
    fee = mul_up(burn, tick.decrease_fee_fixed)
    withdrawal = _invert_withdrawal(tick, specific_reserves, total_reserves, burn - fee)
    return StepResult(amount=withdrawal, fee=fee)


def calc_step_burn(
    tick: TickBoundary, specific_reserves: int, total_reserves: int, withdrawal: int
) -> StepResult:
    """Basket units burned for a withdrawal that stays inside the tick.

    Returns:
        StepResult with the total burn (gross plus fee) and the fee
    """
    gross = withdrawal_integral(tick, specific_reserves, total_reserves, withdrawal, round_up=True)
    if gross < 0:
        raise PoolMathError("negative burn input")
    fee = _fee_on_top(gross, tick.decrease_fee_fixed)
    return StepResult(amount=gross + fee, fee=fee)
