"""Q128 fixed-point arithmetic and packed-field conversions.

Canonical values are integers scaled by 2^128 (``ONE``). Tick parameters are
stored in narrower packed widths (allocation 0.88, price 1.31, slope 7.41,
fee 0.32) and widened to the canonical scale with a left shift.

Token amounts are plain integers in their own decimal precision;
``scale_decimals`` is the only place a native precision meets the canonical
18-digit precision shared by every asset.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, localcontext

from basketpool.constants import (
    ALLOCATION_ONE,
    ALLOCATION_SHIFT,
    FEE_MAX,
    FEE_SHIFT,
    ONE,
    PRICE_MAX,
    PRICE_SHIFT,
    SLOPE_MAX,
    SLOPE_SHIFT,
)
from basketpool.errors import PoolMathError

__all__ = [
    # Arithmetic
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "mul_div",
    "mul_div_up",
    "div_trunc",
    "complement",
    # Decimal conversion
    "decimal_to_fixed",
    "fixed_to_decimal",
    "scale_decimals",
    # Packed fields
    "allocation_to_fixed",
    "allocation_from_fixed",
    "allocation_from_decimal",
    "allocation_to_decimal",
    "price_to_fixed",
    "price_from_fixed",
    "price_from_decimal",
    "slope_to_fixed",
    "slope_from_fixed",
    "fee_to_fixed",
    "fee_from_fixed",
    "fee_from_decimal",
]

# Decimal precision used when converting to and from Q128
_DECIMAL_PRECISION = 80


# =============================================================================
# Arithmetic
# =============================================================================


def div_trunc(a: int, b: int) -> int:
    """Integer division truncating toward zero.

    Python's // floors toward negative infinity. The logarithm series relies
    on symmetric truncation so that ln(1/x) == -ln(x) up to one unit.

    Raises:
        PoolMathError: If b is zero
    """
    if b == 0:
        raise PoolMathError("division by zero")
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def mul_down(a: int, b: int) -> int:
    """Multiply two Q128 values, rounding toward negative infinity."""
    return (a * b) >> 128


def mul_up(a: int, b: int) -> int:
    """Multiply two Q128 values, rounding toward positive infinity."""
    return -((-(a * b)) >> 128)


def div_down(a: int, b: int) -> int:
    """Divide two Q128 values, rounding toward negative infinity.

    Raises:
        PoolMathError: If b is zero
    """
    if b == 0:
        raise PoolMathError("division by zero")
    return (a * ONE) // b


def div_up(a: int, b: int) -> int:
    """Divide two Q128 values, rounding toward positive infinity.

    Raises:
        PoolMathError: If b is zero
    """
    if b == 0:
        raise PoolMathError("division by zero")
    return -((-(a * ONE)) // b)


def mul_div(a: int, b: int, c: int) -> int:
    """Compute floor(a * b / c) without intermediate truncation.

    Raises:
        PoolMathError: If c is zero
    """
    if c == 0:
        raise PoolMathError("division by zero")
    return (a * b) // c


def mul_div_up(a: int, b: int, c: int) -> int:
    """Compute ceil(a * b / c) without intermediate truncation.

    Raises:
        PoolMathError: If c is zero
    """
    if c == 0:
        raise PoolMathError("division by zero")
    return -((-(a * b)) // c)


def complement(x: int) -> int:
    """Return ONE - x, clamped at zero."""
    return ONE - x if x < ONE else 0


# =============================================================================
# Decimal conversion
# =============================================================================


def decimal_to_fixed(value: Decimal | int | str) -> int:
    """Convert a decimal number to Q128, flooring.

    Args:
        value: Decimal, int, or decimal string (e.g. "1.001")

    Returns:
        floor(value * 2^128)
    """
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        scaled = Decimal(value) * ONE
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def fixed_to_decimal(value: int) -> Decimal:
    """Convert a Q128 value to a Decimal."""
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        return Decimal(value) / ONE


def scale_decimals(amount: int, from_digits: int, to_digits: int, *, round_up: bool = False) -> int:
    """Rescale an integer amount between decimal precisions.

    Multiplies or divides by a power of ten. Precision loss floors unless
    round_up is set.

    Examples:
        scale_decimals(10, 18, 18) == 10
        scale_decimals(10, 18, 20) == 1000
        scale_decimals(10, 18, 17) == 1

    Args:
        amount: Amount expressed with from_digits fractional digits
        from_digits: Source decimal precision
        to_digits: Target decimal precision
        round_up: Round toward positive infinity on precision loss

    Returns:
        Amount expressed with to_digits fractional digits
    """
    if from_digits > to_digits:
        factor = 10 ** (from_digits - to_digits)
        if round_up:
            return -((-amount) // factor)
        return amount // factor
    if from_digits < to_digits:
        return amount * 10 ** (to_digits - from_digits)
    return amount


# =============================================================================
# Packed fields
# =============================================================================


def allocation_to_fixed(allocation: int) -> int:
    """Widen a packed 0.88 allocation to Q128.

    The all-ones sentinel ALLOCATION_ONE widens to exactly ONE.
    """
    if allocation >= ALLOCATION_ONE:
        return ONE
    return allocation << ALLOCATION_SHIFT


def allocation_from_fixed(value: int) -> int:
    """Narrow a Q128 allocation to the packed 0.88 width (floor, capped at 1.0)."""
    if value >= ONE:
        return ALLOCATION_ONE
    return max(value, 0) >> ALLOCATION_SHIFT


def allocation_from_decimal(value: Decimal | int | str) -> int:
    """Pack a decimal allocation fraction (e.g. "0.333") to 0.88."""
    return allocation_from_fixed(decimal_to_fixed(value))


def allocation_to_decimal(allocation: int) -> Decimal:
    """Unpack a 0.88 allocation to a Decimal fraction."""
    return fixed_to_decimal(allocation_to_fixed(allocation))


def price_to_fixed(price: int) -> int:
    """Widen a packed 1.31 price to Q128."""
    return price << PRICE_SHIFT


def price_from_fixed(value: int) -> int:
    """Narrow a Q128 price to the packed 1.31 width.

    Raises:
        PoolMathError: If the price does not fit in 1.31
    """
    packed = value >> PRICE_SHIFT
    if not 0 <= packed <= PRICE_MAX:
        raise PoolMathError(f"price out of packed range: {value}")
    return packed


def price_from_decimal(value: Decimal | int | str) -> int:
    """Pack a decimal price (e.g. "1.001") to 1.31."""
    return price_from_fixed(decimal_to_fixed(value))


def slope_to_fixed(slope: int) -> int:
    """Widen a packed 7.41 price slope to Q128."""
    return slope << SLOPE_SHIFT


def slope_from_fixed(value: int) -> int:
    """Narrow a Q128 price slope to the packed 7.41 width.

    Raises:
        PoolMathError: If the slope is negative or does not fit in 7.41
    """
    packed = value >> SLOPE_SHIFT
    if not 0 <= packed <= SLOPE_MAX:
        raise PoolMathError(f"price slope out of packed range: {value}")
    return packed


def fee_to_fixed(fee: int) -> int:
    """Widen a packed 0.32 fee fraction to Q128."""
    return fee << FEE_SHIFT


def fee_from_fixed(value: int) -> int:
    """Narrow a Q128 fee fraction to the packed 0.32 width.

    Raises:
        PoolMathError: If the fee is negative or not below 1.0
    """
    packed = value >> FEE_SHIFT
    if not 0 <= packed <= FEE_MAX:
        raise PoolMathError(f"fee out of packed range: {value}")
    return packed


def fee_from_decimal(value: Decimal | int | str) -> int:
    """Pack a decimal fee fraction (e.g. "0.0001") to 0.32."""
    return fee_from_fixed(decimal_to_fixed(value))
