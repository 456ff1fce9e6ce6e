"""Fixed-point logarithms over the Q128 domain.

ln(x) is computed by binary range reduction followed by an arctanh series:

    x = m * 2^k,  m in [sqrt(2)/2, sqrt(2))
    ln(x) = k * ln(2) + 2 * arctanh((m - 1) / (m + 1))

With |z| = |(m - 1)/(m + 1)| <= 0.1716 the series below is truncated after
the z^27 term, which leaves a truncation error under 1e-23. Together with the
per-term integer truncation and the rounding of LN2 the absolute error of
``ln`` is below ``LN_ERROR_BOUND`` (1e-20 in canonical units) for every input
in (0, 2^256). Results are truncated toward zero and are therefore not
directionally rounded; callers that need a conservative bound must widen by
LN_ERROR_BOUND themselves.
"""

from __future__ import annotations

from basketpool.constants import ONE, SHIFT, UINT256_MAX
from basketpool.errors import PoolMathError
from basketpool.math.fixed_point import div_trunc

__all__ = ["ln", "log2", "ln_ratio", "LN2", "LOG2_E", "LN_ERROR_BOUND"]

# ln(2) * 2^128, floored
LN2 = 235865763225513294137944142764154484399

# log2(e) * 2^128, floored
LOG2_E = 490923683258796565746369346286093237521

# sqrt(2) * 2^128, floored
SQRT2 = 481231938336009023090067544955250113854

# Absolute error bound of ln() in Q128 units (about 1e-20)
LN_ERROR_BOUND = ONE // 10**20

# Odd powers used by the arctanh series: z, z^3/3, ..., z^27/27
_SERIES_TERMS = range(3, 29, 2)


def ln(x: int) -> int:
    """Natural logarithm of a Q128 value.

    Args:
        x: Positive Q128 value in (0, 2^256)

    Returns:
        ln(x) as a signed Q128 value

    Raises:
        PoolMathError: If x is not positive or exceeds 256 bits
    """
    if x <= 0:
        raise PoolMathError(f"ln of non-positive value: {x}")
    if x > UINT256_MAX:
        raise PoolMathError(f"ln argument exceeds 256 bits: {x}")

    # Binary range reduction: m in [1, 2)
    k = x.bit_length() - 1 - SHIFT
    m = x >> k if k >= 0 else x << -k

    # Recentre around 1 so that |z| stays small
    if m >= SQRT2:
        m >>= 1
        k += 1

    z = div_trunc((m - ONE) * ONE, m + ONE)
    z_squared = (z * z) >> SHIFT

    term = z
    series_sum = z
    for i in _SERIES_TERMS:
        term = div_trunc(term * z_squared, ONE)
        series_sum += div_trunc(term, i)

    return k * LN2 + 2 * series_sum


def log2(x: int) -> int:
    """Base-2 logarithm of a Q128 value, as a signed Q128 value.

    Raises:
        PoolMathError: If x is not positive
    """
    return div_trunc(ln(x) * LOG2_E, ONE)


def ln_ratio(numerator: int, denominator: int) -> int:
    """ln(numerator / denominator) for two plain integers of the same unit.

    The ratio is formed at Q128 precision before taking the logarithm.

    Raises:
        PoolMathError: If either argument is not positive
    """
    if numerator <= 0 or denominator <= 0:
        raise PoolMathError(f"ln of non-positive ratio: {numerator}/{denominator}")
    return ln((numerator * ONE) // denominator)
