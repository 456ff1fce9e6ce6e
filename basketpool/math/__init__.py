"""Fixed-point primitives for pool pricing.

- fixed_point: Q128 arithmetic, packed-field widths, decimal rescaling
- log: natural and base-2 logarithm approximations
"""

from basketpool.math.fixed_point import (
    allocation_from_decimal,
    allocation_to_fixed,
    decimal_to_fixed,
    fee_from_decimal,
    fixed_to_decimal,
    price_from_decimal,
    scale_decimals,
)
from basketpool.math.log import ln, ln_ratio, log2

__all__ = [
    "allocation_from_decimal",
    "allocation_to_fixed",
    "decimal_to_fixed",
    "fee_from_decimal",
    "fixed_to_decimal",
    "price_from_decimal",
    "scale_decimals",
    "ln",
    "ln_ratio",
    "log2",
]
