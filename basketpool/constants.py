"""Fixed-point widths and pool-wide constants.

Canonical fixed-point values are integers scaled by 2^128. Tick parameters are
stored in narrower packed widths and converted to the canonical scale with a
plain bit shift.
"""

# Canonical fixed-point scale (Q128)
SHIFT = 128
ONE = 1 << SHIFT

# Largest value a 256-bit word can hold; also the "unbounded" deposit limit
UINT256_MAX = 2**256 - 1

# Allocation: 0.88 unsigned. The all-ones sentinel stands for 1.0.
ALLOCATION_BITS = 88
ALLOCATION_SHIFT = SHIFT - ALLOCATION_BITS
ALLOCATION_ONE = (1 << ALLOCATION_BITS) - 1

# Price: 1.31 unsigned
PRICE_FRACTION_BITS = 31
PRICE_SHIFT = SHIFT - PRICE_FRACTION_BITS
PRICE_MAX = (1 << 32) - 1

# Price slope: 7.41 unsigned
SLOPE_FRACTION_BITS = 41
SLOPE_SHIFT = SHIFT - SLOPE_FRACTION_BITS
SLOPE_MAX = (1 << 48) - 1

# Fee: 0.32 unsigned
FEE_FRACTION_BITS = 32
FEE_SHIFT = SHIFT - FEE_FRACTION_BITS
FEE_MAX = (1 << 32) - 1

# Every asset's canonical balance uses this many fractional decimal digits,
# which is also the precision of the basket unit
CANONICAL_DECIMALS = 18

# Upper bound on Newton refinements when inverting the step integral
MAX_NEWTON_ITERATIONS = 128
