"""Shared type definitions for the request and configuration models."""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from basketpool.constants import UINT256_MAX


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 cannot be a boolean")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


def validate_unit_fraction(value: Any) -> str:
    """Validate a decimal fraction in [0, 1] given as string or number.

    Floats are rejected; they cannot represent most fractions exactly.
    """
    if isinstance(value, float):
        raise ValueError("fractions must be decimal strings, not floats")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as err:
        raise ValueError(f"not a decimal number: '{value}'") from err
    if not parsed.is_finite() or not 0 <= parsed <= 1:
        raise ValueError(f"fraction must be within [0, 1]: {value}")
    return str(parsed)


def validate_price(value: Any) -> str:
    """Validate a non-negative decimal price below 2.0 (the packed 1.31 range)."""
    if isinstance(value, float):
        raise ValueError("prices must be decimal strings, not floats")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as err:
        raise ValueError(f"not a decimal number: '{value}'") from err
    if not parsed.is_finite() or not 0 < parsed < 2:
        raise ValueError(f"price must be within (0, 2): {value}")
    return str(parsed)


# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Fraction in [0, 1] as decimal string, e.g. "0.333"
UnitFraction = Annotated[
    str,
    BeforeValidator(validate_unit_fraction),
    Field(description="Decimal fraction in [0, 1]"),
]

# Price in (0, 2) as decimal string, e.g. "1.001"
Price = Annotated[
    str,
    BeforeValidator(validate_price),
    Field(description="Decimal price in (0, 2)"),
]

# Asset identifier (token address or symbol)
AssetId = Annotated[str, Field(min_length=1, max_length=128)]
