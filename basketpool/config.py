"""Pool-wide settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from basketpool.constants import ONE
from basketpool.errors import ConfigurationError
from basketpool.math.fixed_point import decimal_to_fixed


@dataclass(frozen=True)
class PoolSettings:
    """Settings for the proportional mint/burn path and the reserve cap.

    Fees are Q128 fractions. Tick-priced operations carry their own fees in
    the tick tables and ignore mint_fee/burn_fee.

    Attributes:
        mint_fee: Fee charged on top of a proportional mint (default: 0)
        burn_fee: Fee deducted from a proportional burn (default: 0)
        max_reserves: Cap on total canonical reserves, or None for no cap
    """

    mint_fee: int = 0
    burn_fee: int = 0
    max_reserves: int | None = None

    def __post_init__(self) -> None:
        for name in ("mint_fee", "burn_fee"):
            value = getattr(self, name)
            if not 0 <= value < ONE:
                raise ConfigurationError(f"{name} must be in [0, 1): {value}")
        if self.max_reserves is not None and self.max_reserves < 0:
            raise ConfigurationError(f"max_reserves cannot be negative: {self.max_reserves}")

    @classmethod
    def from_env(cls) -> PoolSettings:
        """Build settings from environment variables.

        - BASKETPOOL_MINT_FEE: proportional mint fee as a decimal (default: 0)
        - BASKETPOOL_BURN_FEE: proportional burn fee as a decimal (default: 0)
        - BASKETPOOL_MAX_RESERVES: canonical reserve cap (default: unset)
        """
        max_reserves = os.environ.get("BASKETPOOL_MAX_RESERVES")
        try:
            return cls(
                mint_fee=decimal_to_fixed(os.environ.get("BASKETPOOL_MINT_FEE", "0")),
                burn_fee=decimal_to_fixed(os.environ.get("BASKETPOOL_BURN_FEE", "0")),
                max_reserves=int(max_reserves) if max_reserves else None,
            )
        except ConfigurationError:
            raise
        except (ArithmeticError, ValueError) as err:
            raise ConfigurationError(f"invalid pool settings in environment: {err}") from err


# Default configuration instance
DEFAULT_POOL_SETTINGS = PoolSettings()
