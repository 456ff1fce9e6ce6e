"""Pydantic models for authoring asset and tick configuration.

Tick tables are written as a list of price bounds: each bound gives an
allocation and the price at that allocation, and consecutive bounds define one
tick. The slope of a tick follows from its two bounds. The last bound sits at
the asset's max allocation.

Example:
    {
        "asset": "0xa814d1722125151c1bcd363e79a60d59bfb8f53e",
        "decimals": 18,
        "targetAllocation": "0.333333333333333333",
        "maxAllocation": "0.555555555555555555",
        "bounds": [
            {"allocation": "0.111111111111111111", "price": "1.01", "decreaseFee": "0.01"},
            {"allocation": "0.333333333333333333", "price": "1"},
            {"allocation": "0.555555555555555555", "price": "0.99"}
        ]
    }
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator

from basketpool.constants import ALLOCATION_ONE, ONE
from basketpool.errors import ConfigurationError
from basketpool.math.fixed_point import (
    allocation_from_decimal,
    decimal_to_fixed,
    fee_from_decimal,
    price_from_decimal,
    slope_from_fixed,
)
from basketpool.models.types import AssetId, Price, UnitFraction
from basketpool.pricing.ticks import AssetConfig, TickBoundary


class TickBoundSpec(BaseModel):
    """One price bound of a tick table.

    The fees apply to the tick that starts at this bound; they are ignored on
    the last bound.
    """

    allocation: UnitFraction
    price: Price
    increase_fee: UnitFraction = Field(default="0", alias="increaseFee")
    decrease_fee: UnitFraction = Field(default="0", alias="decreaseFee")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _fees_below_one(self) -> TickBoundSpec:
        if Decimal(self.increase_fee) >= 1 or Decimal(self.decrease_fee) >= 1:
            raise ValueError("fees must be below 1")
        return self


class AssetParams(BaseModel):
    """Configuration of one asset, as authored."""

    asset: AssetId
    decimals: int = Field(ge=0, le=77)
    target_allocation: UnitFraction = Field(alias="targetAllocation")
    max_allocation: UnitFraction = Field(alias="maxAllocation")
    bounds: list[TickBoundSpec] = Field(min_length=2)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_bounds(self) -> AssetParams:
        allocations = [Decimal(bound.allocation) for bound in self.bounds]
        prices = [Decimal(bound.price) for bound in self.bounds]
        if any(lo >= hi for lo, hi in zip(allocations, allocations[1:])):
            raise ValueError(f"{self.asset}: bound allocations must be strictly increasing")
        if any(lo < hi for lo, hi in zip(prices, prices[1:])):
            raise ValueError(f"{self.asset}: price must not increase with allocation")
        if allocations[-1] != Decimal(self.max_allocation):
            raise ValueError(f"{self.asset}: last bound must sit at the max allocation")
        if Decimal(self.target_allocation) > Decimal(self.max_allocation):
            raise ValueError(f"{self.asset}: target allocation above max allocation")
        return self

    def build_ticks(self) -> tuple[TickBoundary, ...]:
        """Turn consecutive bounds into packed ticks."""
        ticks = []
        for lower, upper in zip(self.bounds, self.bounds[1:]):
            x1, x2 = decimal_to_fixed(lower.allocation), decimal_to_fixed(upper.allocation)
            y1, y2 = decimal_to_fixed(lower.price), decimal_to_fixed(upper.price)
            slope = (y1 - y2) * ONE // (x2 - x1)
            if slope < 0:
                raise ConfigurationError(f"{self.asset}: price slope must not be negative")
            ticks.append(
                TickBoundary(
                    lower_allocation=allocation_from_decimal(lower.allocation),
                    upper_allocation=allocation_from_decimal(upper.allocation),
                    base_price=price_from_decimal(lower.price),
                    price_slope=slope_from_fixed(slope),
                    increase_fee=fee_from_decimal(lower.increase_fee),
                    decrease_fee=fee_from_decimal(lower.decrease_fee),
                )
            )
        return tuple(ticks)

    def to_asset_config(self, target_allocation: int | None = None) -> AssetConfig:
        """Build the packed AssetConfig.

        Args:
            target_allocation: Packed target overriding the authored one
        """
        if target_allocation is None:
            target_allocation = allocation_from_decimal(self.target_allocation)
        return AssetConfig(
            asset=self.asset,
            decimals=self.decimals,
            target_allocation=target_allocation,
            max_allocation=allocation_from_decimal(self.max_allocation),
            ticks=self.build_ticks(),
        )


class PoolParams(BaseModel):
    """Configuration of every asset in a pool."""

    assets: list[AssetParams] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_targets(self) -> PoolParams:
        names = [params.asset for params in self.assets]
        if len(set(names)) != len(names):
            raise ValueError("asset listed more than once")
        total = sum(Decimal(params.target_allocation) for params in self.assets)
        if total != 1:
            raise ValueError(f"target allocations must sum to 1, got {total}")
        return self

    def to_asset_configs(self) -> list[AssetConfig]:
        """Build packed configs whose targets sum to the packed 1.0.

        Packing floors each target, so the last asset absorbs the remainder.
        """
        configs = [params.to_asset_config() for params in self.assets[:-1]]
        remainder = ALLOCATION_ONE - sum(config.target_allocation for config in configs)
        configs.append(self.assets[-1].to_asset_config(target_allocation=remainder))
        return configs


def load_asset_configs(source: str | Path | dict[str, Any]) -> list[AssetConfig]:
    """Load and pack asset configuration.

    Args:
        source: Path to a JSON file, or an already parsed document, holding
            {"assets": [...]}

    Returns:
        Packed AssetConfig per asset

    Raises:
        pydantic.ValidationError: If the document is malformed
        ConfigurationError: If the bounds cannot be packed
    """
    if isinstance(source, dict):
        data = source
    else:
        with open(source) as f:
            data = json.load(f)
    return PoolParams.model_validate(data).to_asset_configs()
