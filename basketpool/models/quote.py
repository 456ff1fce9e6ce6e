"""Pydantic models for the quote API.

All amounts are canonical-scale (18 decimal) integers encoded as decimal
strings.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from basketpool.models.config import AssetParams
from basketpool.models.types import Uint256


class QuoteKind(str, Enum):
    """Which side of a single-asset operation is given."""

    MINT_GIVEN_DEPOSIT = "mint-given-deposit"
    DEPOSIT_GIVEN_MINT = "deposit-given-mint"
    WITHDRAWAL_GIVEN_BURN = "withdrawal-given-burn"
    BURN_GIVEN_WITHDRAWAL = "burn-given-withdrawal"


class SwapKind(str, Enum):
    """Which side of a swap is given."""

    GIVEN_IN = "given-in"
    GIVEN_OUT = "given-out"


class QuoteRequest(BaseModel):
    """Single-asset quote against caller-supplied reserve levels."""

    asset: AssetParams
    specific_reserves: Uint256 = Field(alias="specificReserves")
    total_reserves: Uint256 = Field(alias="totalReserves")
    amount: Uint256

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _reserves_consistent(self) -> "QuoteRequest":
        if int(self.specific_reserves) > int(self.total_reserves):
            raise ValueError("specificReserves cannot exceed totalReserves")
        return self


class QuoteResponse(BaseModel):
    """Priced single-asset operation."""

    kind: QuoteKind
    amount: Uint256 = Field(description="Solved side of the operation")
    fee: Uint256 = Field(description="Basket-unit fee")
    start_tick: int = Field(alias="startTick")
    end_tick: int = Field(alias="endTick")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Asset-for-asset quote against caller-supplied reserve levels."""

    asset_in: AssetParams = Field(alias="assetIn")
    reserves_in: Uint256 = Field(alias="reservesIn")
    asset_out: AssetParams = Field(alias="assetOut")
    reserves_out: Uint256 = Field(alias="reservesOut")
    total_reserves: Uint256 = Field(alias="totalReserves")
    amount: Uint256

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _reserves_consistent(self) -> "SwapRequest":
        if int(self.reserves_in) + int(self.reserves_out) > int(self.total_reserves):
            raise ValueError("asset reserves cannot exceed totalReserves")
        return self


class SwapResponse(BaseModel):
    """Priced swap."""

    kind: SwapKind
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    basket_amount: Uint256 = Field(alias="basketAmount")
    fee: Uint256

    model_config = {"populate_by_name": True}
