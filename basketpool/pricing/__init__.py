"""Allocation-tick pricing engine.

- ticks: tick tables and the tick locator
- step: closed-form pricing inside a single tick
- crossing: composition of step results across tick boundaries
- swap: asset-for-asset swaps through the basket unit
"""

from basketpool.pricing.crossing import (
    CrossingResult,
    compute_burn_given_withdrawal,
    compute_deposit_given_mint,
    compute_mint_given_deposit,
    compute_withdrawal_given_burn,
)
from basketpool.pricing.step import (
    StepResult,
    calc_price,
    calc_step_burn,
    calc_step_deposit,
    calc_step_max_deposit,
    calc_step_max_withdrawal,
    calc_step_mint,
    calc_step_withdrawal,
)
from basketpool.pricing.swap import (
    SwapQuote,
    compute_swap_underlying_given_in,
    compute_swap_underlying_given_out,
)
from basketpool.pricing.ticks import (
    AssetConfig,
    TickBoundary,
    TickLocation,
    TickPosition,
    get_tick_lower_bound_index,
    locate_tick,
)

__all__ = [
    # Tick tables
    "AssetConfig",
    "TickBoundary",
    "TickLocation",
    "TickPosition",
    "get_tick_lower_bound_index",
    "locate_tick",
    # Single tick
    "StepResult",
    "calc_price",
    "calc_step_max_deposit",
    "calc_step_max_withdrawal",
    "calc_step_mint",
    "calc_step_deposit",
    "calc_step_withdrawal",
    "calc_step_burn",
    # Crossing
    "CrossingResult",
    "compute_mint_given_deposit",
    "compute_deposit_given_mint",
    "compute_withdrawal_given_burn",
    "compute_burn_given_withdrawal",
    # Swaps
    "SwapQuote",
    "compute_swap_underlying_given_in",
    "compute_swap_underlying_given_out",
]
