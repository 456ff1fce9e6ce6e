"""Cross-asset swap composition.

A swap is a deposit of one asset and a withdrawal of another, joined through
the basket unit: the basket units minted by the deposit leg are burned by the
withdrawal leg. The second leg always sees total reserves already moved by
the first.
"""

from __future__ import annotations

from dataclasses import dataclass

from basketpool.errors import ConfigurationError
from basketpool.pricing.crossing import (
    CrossingResult,
    compute_burn_given_withdrawal,
    compute_deposit_given_mint,
    compute_mint_given_deposit,
    compute_withdrawal_given_burn,
)
from basketpool.pricing.ticks import AssetConfig

__all__ = [
    "SwapQuote",
    "compute_swap_underlying_given_in",
    "compute_swap_underlying_given_out",
]


@dataclass(frozen=True)
class SwapQuote:
    """Priced asset-for-asset swap.

    Attributes:
        amount_in: Canonical amount of the input asset deposited
        amount_out: Canonical amount of the output asset withdrawn
        basket_amount: Basket units minted by the deposit leg and burned by
            the withdrawal leg
        fee: Basket-unit fee of both legs combined
        deposit_leg: Crossing result of the deposit leg
        withdrawal_leg: Crossing result of the withdrawal leg
    """

    amount_in: int
    amount_out: int
    basket_amount: int
    fee: int
    deposit_leg: CrossingResult
    withdrawal_leg: CrossingResult


def _check_distinct(config_in: AssetConfig, config_out: AssetConfig) -> None:
    if config_in.asset == config_out.asset:
        raise ConfigurationError(f"cannot swap {config_in.asset} for itself")


def compute_swap_underlying_given_in(
    config_in: AssetConfig,
    reserves_in: int,
    config_out: AssetConfig,
    reserves_out: int,
    total_reserves: int,
    amount_in: int,
) -> SwapQuote:
    """Price a swap with a fixed input amount.

    Args:
        config_in: Configuration of the deposited asset
        reserves_in: Canonical reserves of the deposited asset
        config_out: Configuration of the withdrawn asset
        reserves_out: Canonical reserves of the withdrawn asset
        total_reserves: Canonical reserves of the pool
        amount_in: Canonical amount deposited

    Returns:
        SwapQuote with the canonical amount paid out
    """
    _check_distinct(config_in, config_out)
    deposit = compute_mint_given_deposit(config_in, reserves_in, total_reserves, amount_in)
    withdrawal = compute_withdrawal_given_burn(
        config_out, reserves_out, total_reserves + amount_in, deposit.amount
    )
    return SwapQuote(
        amount_in=amount_in,
        amount_out=withdrawal.amount,
        basket_amount=deposit.amount,
        fee=deposit.fee + withdrawal.fee,
        deposit_leg=deposit,
        withdrawal_leg=withdrawal,
    )


def compute_swap_underlying_given_out(
    config_in: AssetConfig,
    reserves_in: int,
    config_out: AssetConfig,
    reserves_out: int,
    total_reserves: int,
    amount_out: int,
) -> SwapQuote:
    """Price a swap with a fixed output amount.

    The burn leg is priced first against the current reserves, then the
    deposit needed to mint that many basket units is priced against the
    reserves left after the withdrawal.

    Args:
        config_in: Configuration of the deposited asset
        reserves_in: Canonical reserves of the deposited asset
        config_out: Configuration of the withdrawn asset
        reserves_out: Canonical reserves of the withdrawn asset
        total_reserves: Canonical reserves of the pool
        amount_out: Canonical amount to withdraw

    Returns:
        SwapQuote with the canonical amount that must be deposited
    """
    _check_distinct(config_in, config_out)
    burn = compute_burn_given_withdrawal(config_out, reserves_out, total_reserves, amount_out)
    deposit = compute_deposit_given_mint(
        config_in, reserves_in, total_reserves - amount_out, burn.amount
    )
    return SwapQuote(
        amount_in=deposit.amount,
        amount_out=amount_out,
        basket_amount=burn.amount,
        fee=deposit.fee + burn.fee,
        deposit_leg=deposit,
        withdrawal_leg=burn,
    )
