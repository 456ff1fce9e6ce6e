"""Reserve pool: bookkeeping around the pricing engine.

ReservePool owns the asset configurations and the reserve state and exposes
every balance-changing operation:

- Tick-priced single-asset operations: deposit, deposit_for_mint, withdraw,
  withdraw_exact
- Tick-priced swaps: swap_given_in, swap_given_out
- Proportional flat-fee operations: mint, burn
- Equalization: swap_towards_target, equalize_to_target

Amounts passed in and out are in the asset's native decimals; basket units use
the canonical 18 decimals. Operations only book balances. Moving tokens and
crediting basket units is the caller's job, and bookkeeping must follow
confirmed transfers. Callers serialize operations on one pool.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import structlog

from basketpool.config import DEFAULT_POOL_SETTINGS, PoolSettings
from basketpool.constants import CANONICAL_DECIMALS, ONE, UINT256_MAX
from basketpool.errors import (
    BountyExceedsSurplusError,
    ConfigurationError,
    MaxReservesExceededError,
    PoolMathError,
    SlippageError,
    TargetAllocationError,
    UnknownAssetError,
)
from basketpool.math.fixed_point import mul_div, mul_div_up, mul_up, scale_decimals
from basketpool.pool.guards import (
    assert_allocation_bounds,
    calc_max_individual_delta,
    calc_max_individual_withdrawal,
)
from basketpool.pool.results import Receipt, ReserveDelta
from basketpool.pool.state import PoolReserveState
from basketpool.pricing.crossing import (
    compute_burn_given_withdrawal,
    compute_deposit_given_mint,
    compute_mint_given_deposit,
    compute_withdrawal_given_burn,
)
from basketpool.pricing.swap import (
    compute_swap_underlying_given_in,
    compute_swap_underlying_given_out,
)
from basketpool.pricing.ticks import AssetConfig, allocation_fixed

logger = structlog.get_logger()


class ReservePool:
    """Multi-asset reserve pool backing one basket unit."""

    def __init__(
        self,
        asset_configs: Iterable[AssetConfig],
        settings: PoolSettings = DEFAULT_POOL_SETTINGS,
        state: PoolReserveState | None = None,
    ) -> None:
        self._configs: dict[str, AssetConfig] = {}
        self._settings = settings
        self._state = state if state is not None else PoolReserveState()
        self.update_asset_configs(asset_configs)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PoolReserveState:
        return self._state

    @property
    def settings(self) -> PoolSettings:
        return self._settings

    @property
    def asset_configs(self) -> Mapping[str, AssetConfig]:
        return dict(self._configs)

    @property
    def assets(self) -> list[str]:
        return list(self._configs)

    @property
    def total_reserves(self) -> int:
        """Total canonical reserves."""
        return self._state.total_canonical

    @property
    def fees_collected(self) -> int:
        return self._state.fees_collected

    @property
    def equalization_bounty(self) -> int:
        return self._state.equalization_bounty

    @property
    def surplus(self) -> int:
        """Collected fees not already promised as equalization bounty."""
        return self._state.surplus

    def config(self, asset: str) -> AssetConfig:
        try:
            return self._configs[asset]
        except KeyError:
            raise UnknownAssetError(f"asset not configured: {asset}") from None

    def specific_reserves(self, asset: str) -> int:
        """Canonical reserves of an asset."""
        return self._state.reserve(asset).canonical

    def native_reserves(self, asset: str) -> int:
        """Reserves of an asset in its native decimals."""
        return self._state.reserve(asset).native

    def allocation(self, asset: str) -> int:
        """Current allocation of an asset as Q128."""
        return allocation_fixed(self.specific_reserves(asset), self.total_reserves)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def update_asset_configs(self, asset_configs: Iterable[AssetConfig]) -> None:
        """Replace every asset configuration at once.

        Assets that still hold reserves must stay configured; set their target
        allocation to zero and equalize to wind them down.

        Raises:
            ConfigurationError: If an asset is duplicated or a funded asset is
                missing
        """
        configs: dict[str, AssetConfig] = {}
        for config in asset_configs:
            if config.asset in configs:
                raise ConfigurationError(f"duplicate asset config: {config.asset}")
            configs[config.asset] = config

        for asset, reserve in self._state.reserves.items():
            if not reserve.is_empty and asset not in configs:
                raise ConfigurationError(f"asset {asset} holds reserves and must stay configured")
            previous = self._configs.get(asset)
            if (
                not reserve.is_empty
                and previous is not None
                and asset in configs
                and previous.decimals != configs[asset].decimals
            ):
                raise ConfigurationError(f"asset {asset} cannot change decimals while funded")

        self._configs = configs
        logger.info("asset_configs_updated", assets=list(configs))

    def update_settings(self, settings: PoolSettings) -> None:
        self._settings = settings
        logger.info(
            "pool_settings_updated",
            mint_fee=settings.mint_fee,
            burn_fee=settings.burn_fee,
            max_reserves=settings.max_reserves,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _to_canonical(self, config: AssetConfig, native: int, *, round_up: bool = False) -> int:
        return scale_decimals(native, config.decimals, CANONICAL_DECIMALS, round_up=round_up)

    def _to_native(self, config: AssetConfig, canonical: int, *, round_up: bool = False) -> int:
        return scale_decimals(canonical, CANONICAL_DECIMALS, config.decimals, round_up=round_up)

    def _commit(self, new_state: PoolReserveState) -> None:
        """Swap in a fully computed state after the pool-wide checks."""
        cap = self._settings.max_reserves
        if (
            cap is not None
            and new_state.total_canonical > cap
            and new_state.total_canonical > self._state.total_canonical
        ):
            raise MaxReservesExceededError(
                f"total reserves {new_state.total_canonical} exceed max reserves {cap}"
            )
        self._state = new_state

    @staticmethod
    def _check_positive(amount: int, name: str) -> None:
        if amount <= 0:
            raise ValueError(f"{name} must be positive, got {amount}")

    # -------------------------------------------------------------------------
    # Tick-priced single-asset operations
    # -------------------------------------------------------------------------

    def deposit(self, asset: str, amount: int, min_mint: int = 0) -> Receipt:
        """Deposit an exact native amount and mint basket units.

        Args:
            asset: Deposited asset
            amount: Native amount deposited
            min_mint: Smallest acceptable net mint

        Returns:
            Receipt with the minted basket units and fee

        Raises:
            SlippageError: If the net mint is below min_mint
            PoolMathError: If the deposit leaves the tick domain
        """
        self._check_positive(amount, "amount")
        config = self.config(asset)
        canonical = self._to_canonical(config, amount)
        result = compute_mint_given_deposit(
            config, self.specific_reserves(asset), self.total_reserves, canonical
        )
        if result.amount < min_mint:
            raise SlippageError(f"minted {result.amount} below minimum {min_mint}")

        leg = ReserveDelta(asset, amount, canonical)
        self._commit(self._state.apply([leg], fee=result.fee))
        logger.info(
            "deposit_applied",
            asset=asset,
            amount=amount,
            minted=result.amount,
            fee=result.fee,
            ticks_crossed=result.ticks_crossed,
        )
        return Receipt(legs=(leg,), basket_minted=result.amount, fee=result.fee)

    def deposit_for_mint(self, asset: str, mint: int, max_deposit: int | None = None) -> Receipt:
        """Deposit whatever is needed to mint an exact net amount of basket units.

        Args:
            asset: Deposited asset
            mint: Net basket units to mint
            max_deposit: Largest acceptable native deposit

        Raises:
            SlippageError: If the required deposit exceeds max_deposit
        """
        self._check_positive(mint, "mint")
        config = self.config(asset)
        result = compute_deposit_given_mint(
            config, self.specific_reserves(asset), self.total_reserves, mint
        )
        native = self._to_native(config, result.amount, round_up=True)
        if max_deposit is not None and native > max_deposit:
            raise SlippageError(f"deposit {native} above maximum {max_deposit}")

        leg = ReserveDelta(asset, native, result.amount)
        self._commit(self._state.apply([leg], fee=result.fee))
        logger.info("deposit_applied", asset=asset, amount=native, minted=mint, fee=result.fee)
        return Receipt(legs=(leg,), basket_minted=mint, fee=result.fee)

    def withdraw(self, asset: str, burn: int, min_withdrawal: int = 0) -> Receipt:
        """Burn an exact amount of basket units for one asset.

        Args:
            asset: Withdrawn asset
            burn: Basket units burned, fee included
            min_withdrawal: Smallest acceptable native withdrawal

        Raises:
            SlippageError: If the withdrawal is below min_withdrawal
        """
        self._check_positive(burn, "burn")
        config = self.config(asset)
        result = compute_withdrawal_given_burn(
            config, self.specific_reserves(asset), self.total_reserves, burn
        )
        native = self._to_native(config, result.amount)
        if native < min_withdrawal:
            raise SlippageError(f"withdrawal {native} below minimum {min_withdrawal}")

        leg = ReserveDelta(asset, -native, -result.amount)
        self._commit(self._state.apply([leg], fee=result.fee))
        logger.info("withdrawal_applied", asset=asset, amount=native, burned=burn, fee=result.fee)
        return Receipt(legs=(leg,), basket_burned=burn, fee=result.fee)

    def withdraw_exact(self, asset: str, amount: int, max_burn: int | None = None) -> Receipt:
        """Withdraw an exact native amount, burning whatever that costs.

        Args:
            asset: Withdrawn asset
            amount: Native amount to withdraw
            max_burn: Largest acceptable burn

        Raises:
            SlippageError: If the required burn exceeds max_burn
        """
        self._check_positive(amount, "amount")
        config = self.config(asset)
        canonical = self._to_canonical(config, amount, round_up=True)
        result = compute_burn_given_withdrawal(
            config, self.specific_reserves(asset), self.total_reserves, canonical
        )
        if max_burn is not None and result.amount > max_burn:
            raise SlippageError(f"burn {result.amount} above maximum {max_burn}")

        leg = ReserveDelta(asset, -amount, -canonical)
        self._commit(self._state.apply([leg], fee=result.fee))
        logger.info(
            "withdrawal_applied", asset=asset, amount=amount, burned=result.amount, fee=result.fee
        )
        return Receipt(legs=(leg,), basket_burned=result.amount, fee=result.fee)

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

    def swap_given_in(self, asset_in: str, amount_in: int, asset_out: str, min_out: int = 0) -> Receipt:
        """Swap an exact native input amount for as much output as it buys.

        Raises:
            SlippageError: If the native output is below min_out
        """
        self._check_positive(amount_in, "amount_in")
        config_in, config_out = self.config(asset_in), self.config(asset_out)
        canonical_in = self._to_canonical(config_in, amount_in)
        quote = compute_swap_underlying_given_in(
            config_in,
            self.specific_reserves(asset_in),
            config_out,
            self.specific_reserves(asset_out),
            self.total_reserves,
            canonical_in,
        )
        native_out = self._to_native(config_out, quote.amount_out)
        if native_out < min_out:
            raise SlippageError(f"output {native_out} below minimum {min_out}")

        legs = (
            ReserveDelta(asset_in, amount_in, canonical_in),
            ReserveDelta(asset_out, -native_out, -quote.amount_out),
        )
        self._commit(self._state.apply(legs, fee=quote.fee))
        logger.info(
            "swap_applied",
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=native_out,
            fee=quote.fee,
        )
        return Receipt(legs=legs, fee=quote.fee)

    def swap_given_out(
        self, asset_in: str, asset_out: str, amount_out: int, max_in: int | None = None
    ) -> Receipt:
        """Swap for an exact native output amount.

        Raises:
            SlippageError: If the native input exceeds max_in
        """
        self._check_positive(amount_out, "amount_out")
        config_in, config_out = self.config(asset_in), self.config(asset_out)
        canonical_out = self._to_canonical(config_out, amount_out, round_up=True)
        quote = compute_swap_underlying_given_out(
            config_in,
            self.specific_reserves(asset_in),
            config_out,
            self.specific_reserves(asset_out),
            self.total_reserves,
            canonical_out,
        )
        native_in = self._to_native(config_in, quote.amount_in, round_up=True)
        if max_in is not None and native_in > max_in:
            raise SlippageError(f"input {native_in} above maximum {max_in}")

        legs = (
            ReserveDelta(asset_in, native_in, quote.amount_in),
            ReserveDelta(asset_out, -amount_out, -canonical_out),
        )
        self._commit(self._state.apply(legs, fee=quote.fee))
        logger.info(
            "swap_applied",
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=native_in,
            amount_out=amount_out,
            fee=quote.fee,
        )
        return Receipt(legs=legs, fee=quote.fee)

    # -------------------------------------------------------------------------
    # Proportional mint / burn
    # -------------------------------------------------------------------------

    def mint(self, amount: int) -> Receipt:
        """Mint basket units against a target-weighted deposit of every asset.

        The mint fee is charged on top of amount; each asset contributes its
        target share of the gross amount, rounded up. The growth-rate
        precondition is the caller's to check beforehand.

        Raises:
            AllocationBoundError: If an allocation ends above its max
            MaxReservesExceededError: If total reserves exceed the cap
        """
        self._check_positive(amount, "amount")
        fee = mul_up(amount, self._settings.mint_fee)
        gross = amount + fee

        legs = []
        for asset, config in self._configs.items():
            canonical = mul_div_up(gross, config.target, ONE)
            if canonical == 0:
                continue
            legs.append(ReserveDelta(asset, self._to_native(config, canonical, round_up=True), canonical))

        new_state = self._state.apply(legs, fee=fee)
        self._check_bounds(new_state)
        self._commit(new_state)
        logger.info("proportional_mint_applied", amount=amount, fee=fee)
        return Receipt(legs=tuple(legs), basket_minted=amount, fee=fee)

    def burn(self, amount: int) -> Receipt:
        """Burn basket units for a pro-rata share of every asset.

        The burn fee is deducted from amount and the rest is paid out by
        current allocation, rounded down.

        Raises:
            AllocationBoundError: If an allocation ends below its min
            PoolMathError: If the burn exceeds total reserves
        """
        self._check_positive(amount, "amount")
        fee = mul_up(amount, self._settings.burn_fee)
        net = amount - fee
        total = self.total_reserves
        if net > total:
            raise PoolMathError(f"burn {net} exceeds total reserves {total}")

        legs = []
        for asset, reserve in self._state.reserves.items():
            canonical = mul_div(reserve.canonical, net, total)
            if canonical == 0:
                continue
            native = self._to_native(self.config(asset), canonical)
            legs.append(ReserveDelta(asset, -native, -canonical))

        new_state = self._state.apply(legs, fee=fee)
        self._check_bounds(new_state)
        self._commit(new_state)
        logger.info("proportional_burn_applied", amount=amount, fee=fee)
        return Receipt(legs=tuple(legs), basket_burned=amount, fee=fee)

    def _check_bounds(self, new_state: PoolReserveState) -> None:
        for asset, config in self._configs.items():
            assert_allocation_bounds(
                config,
                (self._state.reserve(asset).canonical, self._state.total_canonical),
                (new_state.reserve(asset).canonical, new_state.total_canonical),
            )

    # -------------------------------------------------------------------------
    # Equalization
    # -------------------------------------------------------------------------

    def get_equalization_vector(self) -> dict[str, int]:
        """Signed canonical change per asset that puts every asset on target.

        Positive entries are deposits, negative entries withdrawals.
        """
        total = self.total_reserves
        return {
            asset: mul_div(config.target, total, ONE) - self.specific_reserves(asset)
            for asset, config in self._configs.items()
        }

    def is_equalized(self) -> bool:
        """True if every asset is on target up to rounding dust.

        Equalizing floors each asset to its target share, which can leave the
        total short by up to one unit per asset, so each entry of the vector
        may be off by as many units as there are assets.
        """
        tolerance = len(self._configs)
        return all(abs(delta) <= tolerance for delta in self.get_equalization_vector().values())

    def total_reserves_discrepancy(self) -> int:
        """Sum of absolute distances from target, in canonical units."""
        return sum(abs(delta) for delta in self.get_equalization_vector().values())

    def increase_equalization_bounty(self, amount: int) -> None:
        """Earmark collected fees as a reward for equalizing the pool.

        Raises:
            BountyExceedsSurplusError: If the fees collected cannot cover the
                new bounty
        """
        self._check_positive(amount, "amount")
        bounty = self._state.equalization_bounty + amount
        if bounty > self._state.fees_collected:
            raise BountyExceedsSurplusError(
                f"not enough fees to cover bounty: {bounty} > {self._state.fees_collected}"
            )
        self._state = self._state.with_bounty(bounty)
        logger.info("equalization_bounty_increased", amount=amount, bounty=bounty)

    def swap_towards_target(self, asset: str, amount: int) -> Receipt:
        """Move one asset towards its target allocation at a 1:1 price.

        A positive amount deposits native units and mints the canonical
        equivalent plus the bounty. A negative amount withdraws native units
        and burns the canonical equivalent, reduced by the bounty. Either way
        the bounty paid is capped at the canonical amount moved.

        Args:
            asset: Asset to rebalance
            amount: Signed native amount (positive deposits, negative withdraws)

        Raises:
            TargetAllocationError: If the move would pass the target or moves
                the asset away from it
        """
        if amount == 0:
            raise ValueError("amount must be non-zero")
        config = self.config(asset)
        r, total = self.specific_reserves(asset), self.total_reserves
        bounty = self._state.equalization_bounty

        if amount > 0:
            canonical = self._to_canonical(config, amount)
            if canonical > calc_max_individual_delta(config.target_allocation, r, total):
                raise TargetAllocationError("deposit exceeds target allocation")
            paid = min(bounty, canonical)
            leg = ReserveDelta(asset, amount, canonical)
            receipt = Receipt(legs=(leg,), basket_minted=canonical + paid, bounty_paid=paid)
        else:
            native = -amount
            canonical = self._to_canonical(config, native, round_up=True)
            if canonical > calc_max_individual_withdrawal(config.target_allocation, r, total):
                raise TargetAllocationError("withdrawal exceeds target allocation")
            paid = min(bounty, canonical)
            leg = ReserveDelta(asset, -native, -canonical)
            receipt = Receipt(legs=(leg,), basket_burned=canonical - paid, bounty_paid=paid)

        self._commit(self._state.apply([leg], bounty_paid=receipt.bounty_paid))
        logger.info(
            "swapped_towards_target",
            asset=asset,
            amount=amount,
            canonical=leg.canonical,
            bounty_paid=receipt.bounty_paid,
        )
        return receipt

    def equalize_to_target(self, asset: str | None = None) -> Receipt:
        """Put one asset, or the whole pool, on its target allocation.

        With an asset, moves that asset as far towards its target as the
        1:1 equalizing swap allows. Without one, applies the whole
        equalization vector and pays the caller the bounty, capped at the
        total discrepancy it closes.

        Raises:
            TargetAllocationError: If there is nothing to equalize
        """
        if asset is not None:
            return self._equalize_asset(asset)

        if self.is_equalized():
            raise TargetAllocationError("pool is already equalized")
        vector = self.get_equalization_vector()
        legs = []
        for name, delta in vector.items():
            if delta == 0:
                continue
            config = self._configs[name]
            if delta > 0:
                native = self._to_native(config, delta, round_up=True)
            else:
                native = -self._to_native(config, -delta)
            legs.append(ReserveDelta(name, native, delta))

        paid = min(self._state.equalization_bounty, sum(abs(delta) for delta in vector.values()))
        net = sum(vector.values()) + paid
        self._commit(self._state.apply(legs, bounty_paid=paid))
        logger.info("equalized_to_target", legs=len(legs), bounty_paid=paid)
        return Receipt(
            legs=tuple(legs),
            basket_minted=max(net, 0),
            basket_burned=max(-net, 0),
            bounty_paid=paid,
        )

    def _equalize_asset(self, asset: str) -> Receipt:
        config = self.config(asset)
        r, total = self.specific_reserves(asset), self.total_reserves
        target = config.target_allocation

        deposit = calc_max_individual_delta(target, r, total)
        if deposit == UINT256_MAX:
            raise TargetAllocationError(f"{asset}: target allocation of 1.0 cannot be reached")
        if deposit > 0:
            native = self._to_native(config, deposit)
            if native > 0:
                return self.swap_towards_target(asset, native)
        withdrawal = calc_max_individual_withdrawal(target, r, total)
        native = self._to_native(config, withdrawal)
        if native > 0:
            return self.swap_towards_target(asset, -native)
        raise TargetAllocationError(f"{asset} is already at its target allocation")
