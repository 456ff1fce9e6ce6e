"""Immutable reserve bookkeeping.

Every pool operation builds a complete successor state and the pool commits
it with one assignment, so a failure anywhere leaves the previous state in
place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from basketpool.errors import PoolMathError
from basketpool.pool.results import ReserveDelta

__all__ = ["AssetReserve", "PoolReserveState"]


@dataclass(frozen=True)
class AssetReserve:
    """Balance of one asset.

    Attributes:
        native: Balance in the asset's own decimals
        canonical: Balance rescaled to the canonical 18 decimals; never more
            than the rescaled native balance
    """

    native: int = 0
    canonical: int = 0

    def apply(self, delta: ReserveDelta) -> AssetReserve:
        native = self.native + delta.native
        canonical = self.canonical + delta.canonical
        if native < 0 or canonical < 0:
            raise PoolMathError(f"{delta.asset}: reserve balance would go negative")
        return AssetReserve(native=native, canonical=canonical)

    @property
    def is_empty(self) -> bool:
        return self.native == 0 and self.canonical == 0


@dataclass(frozen=True)
class PoolReserveState:
    """Snapshot of the pool's reserves and fee counters.

    Attributes:
        reserves: Per-asset balances
        total_canonical: Sum of every asset's canonical balance
        fees_collected: Basket units collected as fees and not yet paid out
        equalization_bounty: Basket units earmarked for equalizers, always
            covered by fees_collected
    """

    reserves: Mapping[str, AssetReserve] = field(default_factory=dict)
    total_canonical: int = 0
    fees_collected: int = 0
    equalization_bounty: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "reserves", MappingProxyType(dict(self.reserves)))

    def reserve(self, asset: str) -> AssetReserve:
        return self.reserves.get(asset, AssetReserve())

    @property
    def surplus(self) -> int:
        """Collected fees not promised to equalizers."""
        return self.fees_collected - self.equalization_bounty

    def apply(
        self,
        deltas: Iterable[ReserveDelta],
        *,
        fee: int = 0,
        bounty_paid: int = 0,
    ) -> PoolReserveState:
        """Return the state after applying balance deltas and fee movements.

        Args:
            deltas: Signed per-asset balance changes (positive into the pool)
            fee: Basket units of fee collected by the operation
            bounty_paid: Basket units of bounty paid out by the operation

        Raises:
            PoolMathError: If a balance or counter would go negative
        """
        reserves = dict(self.reserves)
        total = self.total_canonical
        for delta in deltas:
            reserves[delta.asset] = reserves.get(delta.asset, AssetReserve()).apply(delta)
            total += delta.canonical
        if bounty_paid > self.equalization_bounty:
            raise PoolMathError("bounty paid exceeds equalization bounty")
        return replace(
            self,
            reserves=reserves,
            total_canonical=total,
            fees_collected=self.fees_collected + fee - bounty_paid,
            equalization_bounty=self.equalization_bounty - bounty_paid,
        )

    def with_bounty(self, bounty: int) -> PoolReserveState:
        return replace(self, equalization_bounty=bounty)
