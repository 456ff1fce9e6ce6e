"""Results returned by committed pool operations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReserveDelta:
    """Signed balance change of one asset (positive flows into the pool).

    The caller moves native units; canonical units are what the pool books.
    """

    asset: str
    native: int
    canonical: int

    @property
    def is_deposit(self) -> bool:
        return self.canonical > 0


@dataclass(frozen=True)
class Receipt:
    """What a committed operation asks the ledger and custody to settle.

    Attributes:
        legs: Per-asset balance changes applied to the reserves
        basket_minted: Basket units to credit to the caller
        basket_burned: Basket units to debit from the caller
        fee: Basket units collected as fee
        bounty_paid: Equalization bounty included in the caller's settlement
    """

    legs: tuple[ReserveDelta, ...]
    basket_minted: int = 0
    basket_burned: int = 0
    fee: int = 0
    bounty_paid: int = 0

    def leg(self, asset: str) -> ReserveDelta | None:
        """Return the leg for an asset, if the operation touched it."""
        for delta in self.legs:
            if delta.asset == asset:
                return delta
        return None
