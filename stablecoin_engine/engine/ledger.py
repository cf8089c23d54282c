"""Collateral and debt ledgers: pure bookkeeping, mutated only by the engine."""
from __future__ import annotations

from typing import Iterable

from ..errors import InsufficientCollateral, InsufficientDebt, UnsupportedAsset


class CollateralLedger:
    """(user, asset) → deposited amount, over an immutable asset list."""

    def __init__(self, assets: Iterable[str]) -> None:
        self._assets = tuple(assets)
        self._registered = frozenset(self._assets)
        self._balances: dict[tuple[str, str], int] = {}

    @property
    def assets(self) -> tuple[str, ...]:
        """Registered assets in registration order."""
        return self._assets

    def is_registered(self, asset: str) -> bool:
        return asset in self._registered

    def require_registered(self, asset: str) -> None:
        if asset not in self._registered:
            raise UnsupportedAsset(asset)

    def balance(self, user: str, asset: str) -> int:
        return self._balances.get((user, asset), 0)

    def increase(self, user: str, asset: str, amount: int) -> None:
        self.require_registered(asset)
        self._balances[(user, asset)] = self.balance(user, asset) + amount

    def decrease(self, user: str, asset: str, amount: int) -> None:
        self.require_registered(asset)
        held = self.balance(user, asset)
        if amount > held:
            raise InsufficientCollateral(user, asset, held, amount)
        self._balances[(user, asset)] = held - amount

    def total_deposited(self, asset: str) -> int:
        return sum(v for (_, a), v in self._balances.items() if a == asset)

    def snapshot(self) -> dict[tuple[str, str], int]:
        return dict(self._balances)

    def restore(self, snapshot: dict[tuple[str, str], int]) -> None:
        self._balances = dict(snapshot)


class DebtLedger:
    """user → minted debt amount."""

    def __init__(self) -> None:
        self._debts: dict[str, int] = {}

    def balance(self, user: str) -> int:
        return self._debts.get(user, 0)

    def increase(self, user: str, amount: int) -> None:
        self._debts[user] = self.balance(user) + amount

    def decrease(self, user: str, amount: int) -> None:
        held = self.balance(user)
        if amount > held:
            raise InsufficientDebt(user, held, amount)
        self._debts[user] = held - amount

    def total(self) -> int:
        return sum(self._debts.values())

    def snapshot(self) -> dict[str, int]:
        return dict(self._debts)

    def restore(self, snapshot: dict[str, int]) -> None:
        self._debts = dict(snapshot)
