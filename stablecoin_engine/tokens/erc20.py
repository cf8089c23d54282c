"""In-memory ERC-20 style token ledger."""
from __future__ import annotations

import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


class Token:
    """Fungible token with balances and allowances.

    Transfers report failure by returning ``False`` rather than raising, so
    callers are expected to check the result.
    """

    def __init__(self, name: str, symbol: str, decimals: int = 18, address: str = "") -> None:
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.address = address or symbol
        self.total_supply = 0
        self._balances: dict[str, int] = defaultdict(int)
        self._allowances: dict[tuple[str, str], int] = defaultdict(int)

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            return False
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(sender) < amount:
            logger.debug(
                "%s transfer of %d from %s rejected (balance %d)",
                self.symbol, amount, sender, self.balance_of(sender),
            )
            return False
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if amount < 0 or allowed < amount or self.balance_of(owner) < amount:
            logger.debug(
                "%s transfer_from of %d (%s -> %s by %s) rejected",
                self.symbol, amount, owner, to, spender,
            )
            return False
        self._allowances[(owner, spender)] = allowed - amount
        self._move(owner, to, amount)
        return True

    def mint(self, to: str, amount: int) -> bool:
        """Unrestricted mint, used to fund accounts with collateral."""
        if amount < 0:
            return False
        self._balances[to] += amount
        self.total_supply += amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> None:
        self._balances[sender] -= amount
        self._balances[to] += amount

    def _burn(self, account: str, amount: int) -> None:
        self._balances[account] -= amount
        self.total_supply -= amount

    def __repr__(self) -> str:
        return f"Token({self.symbol!r}, supply={self.total_supply})"
