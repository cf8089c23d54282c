"""Pegged debt token: only its owner may mint or burn."""
from __future__ import annotations

import logging

from ..errors import NotOwner, TokenError
from .erc20 import Token

logger = logging.getLogger(__name__)


class DebtToken(Token):
    """Owner-gated mint/burn on top of :class:`Token`."""

    def __init__(
        self,
        owner: str,
        name: str = "Decentralized Stable Coin",
        symbol: str = "DSC",
        decimals: int = 18,
        address: str = "",
    ) -> None:
        super().__init__(name, symbol, decimals, address)
        self.owner = owner

    def _only_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise NotOwner(caller, self.owner)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._only_owner(caller)
        logger.info("%s ownership transferred: %s -> %s", self.symbol, self.owner, new_owner)
        self.owner = new_owner

    def mint(self, caller: str, to: str, amount: int) -> bool:  # type: ignore[override]
        self._only_owner(caller)
        if amount <= 0:
            return False
        return super().mint(to, amount)

    def burn(self, caller: str, amount: int) -> None:
        """Burn ``amount`` from the owner's own balance."""
        self._only_owner(caller)
        if amount <= 0:
            raise TokenError("Burn amount must be more than zero")
        if self.balance_of(caller) < amount:
            raise TokenError(
                f"Burn amount {amount} exceeds balance {self.balance_of(caller)}"
            )
        self._burn(caller, amount)
