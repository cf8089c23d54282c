"""Token protocols: fungible transfers and owner-gated debt issuance."""
from typing import Protocol


class FungibleToken(Protocol):
    """Abstract interface for a transferable balance ledger."""

    @property
    def address(self) -> str: ...

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...


class DebtTokenAuthority(FungibleToken, Protocol):
    """Fungible token whose supply only its owner can change."""

    def mint(self, caller: str, to: str, amount: int) -> bool: ...

    def burn(self, caller: str, amount: int) -> None: ...
