"""Position manager: deposit, mint, redeem and burn against the ledgers.

Public methods each run as one atomic operation. The ledger steps and token
calls are shared by the composite operations, so a deposit-and-mint validates
solvency once, against the net position.
"""
from __future__ import annotations

import logging
from typing import Sequence

from ..config import EngineParams
from ..errors import (
    BurnFailed,
    LengthMismatch,
    MintFailed,
    NeedsMoreThanZero,
    TokenError,
    TransferFailed,
)
from ..interfaces.price_feed import PriceFeed
from ..interfaces.token import DebtTokenAuthority, FungibleToken
from ..models import CollateralDeposited, CollateralRedeemed
from .events import EventLog
from .health import HealthFactorEngine
from .ledger import CollateralLedger, DebtLedger
from .transaction import Transaction, TransactionManager
from .valuation import ValuationService

logger = logging.getLogger(__name__)


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise NeedsMoreThanZero()


class PositionManager:
    """Owns the collateral and debt ledgers and every path that mutates them."""

    def __init__(
        self,
        collateral_tokens: Sequence[FungibleToken],
        price_feeds: Sequence[PriceFeed],
        dsc: DebtTokenAuthority,
        params: EngineParams | None = None,
    ) -> None:
        if len(collateral_tokens) != len(price_feeds):
            raise LengthMismatch(len(collateral_tokens), len(price_feeds))

        self.params = params or EngineParams()
        self.address = self.params.address
        self.dsc = dsc

        self._tokens: dict[str, FungibleToken] = {}
        feeds: dict[str, PriceFeed] = {}
        for token, feed in zip(collateral_tokens, price_feeds):
            self._tokens[token.address] = token
            feeds[token.address] = feed

        self.collateral = CollateralLedger(self._tokens)
        self.debt = DebtLedger()
        self.events = EventLog()
        self.valuation = ValuationService(feeds, self.collateral)
        self.health = HealthFactorEngine(
            self.valuation,
            self.debt,
            liquidation_threshold=self.params.liquidation_threshold,
            min_health_factor=self.params.min_health_factor,
        )
        self._transactions = TransactionManager(self.collateral, self.debt, self.events)

        logger.info(
            "Engine %s registered %d collateral assets: %s",
            self.address, len(self._tokens), ", ".join(self.collateral.assets),
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    #
    # Every ledger change and solvency check runs before the first token
    # call, so a rejected operation never touches balances or allowances.
    # Only a collaborator failure can interrupt the token calls.

    def deposit_collateral(self, user: str, token: str, amount: int) -> None:
        with self._transactions.atomic("deposit_collateral") as tx:
            self._credit_collateral(user, token, amount)
            self._pull_collateral(tx, user, token, amount)

    def mint_dsc(self, user: str, amount: int) -> None:
        with self._transactions.atomic("mint_dsc"):
            self._record_debt(user, amount)
            self.health.assert_solvent(user)
            self._issue_dsc(user, amount)

    def deposit_collateral_and_mint_dsc(
        self, user: str, token: str, collateral_amount: int, amount_dsc_to_mint: int
    ) -> None:
        with self._transactions.atomic("deposit_collateral_and_mint_dsc") as tx:
            self._credit_collateral(user, token, collateral_amount)
            self._record_debt(user, amount_dsc_to_mint)
            self.health.assert_solvent(user)

            self._pull_collateral(tx, user, token, collateral_amount)
            self._issue_dsc(user, amount_dsc_to_mint)

    def redeem_collateral(self, user: str, token: str, amount: int) -> None:
        with self._transactions.atomic("redeem_collateral"):
            self._debit_collateral(token, amount, user, user)
            self.health.assert_solvent(user)
            self._pay_out(token, amount, user)

    def burn_dsc(self, user: str, amount: int) -> None:
        with self._transactions.atomic("burn_dsc") as tx:
            self._reduce_debt(user, amount)
            self._pull_and_burn(tx, amount, user)
            logger.info("Burned %d %s for %s", amount, self.dsc.address, user)

    def redeem_collateral_for_dsc(
        self, user: str, token: str, collateral_amount: int, amount_dsc_to_burn: int
    ) -> None:
        """Repay debt first, then redeem, so the redemption's check has headroom."""
        with self._transactions.atomic("redeem_collateral_for_dsc") as tx:
            self._reduce_debt(user, amount_dsc_to_burn)
            self._debit_collateral(token, collateral_amount, user, user)
            self.health.assert_solvent(user)

            self._pull_and_burn(tx, amount_dsc_to_burn, user)
            self._pay_out(token, collateral_amount, user)

    # ------------------------------------------------------------------
    # Ledger steps
    # ------------------------------------------------------------------

    def _credit_collateral(self, user: str, token: str, amount: int) -> None:
        _require_positive(amount)
        self.collateral.increase(user, token, amount)
        self.events.emit(CollateralDeposited(user=user, token=token, amount=amount))

    def _debit_collateral(
        self, token: str, amount: int, redeemed_from: str, redeemed_to: str
    ) -> None:
        _require_positive(amount)
        self.collateral.decrease(redeemed_from, token, amount)
        self.events.emit(
            CollateralRedeemed(
                redeemed_from=redeemed_from,
                redeemed_to=redeemed_to,
                token=token,
                amount=amount,
            )
        )

    def _record_debt(self, user: str, amount: int) -> None:
        _require_positive(amount)
        self.debt.increase(user, amount)

    def _reduce_debt(self, user: str, amount: int) -> None:
        _require_positive(amount)
        self.debt.decrease(user, amount)

    # ------------------------------------------------------------------
    # Token calls
    # ------------------------------------------------------------------

    def _pull_collateral(self, tx: Transaction, user: str, token: str, amount: int) -> None:
        asset = self._tokens[token]
        if not asset.transfer_from(self.address, user, self.address, amount):
            raise TransferFailed(token, user, self.address, amount)
        tx.on_rollback(
            f"return {amount} {token} to {user}",
            lambda: asset.transfer(self.address, user, amount),
        )
        logger.info("%s deposited %d %s", user, amount, token)

    def _issue_dsc(self, user: str, amount: int) -> None:
        try:
            minted = self.dsc.mint(self.address, user, amount)
        except TokenError as e:
            raise MintFailed(user, amount) from e
        if not minted:
            raise MintFailed(user, amount)
        logger.info("%s minted %d %s", user, amount, self.dsc.address)

    def _pay_out(self, token: str, amount: int, to: str) -> None:
        """Last external call of an operation; nothing after it can fail."""
        if not self._tokens[token].transfer(self.address, to, amount):
            raise TransferFailed(token, self.address, to, amount)
        logger.info("Transferred %d %s to %s", amount, token, to)

    def _pull_and_burn(self, tx: Transaction, amount: int, dsc_from: str) -> None:
        if not self.dsc.transfer_from(self.address, dsc_from, self.address, amount):
            raise TransferFailed(self.dsc.address, dsc_from, self.address, amount)
        tx.on_rollback(
            f"return {amount} {self.dsc.address} to {dsc_from}",
            lambda: self.dsc.transfer(self.address, dsc_from, amount),
        )

        try:
            self.dsc.burn(self.address, amount)
        except TokenError as e:
            raise BurnFailed(amount) from e
        tx.on_rollback(
            f"re-mint {amount} {self.dsc.address}",
            lambda: self.dsc.mint(self.address, self.address, amount),
        )
