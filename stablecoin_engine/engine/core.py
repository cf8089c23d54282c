"""DSCEngine: position management plus liquidation and read accessors."""
from __future__ import annotations

import logging

from ..constants import LIQUIDATION_PRECISION, PRECISION
from ..errors import (
    InsufficientCollateralForBonus,
    LiquidationIneffective,
    NeedsMoreThanZero,
    PositionHealthy,
)
from ..interfaces.price_feed import PriceFeed
from ..models import AccountInformation, LiquidationQuote, PositionLiquidated
from .health import calculate_health_factor
from .liquidation import quote_liquidation
from .positions import PositionManager

logger = logging.getLogger(__name__)


class DSCEngine(PositionManager):
    """Over-collateralized issuance engine for the pegged debt token."""

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    def quote_liquidation(self, collateral: str, debt_to_cover: int) -> LiquidationQuote:
        """Collateral a liquidator would receive for ``debt_to_cover`` at current prices."""
        if debt_to_cover <= 0:
            raise NeedsMoreThanZero()
        self.collateral.require_registered(collateral)
        return quote_liquidation(
            debt_to_cover,
            self.valuation.token_amount_from_usd(collateral, debt_to_cover),
            self.params.liquidation_bonus,
        )

    def liquidate(self, liquidator: str, collateral: str, user: str, debt_to_cover: int) -> LiquidationQuote:
        """Repay part of ``user``'s debt with the liquidator's DSC and seize
        the matching collateral plus the liquidation bonus.

        The liquidator must have approved the engine for ``debt_to_cover`` DSC.
        """
        with self._transactions.atomic("liquidate") as tx:
            quote = self.quote_liquidation(collateral, debt_to_cover)

            starting_health_factor = self.health.health_factor(user)
            if starting_health_factor >= self.health.min_health_factor:
                raise PositionHealthy(user, starting_health_factor)

            seized = quote.total_collateral_to_redeem
            held = self.collateral.balance(user, collateral)
            if held < seized:
                raise InsufficientCollateralForBonus(collateral, held, seized)

            self._debit_collateral(collateral, seized, user, liquidator)
            self.debt.decrease(user, debt_to_cover)
            self.events.emit(
                PositionLiquidated(
                    user=user,
                    liquidator=liquidator,
                    token=collateral,
                    debt_covered=debt_to_cover,
                    collateral_seized=seized,
                )
            )

            ending_health_factor = self.health.health_factor(user)
            if ending_health_factor < starting_health_factor:
                raise LiquidationIneffective(starting_health_factor, ending_health_factor)
            self.health.assert_solvent(liquidator)

            self._pull_and_burn(tx, debt_to_cover, liquidator)
            self._pay_out(collateral, seized, liquidator)

        logger.info(
            "%s liquidated %s: covered %d debt, seized %d %s (health %d -> %d)",
            liquidator, user, debt_to_cover, seized, collateral,
            starting_health_factor, ending_health_factor,
        )
        return quote

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_health_factor(self, user: str) -> int:
        return self.health.health_factor(user)

    def calculate_health_factor(self, total_dsc_minted: int, collateral_value_in_usd: int) -> int:
        return calculate_health_factor(
            total_dsc_minted, collateral_value_in_usd, self.params.liquidation_threshold
        )

    def get_account_information(self, user: str) -> AccountInformation:
        return AccountInformation(
            total_dsc_minted=self.debt.balance(user),
            collateral_value_in_usd=self.valuation.total_collateral_value(user),
        )

    def get_account_collateral_value(self, user: str) -> int:
        return self.valuation.total_collateral_value(user)

    def get_collateral_balance_of_user(self, user: str, token: str) -> int:
        return self.collateral.balance(user, token)

    def get_usd_value(self, token: str, amount: int) -> int:
        return self.valuation.usd_value(token, amount)

    def get_token_amount_from_usd(self, token: str, usd_amount_in_wei: int) -> int:
        return self.valuation.token_amount_from_usd(token, usd_amount_in_wei)

    def get_collateral_tokens(self) -> tuple[str, ...]:
        return self.collateral.assets

    def get_collateral_token_price_feed(self, token: str) -> PriceFeed:
        return self.valuation.price_feed(token)

    @property
    def precision(self) -> int:
        return PRECISION

    @property
    def liquidation_precision(self) -> int:
        return LIQUIDATION_PRECISION

    @property
    def liquidation_threshold(self) -> int:
        return self.params.liquidation_threshold

    @property
    def liquidation_bonus(self) -> int:
        return self.params.liquidation_bonus

    @property
    def min_health_factor(self) -> int:
        return self.params.min_health_factor
