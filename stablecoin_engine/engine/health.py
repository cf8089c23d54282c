"""Health-factor engine: the solvency check consulted by every mutation."""
from __future__ import annotations

import logging

from ..constants import (
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from ..errors import HealthFactorBroken
from .ledger import DebtLedger
from .valuation import ValuationService

logger = logging.getLogger(__name__)


def calculate_health_factor(
    total_dsc_minted: int,
    collateral_value_in_usd: int,
    liquidation_threshold: int = LIQUIDATION_THRESHOLD,
) -> int:
    """health = collateral * threshold / 100 * 1e18 / debt.

    A position without debt cannot be liquidated and gets
    ``MAX_HEALTH_FACTOR``.
    """
    if total_dsc_minted == 0:
        return MAX_HEALTH_FACTOR
    adjusted = collateral_value_in_usd * liquidation_threshold // LIQUIDATION_PRECISION
    return adjusted * PRECISION // total_dsc_minted


class HealthFactorEngine:
    def __init__(
        self,
        valuation: ValuationService,
        debt: DebtLedger,
        liquidation_threshold: int = LIQUIDATION_THRESHOLD,
        min_health_factor: int = MIN_HEALTH_FACTOR,
    ) -> None:
        self._valuation = valuation
        self._debt = debt
        self.liquidation_threshold = liquidation_threshold
        self.min_health_factor = min_health_factor

    def health_factor(self, user: str) -> int:
        debt = self._debt.balance(user)
        if debt == 0:
            return MAX_HEALTH_FACTOR
        return calculate_health_factor(
            debt,
            self._valuation.total_collateral_value(user),
            self.liquidation_threshold,
        )

    def is_solvent(self, user: str) -> bool:
        return self.health_factor(user) >= self.min_health_factor

    def assert_solvent(self, user: str) -> None:
        factor = self.health_factor(user)
        if factor < self.min_health_factor:
            logger.warning(
                "Health factor of %s below minimum: %d < %d",
                user, factor, self.min_health_factor,
            )
            raise HealthFactorBroken(factor)
