"""Liquidation math: pure functions, no I/O."""
from __future__ import annotations

from ..constants import LIQUIDATION_BONUS, LIQUIDATION_PRECISION
from ..models import LiquidationQuote


def bonus_collateral(token_amount_from_debt: int, liquidation_bonus: int = LIQUIDATION_BONUS) -> int:
    """Extra collateral paid on top of the debt-equivalent amount (floored)."""
    return token_amount_from_debt * liquidation_bonus // LIQUIDATION_PRECISION


def quote_liquidation(
    debt_to_cover: int,
    token_amount_from_debt: int,
    liquidation_bonus: int = LIQUIDATION_BONUS,
) -> LiquidationQuote:
    """Build the seize quote for covering ``debt_to_cover``.

    Example, collateral at $18 with a 10% bonus covering 100 DSC:
        base  = 100e18 * 1e18 / 18e18 = 5.555…e18
        bonus = base * 10 / 100       = 0.555…e18
    """
    return LiquidationQuote(
        debt_to_cover=debt_to_cover,
        token_amount_from_debt=token_amount_from_debt,
        bonus_collateral=bonus_collateral(token_amount_from_debt, liquidation_bonus),
    )
