"""Data models (all frozen)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RoundData:
    """Point-in-time quote from a price feed."""

    answer: int
    decimals: int
    updated_at: int = 0
    round_id: int = 0
    is_stale: bool = False


@dataclass(frozen=True)
class AccountInformation:
    """Debt and collateral value of one user, both 18-decimal USD."""

    total_dsc_minted: int
    collateral_value_in_usd: int


@dataclass(frozen=True)
class LiquidationQuote:
    """Collateral owed to a liquidator for covering ``debt_to_cover``."""

    debt_to_cover: int
    token_amount_from_debt: int
    bonus_collateral: int

    @property
    def total_collateral_to_redeem(self) -> int:
        return self.token_amount_from_debt + self.bonus_collateral


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollateralDeposited:
    user: str
    token: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    token: str
    amount: int


@dataclass(frozen=True)
class PositionLiquidated:
    user: str
    liquidator: str
    token: str
    debt_covered: int
    collateral_seized: int
