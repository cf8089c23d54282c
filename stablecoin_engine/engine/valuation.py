"""Valuation service: converts collateral amounts to 18-decimal USD."""
from __future__ import annotations

import logging
from typing import Mapping

from ..constants import FEED_PRECISION_DECIMALS, PRECISION
from ..errors import OracleDataInvalid, UnsupportedAsset
from ..interfaces.price_feed import PriceFeed
from .ledger import CollateralLedger

logger = logging.getLogger(__name__)


def scale_price(answer: int, decimals: int) -> int:
    """Bring a feed answer to 18-decimal precision.

    An 8-decimal feed is multiplied by 1e10; feeds finer than 18 decimals are
    truncated.
    """
    if decimals <= FEED_PRECISION_DECIMALS:
        return answer * 10 ** (FEED_PRECISION_DECIMALS - decimals)
    return answer // 10 ** (decimals - FEED_PRECISION_DECIMALS)


class ValuationService:
    """Prices collateral through its registered feed; no price caching."""

    def __init__(self, price_feeds: Mapping[str, PriceFeed], collateral: CollateralLedger) -> None:
        self._price_feeds = dict(price_feeds)
        self._collateral = collateral

    def price_feed(self, asset: str) -> PriceFeed:
        feed = self._price_feeds.get(asset)
        if feed is None:
            raise UnsupportedAsset(asset)
        return feed

    def price(self, asset: str) -> int:
        """Latest price of one whole unit of ``asset``, 18-decimal USD."""
        data = self.price_feed(asset).latest_round_data()
        if data.is_stale:
            raise OracleDataInvalid(asset, f"stale round {data.round_id}")
        if data.answer <= 0:
            raise OracleDataInvalid(asset, f"non-positive answer {data.answer}")

        scaled = scale_price(data.answer, data.decimals)
        if scaled <= 0:
            raise OracleDataInvalid(asset, "answer truncates to zero")
        return scaled

    def usd_value(self, asset: str, amount: int) -> int:
        return self.price(asset) * amount // PRECISION

    def token_amount_from_usd(self, asset: str, usd_amount_in_wei: int) -> int:
        return usd_amount_in_wei * PRECISION // self.price(asset)

    def total_collateral_value(self, user: str) -> int:
        total = 0
        for asset in self._collateral.assets:
            amount = self._collateral.balance(user, asset)
            if amount:
                total += self.usd_value(asset, amount)
        logger.debug("Collateral value of %s: %d", user, total)
        return total
