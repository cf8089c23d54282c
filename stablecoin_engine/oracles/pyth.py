"""Pyth Network price oracle — seeds feeds with live Hermes quotes."""
import asyncio
import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig
from ..models import RoundData

logger = logging.getLogger(__name__)


def _to_round_data(price_data: dict) -> RoundData:
    """Convert a Hermes ``price`` object into an integer quote.

    Hermes reports ``price * 10^expo``; a negative exponent becomes the
    quote's decimal count.
    """
    price_raw = int(price_data.get("price", 0))
    expo = int(price_data.get("expo", 0))
    publish_time = int(price_data.get("publish_time", 0))

    if expo <= 0:
        return RoundData(answer=price_raw, decimals=-expo, updated_at=publish_time)
    return RoundData(answer=price_raw * 10**expo, decimals=0, updated_at=publish_time)


class PythOracle:
    """Fetch quotes from Pyth Network Hermes."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.timeout = config.timeout
        self.price_feeds = dict(config.feeds)

    async def fetch_quotes(self, symbols: list[str] | None = None) -> dict[str, RoundData]:
        """Fetch current quotes for the configured feeds.

        Args:
            symbols: Optional list of symbols to fetch. If None, fetches all
                     configured feeds.
        """
        quotes: dict[str, RoundData] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = sorted(set(feeds.values()))
        if not feed_ids:
            return quotes

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return quotes

                    data = await response.json()
                    parsed = data.get("parsed", [])

                    # Reverse mapping from feed ID to symbols
                    id_to_symbols: dict[str, list[str]] = {}
                    for symbol, feed_id in feeds.items():
                        id_to_symbols.setdefault(feed_id.lower().removeprefix("0x"), []).append(symbol)

                    for item in parsed:
                        feed_id = str(item.get("id", "")).lower().removeprefix("0x")
                        if feed_id not in id_to_symbols:
                            continue
                        quote = _to_round_data(item.get("price", {}))
                        for symbol in id_to_symbols[feed_id]:
                            quotes[symbol] = quote

                    logger.info("Fetched prices from Pyth Network:")
                    for symbol, quote in sorted(quotes.items()):
                        logger.info(
                            "  %s: $%.4f", symbol, quote.answer / 10**quote.decimals
                        )

        except (
            aiohttp.ClientError,
            asyncio.TimeoutError,
            TimeoutError,
            ConnectionError,
            ValueError,
        ) as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return quotes
