"""Wire tokens, price feeds and the engine together from configuration."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from ..config import AppConfig, CollateralConfig
from ..engine import DSCEngine
from ..models import RoundData
from ..oracles import AggregatorFeed, PythOracle
from ..tokens import DebtToken, Token

logger = logging.getLogger(__name__)

DEPLOYER = "deployer"


@dataclass
class Deployment:
    engine: DSCEngine
    dsc: DebtToken
    tokens: dict[str, Token] = field(default_factory=dict)
    feeds: dict[str, AggregatorFeed] = field(default_factory=dict)

    def token(self, symbol: str) -> Token:
        if symbol == self.dsc.symbol:
            return self.dsc
        try:
            return self.tokens[symbol]
        except KeyError:
            raise KeyError(f"unknown token '{symbol}'") from None


def _build_feed(
    collateral: CollateralConfig,
    seed: RoundData | None,
    clock: Callable[[], float],
) -> AggregatorFeed:
    decimals = collateral.price_feed.decimals
    answer = collateral.price_feed.initial_answer
    if seed is not None:
        decimals, answer = seed.decimals, seed.answer
        logger.info("Seeding %s feed from live quote: %d (%d decimals)", collateral.symbol, answer, decimals)
    return AggregatorFeed(
        decimals=decimals,
        initial_answer=answer,
        description=f"{collateral.symbol} / USD",
        heartbeat=collateral.price_feed.heartbeat,
        clock=clock,
    )


def deploy(
    config: AppConfig,
    seed_prices: dict[str, RoundData] | None = None,
    clock: Callable[[], float] = time.time,
) -> Deployment:
    """Deploy collateral tokens, feeds, the debt token and the engine.

    The debt token is created by the deployer and ownership is handed to the
    engine, so only the engine can mint or burn it afterwards.
    """
    seed_prices = seed_prices or {}

    tokens: dict[str, Token] = {}
    feeds: dict[str, AggregatorFeed] = {}
    for c in config.collateral:
        tokens[c.symbol] = Token(c.name or c.symbol, c.symbol, c.decimals)
        feeds[c.symbol] = _build_feed(c, seed_prices.get(c.symbol), clock)

    dsc = DebtToken(
        owner=DEPLOYER,
        name=config.debt_token.name,
        symbol=config.debt_token.symbol,
        decimals=config.debt_token.decimals,
    )
    engine = DSCEngine(
        list(tokens.values()),
        list(feeds.values()),
        dsc,
        params=config.engine,
    )
    dsc.transfer_ownership(DEPLOYER, engine.address)

    logger.info(
        "Deployed %s with collateral %s", engine.address, ", ".join(tokens)
    )
    return Deployment(engine=engine, dsc=dsc, tokens=tokens, feeds=feeds)


async def fetch_seed_prices(config: AppConfig) -> dict[str, RoundData]:
    """Live quotes for every configured collateral, when the provider is Pyth."""
    if config.price_oracle.provider != "pyth":
        return {}

    oracle = PythOracle(config.price_oracle.pyth)
    quotes = await oracle.fetch_quotes([c.symbol for c in config.collateral])

    missing = [c.symbol for c in config.collateral if c.symbol not in quotes]
    if missing:
        logger.warning(
            "No live quote for %s, using configured initial answers", ", ".join(missing)
        )
    return {symbol: q for symbol, q in quotes.items() if q.answer > 0}
