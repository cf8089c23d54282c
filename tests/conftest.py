"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from stablecoin_engine.config import (
    AppConfig,
    CollateralConfig,
    DebtTokenConfig,
    EngineParams,
    PriceFeedConfig,
    PriceOracleConfig,
    PythConfig,
)
from stablecoin_engine.engine import DSCEngine
from stablecoin_engine.oracles import AggregatorFeed
from stablecoin_engine.tokens import DebtToken, Token

ENGINE = "dsc-engine"
DEPLOYER = "deployer"
USER = "alice"
LIQUIDATOR = "bob"

ETH_USD_PRICE = 2000 * 10**8
BTC_USD_PRICE = 1000 * 10**8

COLLATERAL_AMOUNT = 10 * 10**18
AMOUNT_TO_MINT = 100 * 10**18
COLLATERAL_TO_COVER = 20 * 10**18


def approve_and_deposit(engine: DSCEngine, token: Token, user: str, amount: int) -> None:
    token.approve(user, engine.address, amount)
    engine.deposit_collateral(user, token.address, amount)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_engine_params() -> EngineParams:
    return EngineParams(address=ENGINE, liquidation_threshold=50, liquidation_bonus=10)


@pytest.fixture()
def sample_app_config(sample_engine_params: EngineParams) -> AppConfig:
    return AppConfig(
        engine=sample_engine_params,
        debt_token=DebtTokenConfig(),
        collateral=(
            CollateralConfig(
                symbol="WETH",
                name="Wrapped Ether",
                price_feed=PriceFeedConfig(decimals=8, initial_answer=ETH_USD_PRICE, pyth_id="aaa111"),
            ),
            CollateralConfig(
                symbol="WBTC",
                name="Wrapped Bitcoin",
                price_feed=PriceFeedConfig(decimals=8, initial_answer=BTC_USD_PRICE, pyth_id="bbb222"),
            ),
        ),
        price_oracle=PriceOracleConfig(
            provider="static",
            pyth=PythConfig(
                hermes_url="https://hermes.example.com",
                feeds={"WETH": "aaa111", "WBTC": "bbb222"},
            ),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    engine:
      address: dsc-engine
      liquidation_threshold: 50
      liquidation_bonus: 10
      min_health_factor: 1000000000000000000
    debt_token:
      name: Decentralized Stable Coin
      symbol: DSC
    collateral:
      - symbol: WETH
        decimals: 18
        price_feed:
          decimals: 8
          initial_answer: 200000000000
          pyth_id: "aaa111"
      - symbol: WBTC
        decimals: 18
        price_feed:
          decimals: 8
          initial_answer: 100000000000
          heartbeat: 3600
    price_oracle:
      provider: static
      pyth:
        hermes_url: "https://hermes.example.com"
        timeout: 5
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Token and feed fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def weth() -> Token:
    return Token("Wrapped Ether", "WETH")


@pytest.fixture()
def wbtc() -> Token:
    return Token("Wrapped Bitcoin", "WBTC")


@pytest.fixture()
def eth_usd() -> AggregatorFeed:
    return AggregatorFeed(decimals=8, initial_answer=ETH_USD_PRICE, description="ETH / USD")


@pytest.fixture()
def btc_usd() -> AggregatorFeed:
    return AggregatorFeed(decimals=8, initial_answer=BTC_USD_PRICE, description="BTC / USD")


@pytest.fixture()
def dsc() -> DebtToken:
    return DebtToken(owner=DEPLOYER)


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def dsce(
    weth: Token,
    wbtc: Token,
    eth_usd: AggregatorFeed,
    btc_usd: AggregatorFeed,
    dsc: DebtToken,
    sample_engine_params: EngineParams,
) -> DSCEngine:
    engine = DSCEngine([weth, wbtc], [eth_usd, btc_usd], dsc, params=sample_engine_params)
    dsc.transfer_ownership(DEPLOYER, engine.address)
    weth.mint(USER, COLLATERAL_AMOUNT)
    wbtc.mint(USER, COLLATERAL_AMOUNT)
    weth.mint(LIQUIDATOR, COLLATERAL_TO_COVER)
    return engine


@pytest.fixture()
def dsce_deposited(dsce: DSCEngine, weth: Token) -> DSCEngine:
    approve_and_deposit(dsce, weth, USER, COLLATERAL_AMOUNT)
    return dsce


@pytest.fixture()
def dsce_minted(dsce: DSCEngine, weth: Token) -> DSCEngine:
    weth.approve(USER, dsce.address, COLLATERAL_AMOUNT)
    dsce.deposit_collateral_and_mint_dsc(USER, weth.address, COLLATERAL_AMOUNT, AMOUNT_TO_MINT)
    return dsce


@pytest.fixture()
def dsce_liquidated(
    dsce_minted: DSCEngine, weth: Token, dsc: DebtToken, eth_usd: AggregatorFeed
) -> DSCEngine:
    eth_usd.update_answer(18 * 10**8)

    weth.approve(LIQUIDATOR, dsce_minted.address, COLLATERAL_TO_COVER)
    dsce_minted.deposit_collateral_and_mint_dsc(
        LIQUIDATOR, weth.address, COLLATERAL_TO_COVER, AMOUNT_TO_MINT
    )
    dsc.approve(LIQUIDATOR, dsce_minted.address, AMOUNT_TO_MINT)
    dsce_minted.liquidate(LIQUIDATOR, weth.address, USER, AMOUNT_TO_MINT)
    return dsce_minted
