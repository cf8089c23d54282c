"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
)

logger = logging.getLogger(__name__)

PRICE_PROVIDERS = ("static", "pyth")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineParams:
    address: str = "dsc-engine"
    liquidation_threshold: int = LIQUIDATION_THRESHOLD
    liquidation_bonus: int = LIQUIDATION_BONUS
    min_health_factor: int = MIN_HEALTH_FACTOR


@dataclass(frozen=True)
class DebtTokenConfig:
    name: str = "Decentralized Stable Coin"
    symbol: str = "DSC"
    decimals: int = 18


@dataclass(frozen=True)
class PriceFeedConfig:
    decimals: int = 8
    initial_answer: int = 0
    heartbeat: int = 0
    pyth_id: str = ""


@dataclass(frozen=True)
class CollateralConfig:
    symbol: str = ""
    name: str = ""
    decimals: int = 18
    price_feed: PriceFeedConfig = field(default_factory=PriceFeedConfig)


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    timeout: int = 10
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "static"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    engine: EngineParams = field(default_factory=EngineParams)
    debt_token: DebtTokenConfig = field(default_factory=DebtTokenConfig)
    collateral: tuple[CollateralConfig, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_engine(raw: dict[str, Any]) -> EngineParams:
    return EngineParams(
        address=str(raw.get("address", EngineParams.address)),
        liquidation_threshold=int(raw.get("liquidation_threshold", LIQUIDATION_THRESHOLD)),
        liquidation_bonus=int(raw.get("liquidation_bonus", LIQUIDATION_BONUS)),
        min_health_factor=int(raw.get("min_health_factor", MIN_HEALTH_FACTOR)),
    )


def _build_debt_token(raw: dict[str, Any]) -> DebtTokenConfig:
    return DebtTokenConfig(
        name=raw.get("name", DebtTokenConfig.name),
        symbol=raw.get("symbol", DebtTokenConfig.symbol),
        decimals=int(raw.get("decimals", 18)),
    )


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralConfig, ...]:
    collateral: list[CollateralConfig] = []
    for c in raw:
        feed = c.get("price_feed", {})
        collateral.append(
            CollateralConfig(
                symbol=c.get("symbol", ""),
                name=c.get("name", c.get("symbol", "")),
                decimals=int(c.get("decimals", 18)),
                price_feed=PriceFeedConfig(
                    decimals=int(feed.get("decimals", 8)),
                    initial_answer=int(feed.get("initial_answer", 0)),
                    heartbeat=int(feed.get("heartbeat", 0)),
                    pyth_id=str(feed.get("pyth_id", "")),
                ),
            )
        )
    return tuple(collateral)


def _build_price_oracle(
    raw: dict[str, Any], collateral: tuple[CollateralConfig, ...]
) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    feeds = {c.symbol: c.price_feed.pyth_id for c in collateral if c.price_feed.pyth_id}
    feeds.update(pyth_raw.get("feeds", {}))
    return PriceOracleConfig(
        provider=raw.get("provider", "static"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            timeout=int(pyth_raw.get("timeout", 10)),
            feeds=feeds,
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    collateral = _build_collateral(raw.get("collateral", []))
    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {})),
        debt_token=_build_debt_token(raw.get("debt_token", {})),
        collateral=collateral,
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}), collateral),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    params = cfg.engine
    if not params.address:
        raise ValueError("Engine address must not be empty")
    if not 0 < params.liquidation_threshold <= LIQUIDATION_PRECISION:
        raise ValueError(
            f"liquidation_threshold must be in (0, {LIQUIDATION_PRECISION}], "
            f"got {params.liquidation_threshold}"
        )
    if not 0 <= params.liquidation_bonus < LIQUIDATION_PRECISION:
        raise ValueError(
            f"liquidation_bonus must be in [0, {LIQUIDATION_PRECISION}), "
            f"got {params.liquidation_bonus}"
        )
    if params.min_health_factor <= 0:
        raise ValueError("min_health_factor must be positive")

    if not cfg.collateral:
        raise ValueError("At least one collateral asset must be configured")

    seen: set[str] = set()
    for c in cfg.collateral:
        if not c.symbol:
            raise ValueError("Collateral asset has no symbol")
        if c.symbol in seen:
            raise ValueError(f"Collateral '{c.symbol}' is configured twice")
        if c.symbol == cfg.debt_token.symbol:
            raise ValueError(f"Collateral '{c.symbol}' clashes with the debt token")
        seen.add(c.symbol)
        if c.price_feed.initial_answer <= 0:
            raise ValueError(f"Collateral '{c.symbol}' needs a positive initial_answer")

    if cfg.price_oracle.provider not in PRICE_PROVIDERS:
        raise ValueError(
            f"Unknown price provider '{cfg.price_oracle.provider}' "
            f"(expected one of {', '.join(PRICE_PROVIDERS)})"
        )
