"""Command-line interface for the stablecoin engine."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import AppConfig, load_config
from .constants import MAX_HEALTH_FACTOR, PRECISION
from .logging_setup import configure_logging
from .oracles import PythOracle
from .services import ScenarioResult, ScenarioRunner, deploy, fetch_seed_prices, load_scenario

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="stablecoin-engine",
        description="Over-collateralized stablecoin engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("prices", help="Fetch live Pyth quotes for configured collateral")
    sub.add_parser("params", help="Show engine parameters and collateral")

    simulate_parser = sub.add_parser("simulate", help="Run a scenario against a fresh engine")
    simulate_parser.add_argument("scenario", help="Path to a scenario YAML file")

    return parser


def _format_units(value: int) -> str:
    return f"{value / PRECISION:,.2f}"


def _format_usd(value: int) -> str:
    return "$" + _format_units(value)


def _format_health_factor(value: int) -> str:
    if value == MAX_HEALTH_FACTOR:
        return "∞"
    return f"{value / PRECISION:.4f}"


def _log_result(result: ScenarioResult) -> None:
    logger.info("=" * 60)
    logger.info("SCENARIO %s (%d steps)", result.name, result.steps_run)
    logger.info("=" * 60)
    for report in result.accounts.values():
        logger.info("  %s", report.user)
        logger.info("    Debt:             %s DSC", _format_units(report.total_dsc_minted))
        logger.info("    Collateral value: %s", _format_usd(report.collateral_value_in_usd))
        logger.info("    Health factor:    %s", _format_health_factor(report.health_factor))
        for token, amount in report.collateral.items():
            if amount:
                logger.info("    - %s: %d", token, amount)
        logger.info("    DSC balance:      %d", report.dsc_balance)
    for failure in result.failures:
        logger.error("  FAILED %s", failure)
    logger.info("=" * 60)


def _show_params(config: AppConfig) -> None:
    params = config.engine
    logger.info("Engine %s", params.address)
    logger.info("  Liquidation threshold: %d%%", params.liquidation_threshold)
    logger.info("  Liquidation bonus:     %d%%", params.liquidation_bonus)
    logger.info("  Min health factor:     %s", _format_health_factor(params.min_health_factor))
    logger.info("  Price provider:        %s", config.price_oracle.provider)
    for c in config.collateral:
        feed = c.price_feed
        logger.info(
            "  %s (%d decimals) @ $%.2f",
            c.symbol, c.decimals, feed.initial_answer / 10**feed.decimals,
        )


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "prices":
        quotes = await PythOracle(config.price_oracle.pyth).fetch_quotes()
        return 0 if quotes else 1
    if args.command == "params":
        _show_params(config)
        return 0
    if args.command == "simulate":
        scenario = load_scenario(args.scenario)
        deployment = deploy(config, seed_prices=await fetch_seed_prices(config))
        result = ScenarioRunner(deployment).run(scenario)
        _log_result(result)
        return 0 if result.ok else 1

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
