"""Unit tests for CLI argument parsing and formatting."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from stablecoin_engine.cli import _format_health_factor, _format_usd, _run, build_parser
from stablecoin_engine.constants import MAX_HEALTH_FACTOR, PRECISION


class TestBuildParser:
    def test_no_args(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None
        assert args.config is None
        assert args.log_level == "INFO"

    def test_prices(self) -> None:
        args = build_parser().parse_args(["prices"])
        assert args.command == "prices"

    def test_params_with_config(self) -> None:
        args = build_parser().parse_args(["--config", "custom.yaml", "params"])
        assert args.command == "params"
        assert args.config == "custom.yaml"

    def test_simulate(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "simulate", "scenarios/liquidation.yaml"])
        assert args.command == "simulate"
        assert args.scenario == "scenarios/liquidation.yaml"
        assert args.log_level == "DEBUG"

    def test_simulate_requires_scenario(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["simulate"])


class TestFormatting:
    def test_usd(self) -> None:
        assert _format_usd(30000 * PRECISION) == "$30,000.00"

    def test_health_factor(self) -> None:
        assert _format_health_factor(9 * 10**17) == "0.9000"
        assert _format_health_factor(MAX_HEALTH_FACTOR) == "∞"


class TestRun:
    @pytest.mark.asyncio
    async def test_params(self, sample_yaml_path: Path) -> None:
        args = build_parser().parse_args(["--config", str(sample_yaml_path), "params"])
        assert await _run(args) == 0

    @pytest.mark.asyncio
    async def test_prices_without_quotes_fails(self, sample_yaml_path: Path) -> None:
        args = build_parser().parse_args(["--config", str(sample_yaml_path), "prices"])
        with patch(
            "stablecoin_engine.cli.PythOracle.fetch_quotes",
            new=AsyncMock(return_value={}),
        ):
            assert await _run(args) == 1

    @pytest.mark.asyncio
    async def test_simulate_scenario(self, sample_yaml_path: Path, tmp_path: Path) -> None:
        scenario = tmp_path / "scenario.yaml"
        scenario.write_text(
            "steps:\n"
            "  - {action: fund, user: alice, token: WETH, amount: 10 ether}\n"
            "  - {action: deposit_and_mint, user: alice, token: WETH,"
            " collateral_amount: 10 ether, mint_amount: 100 ether}\n"
        )
        args = build_parser().parse_args(["--config", str(sample_yaml_path), "simulate", str(scenario)])
        assert await _run(args) == 0

    @pytest.mark.asyncio
    async def test_simulate_failure_exit_code(self, sample_yaml_path: Path, tmp_path: Path) -> None:
        scenario = tmp_path / "scenario.yaml"
        scenario.write_text("steps:\n  - {action: mint, user: alice, amount: 1 ether}\n")
        args = build_parser().parse_args(["--config", str(sample_yaml_path), "simulate", str(scenario)])
        assert await _run(args) == 1
