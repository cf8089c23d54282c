"""Integration tests for deployment wiring and scenario replay."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from stablecoin_engine.config import AppConfig, PriceOracleConfig, load_config
from stablecoin_engine.errors import NotOwner
from stablecoin_engine.models import RoundData
from stablecoin_engine.services import ScenarioRunner, deploy, fetch_seed_prices, load_scenario

SCENARIOS = Path(__file__).resolve().parents[2] / "scenarios"


class TestDeploy:
    def test_wires_tokens_feeds_and_engine(self, sample_app_config: AppConfig) -> None:
        deployment = deploy(sample_app_config)

        assert set(deployment.tokens) == {"WETH", "WBTC"}
        assert deployment.engine.get_collateral_tokens() == ("WETH", "WBTC")
        assert deployment.engine.get_usd_value("WETH", 10**18) == 2000 * 10**18
        assert deployment.dsc.owner == deployment.engine.address
        assert deployment.token("DSC") is deployment.dsc

    def test_deployer_can_no_longer_mint(self, sample_app_config: AppConfig) -> None:
        deployment = deploy(sample_app_config)
        with pytest.raises(NotOwner):
            deployment.dsc.mint("deployer", "deployer", 1)

    def test_unknown_token(self, sample_app_config: AppConfig) -> None:
        with pytest.raises(KeyError, match="DOGE"):
            deploy(sample_app_config).token("DOGE")

    def test_seed_prices_override_config(self, sample_app_config: AppConfig) -> None:
        deployment = deploy(sample_app_config, seed_prices={"WETH": RoundData(answer=3000 * 10**6, decimals=6)})
        assert deployment.engine.get_usd_value("WETH", 10**18) == 3000 * 10**18
        assert deployment.feeds["WETH"].decimals == 6
        assert deployment.engine.get_usd_value("WBTC", 10**18) == 1000 * 10**18


class TestFetchSeedPrices:
    @pytest.mark.asyncio
    async def test_static_provider_skips_network(self, sample_app_config: AppConfig) -> None:
        with patch("stablecoin_engine.services.deployment.PythOracle") as oracle_cls:
            assert await fetch_seed_prices(sample_app_config) == {}
        oracle_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_pyth_provider_drops_non_positive_quotes(self, sample_app_config: AppConfig) -> None:
        config = AppConfig(
            engine=sample_app_config.engine,
            debt_token=sample_app_config.debt_token,
            collateral=sample_app_config.collateral,
            price_oracle=PriceOracleConfig(provider="pyth", pyth=sample_app_config.price_oracle.pyth),
        )
        quotes = {
            "WETH": RoundData(answer=2500 * 10**8, decimals=8),
            "WBTC": RoundData(answer=0, decimals=8),
        }
        with patch(
            "stablecoin_engine.services.deployment.PythOracle.fetch_quotes",
            new=AsyncMock(return_value=quotes),
        ):
            seeds = await fetch_seed_prices(config)

        assert seeds == {"WETH": quotes["WETH"]}


class TestScenarioRunner:
    @pytest.fixture()
    def runner(self, sample_yaml_path: Path) -> ScenarioRunner:
        return ScenarioRunner(deploy(load_config(sample_yaml_path)))

    def test_liquidation_scenario(self, runner: ScenarioRunner) -> None:
        result = runner.run(load_scenario(SCENARIOS / "liquidation.yaml"))

        assert result.ok, result.failures
        assert result.steps_run == 8
        assert result.accounts["alice"].total_dsc_minted == 0
        assert result.accounts["alice"].collateral["WETH"] == 10 * 10**18 - 6_111_111_111_111_111_110
        assert result.accounts["bob"].total_dsc_minted == 100 * 10**18
        assert result.accounts["bob"].dsc_balance == 0

    def test_round_trip_scenario(self, runner: ScenarioRunner) -> None:
        result = runner.run(load_scenario(SCENARIOS / "round_trip.yaml"))

        assert result.ok, result.failures
        carol = result.accounts["carol"]
        assert carol.total_dsc_minted == 0
        assert carol.collateral == {"WETH": 0, "WBTC": 0}
        assert carol.dsc_balance == 0

    def test_unexpected_error_stops_the_run(self, runner: ScenarioRunner) -> None:
        result = runner.run({
            "name": "broken",
            "steps": [
                {"action": "mint", "user": "dave", "amount": "1 ether"},
                {"action": "fund", "user": "dave", "token": "WETH", "amount": 1},
            ],
        })

        assert not result.ok
        assert result.steps_run == 1
        assert "HealthFactorBroken" in result.failures[0]

    def test_expected_error_that_never_happens(self, runner: ScenarioRunner) -> None:
        result = runner.run({
            "name": "too-optimistic",
            "steps": [
                {"action": "fund", "user": "erin", "token": "WETH", "amount": "1 ether"},
                {"action": "deposit", "user": "erin", "token": "WETH", "amount": "1 ether",
                 "expect_error": "NeedsMoreThanZero"},
            ],
        })

        assert not result.ok
        assert "succeeded" in result.failures[0]

    def test_expect_error_matches_base_class(self, runner: ScenarioRunner) -> None:
        result = runner.run({
            "name": "category",
            "steps": [{"action": "deposit", "user": "frank", "token": "DOGE", "amount": 1,
                       "expect_error": "ValidationError"}],
        })
        assert result.ok, result.failures

    def test_unknown_action(self, runner: ScenarioRunner) -> None:
        result = runner.run({"name": "typo", "steps": [{"action": "flashloan"}]})
        assert result.failures == ["step 1: unknown action 'flashloan'"]

    def test_unknown_token_is_a_step_failure(self, runner: ScenarioRunner) -> None:
        result = runner.run({
            "name": "unlisted",
            "steps": [
                {"action": "fund", "user": "gina", "token": "WETH", "amount": "1 ether"},
                {"action": "fund", "user": "gina", "token": "DOGE", "amount": 1},
                {"action": "fund", "user": "gina", "token": "WETH", "amount": 1},
            ],
        })

        assert not result.ok
        assert result.steps_run == 2
        assert result.failures == ["step 2 fund: invalid step: unknown collateral 'DOGE'"]

    def test_missing_field_is_a_step_failure(self, runner: ScenarioRunner) -> None:
        result = runner.run({"name": "terse", "steps": [{"action": "mint", "user": "hank"}]})

        assert not result.ok
        assert result.steps_run == 1
        assert result.failures == ["step 1 mint: invalid step: amount"]
        assert result.accounts["hank"].total_dsc_minted == 0

    def test_bad_amount_is_a_step_failure(self, runner: ScenarioRunner) -> None:
        result = runner.run({
            "name": "typo-amount",
            "steps": [{"action": "set_price", "token": "WETH", "answer": "lots"}],
        })

        assert not result.ok
        assert "invalid step: Invalid amount: 'lots'" in result.failures[0]
