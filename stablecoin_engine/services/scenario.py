"""Scenario runner: replays a YAML list of engine operations."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ..constants import PRECISION
from ..errors import EngineError, TokenError
from .deployment import Deployment

logger = logging.getLogger(__name__)

_UNITS = {"wei": 1, "gwei": 10**9, "ether": PRECISION}


def parse_amount(value: Any) -> int:
    """Parse an integer amount; strings may carry a unit.

    Examples:
        10 → 10
        "1e18" → 10**18
        "0.5 ether" → 5 * 10**17
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, int):
        return value

    text = str(value).strip()
    multiplier = 1
    parts = text.split()
    if len(parts) == 2 and parts[1] in _UNITS:
        text, multiplier = parts[0], _UNITS[parts[1]]

    try:
        amount = Decimal(text) * multiplier
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}") from None
    if amount != amount.to_integral_value():
        raise ValueError(f"Amount {value!r} is not a whole number of base units")
    return int(amount)


@dataclass(frozen=True)
class AccountReport:
    user: str
    total_dsc_minted: int
    collateral_value_in_usd: int
    health_factor: int
    collateral: dict[str, int]
    dsc_balance: int


@dataclass
class ScenarioResult:
    name: str
    steps_run: int = 0
    failures: list[str] = field(default_factory=list)
    accounts: dict[str, AccountReport] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def load_scenario(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw.get("steps"), list):
        raise ValueError(f"Scenario {path} has no 'steps' list")
    raw.setdefault("name", path.stem)
    return raw


class ScenarioRunner:
    """Execute scenario steps against a deployment.

    Steps that move tokens into the engine approve the exact amount first,
    the way a wallet would before the call.
    """

    def __init__(self, deployment: Deployment) -> None:
        self._deployment = deployment
        self._engine = deployment.engine
        self._users: list[str] = []
        self._handlers = {
            "fund": self._fund,
            "approve": self._approve,
            "transfer": self._transfer,
            "set_price": self._set_price,
            "deposit": self._deposit,
            "mint": self._mint,
            "deposit_and_mint": self._deposit_and_mint,
            "redeem": self._redeem,
            "burn": self._burn,
            "redeem_for_dsc": self._redeem_for_dsc,
            "liquidate": self._liquidate,
        }

    def run(self, scenario: dict[str, Any]) -> ScenarioResult:
        result = ScenarioResult(name=scenario.get("name", "scenario"))
        logger.info("Running scenario '%s'", result.name)

        for index, step in enumerate(scenario.get("steps", []), start=1):
            action = step.get("action", "")
            handler = self._handlers.get(action)
            if handler is None:
                result.failures.append(f"step {index}: unknown action '{action}'")
                break

            expected = step.get("expect_error")
            try:
                handler(step)
            except (EngineError, TokenError) as e:
                names = {cls.__name__ for cls in type(e).__mro__}
                if expected and expected in names:
                    logger.info("step %d %s: rejected as expected (%s)", index, action, e)
                else:
                    result.failures.append(f"step {index} {action}: {type(e).__name__}: {e}")
                    logger.error("step %d %s failed: %s", index, action, e)
                    result.steps_run = index
                    break
            except (KeyError, ValueError) as e:
                detail = e.args[0] if e.args else e
                result.failures.append(f"step {index} {action}: invalid step: {detail}")
                logger.error("step %d %s is invalid: %s", index, action, detail)
                result.steps_run = index
                break
            else:
                if expected:
                    result.failures.append(
                        f"step {index} {action}: expected {expected}, but it succeeded"
                    )
                else:
                    logger.info("step %d %s: ok", index, action)
            result.steps_run = index

        result.accounts = {user: self.report(user) for user in self._users}
        return result

    def report(self, user: str) -> AccountReport:
        engine = self._engine
        info = engine.get_account_information(user)
        return AccountReport(
            user=user,
            total_dsc_minted=info.total_dsc_minted,
            collateral_value_in_usd=info.collateral_value_in_usd,
            health_factor=engine.get_health_factor(user),
            collateral={
                token: engine.get_collateral_balance_of_user(user, token)
                for token in engine.get_collateral_tokens()
            },
            dsc_balance=self._deployment.dsc.balance_of(user),
        )

    # ------------------------------------------------------------------
    # Step handlers
    # ------------------------------------------------------------------

    def _user(self, step: dict[str, Any], key: str = "user") -> str:
        user = step[key]
        if user not in self._users:
            self._users.append(user)
        return user

    def _approve_engine(self, symbol: str, owner: str, amount: int) -> None:
        if symbol != self._deployment.dsc.symbol and symbol not in self._deployment.tokens:
            return  # the engine rejects unknown assets itself
        token = self._deployment.token(symbol)
        token.approve(owner, self._engine.address, token.allowance(owner, self._engine.address) + amount)

    def _collateral(self, symbol: str, registry: dict[str, Any]) -> Any:
        try:
            return registry[symbol]
        except KeyError:
            raise KeyError(f"unknown collateral '{symbol}'") from None

    def _fund(self, step: dict[str, Any]) -> None:
        token = self._collateral(step["token"], self._deployment.tokens)
        token.mint(self._user(step), parse_amount(step["amount"]))

    def _approve(self, step: dict[str, Any]) -> None:
        token = self._deployment.token(step["token"])
        token.approve(self._user(step), step.get("spender", self._engine.address), parse_amount(step["amount"]))

    def _transfer(self, step: dict[str, Any]) -> None:
        token = self._deployment.token(step["token"])
        amount = parse_amount(step["amount"])
        sender, to = self._user(step, "from"), self._user(step, "to")
        if not token.transfer(sender, to, amount):
            raise TokenError(f"transfer of {amount} {token.symbol} from {sender} to {to} failed")

    def _set_price(self, step: dict[str, Any]) -> None:
        self._collateral(step["token"], self._deployment.feeds).update_answer(parse_amount(step["answer"]))

    def _deposit(self, step: dict[str, Any]) -> None:
        user, amount = self._user(step), parse_amount(step["amount"])
        self._approve_engine(step["token"], user, amount)
        self._engine.deposit_collateral(user, step["token"], amount)

    def _mint(self, step: dict[str, Any]) -> None:
        self._engine.mint_dsc(self._user(step), parse_amount(step["amount"]))

    def _deposit_and_mint(self, step: dict[str, Any]) -> None:
        user = self._user(step)
        collateral_amount = parse_amount(step["collateral_amount"])
        self._approve_engine(step["token"], user, collateral_amount)
        self._engine.deposit_collateral_and_mint_dsc(
            user, step["token"], collateral_amount, parse_amount(step["mint_amount"])
        )

    def _redeem(self, step: dict[str, Any]) -> None:
        self._engine.redeem_collateral(self._user(step), step["token"], parse_amount(step["amount"]))

    def _burn(self, step: dict[str, Any]) -> None:
        user, amount = self._user(step), parse_amount(step["amount"])
        self._approve_engine(self._deployment.dsc.symbol, user, amount)
        self._engine.burn_dsc(user, amount)

    def _redeem_for_dsc(self, step: dict[str, Any]) -> None:
        user = self._user(step)
        burn_amount = parse_amount(step["burn_amount"])
        self._approve_engine(self._deployment.dsc.symbol, user, burn_amount)
        self._engine.redeem_collateral_for_dsc(
            user, step["token"], parse_amount(step["collateral_amount"]), burn_amount
        )

    def _liquidate(self, step: dict[str, Any]) -> None:
        liquidator = self._user(step, "liquidator")
        debt_to_cover = parse_amount(step["debt_to_cover"])
        self._approve_engine(self._deployment.dsc.symbol, liquidator, debt_to_cover)
        self._engine.liquidate(liquidator, step["token"], self._user(step), debt_to_cover)
