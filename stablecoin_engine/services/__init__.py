"""Service modules"""
from .deployment import Deployment, deploy, fetch_seed_prices
from .scenario import ScenarioResult, ScenarioRunner, load_scenario

__all__ = [
    "Deployment",
    "ScenarioResult",
    "ScenarioRunner",
    "deploy",
    "fetch_seed_prices",
    "load_scenario",
]
