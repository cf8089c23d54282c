"""Collateral accounting, health-factor and liquidation engine."""
from .core import DSCEngine
from .health import HealthFactorEngine, calculate_health_factor
from .ledger import CollateralLedger, DebtLedger
from .positions import PositionManager
from .valuation import ValuationService

__all__ = [
    "CollateralLedger",
    "DSCEngine",
    "DebtLedger",
    "HealthFactorEngine",
    "PositionManager",
    "ValuationService",
    "calculate_health_factor",
]
