"""Price oracle modules."""
from .aggregator import AggregatorFeed
from .pyth import PythOracle

__all__ = ["AggregatorFeed", "PythOracle"]
