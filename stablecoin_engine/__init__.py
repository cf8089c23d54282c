"""Over-collateralized stablecoin issuance engine."""
from .engine import DSCEngine

__version__ = "0.1.0"

__all__ = ["DSCEngine", "__version__"]
