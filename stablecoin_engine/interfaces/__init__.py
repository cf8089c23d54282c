"""Protocol interfaces for the engine's external collaborators."""
from .price_feed import PriceFeed
from .token import DebtTokenAuthority, FungibleToken

__all__ = ["DebtTokenAuthority", "FungibleToken", "PriceFeed"]
