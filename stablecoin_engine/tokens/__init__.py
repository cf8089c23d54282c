"""In-memory token ledgers."""
from .debt_token import DebtToken
from .erc20 import Token

__all__ = ["DebtToken", "Token"]
