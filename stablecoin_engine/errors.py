"""Engine error taxonomy: every failure is fatal to the enclosing operation."""
from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class ValidationError(EngineError):
    pass


class NeedsMoreThanZero(ValidationError):
    def __init__(self) -> None:
        super().__init__("Amount must be more than zero")


class UnsupportedAsset(ValidationError):
    def __init__(self, asset: str) -> None:
        self.asset = asset
        super().__init__(f"Token not supported: {asset}")


class LengthMismatch(ValidationError):
    def __init__(self, tokens: int, price_feeds: int) -> None:
        self.tokens = tokens
        self.price_feeds = price_feeds
        super().__init__(
            f"Token addresses and price feeds must have the same length "
            f"({tokens} != {price_feeds})"
        )


# ---------------------------------------------------------------------------
# State preconditions
# ---------------------------------------------------------------------------


class PreconditionError(EngineError):
    pass


class InsufficientCollateral(PreconditionError):
    def __init__(self, user: str, asset: str, held: int, requested: int) -> None:
        self.user = user
        self.asset = asset
        self.held = held
        self.requested = requested
        super().__init__(
            f"{user} holds {held} of {asset}, cannot remove {requested}"
        )


class InsufficientDebt(PreconditionError):
    def __init__(self, user: str, held: int, requested: int) -> None:
        self.user = user
        self.held = held
        self.requested = requested
        super().__init__(f"{user} owes {held}, cannot repay {requested}")


class PositionHealthy(PreconditionError):
    def __init__(self, user: str, health_factor: int) -> None:
        self.user = user
        self.health_factor = health_factor
        super().__init__(f"Health factor is good for {user}: {health_factor}")


# ---------------------------------------------------------------------------
# Invariant violations
# ---------------------------------------------------------------------------


class InvariantError(EngineError):
    pass


class HealthFactorBroken(InvariantError):
    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"Health factor broken: {health_factor}")


class LiquidationIneffective(InvariantError):
    def __init__(self, before: int, after: int) -> None:
        self.before = before
        self.after = after
        super().__init__(
            f"Liquidation did not improve health factor ({before} -> {after})"
        )


class InsufficientCollateralForBonus(InvariantError):
    def __init__(self, asset: str, held: int, required: int) -> None:
        self.asset = asset
        self.held = held
        self.required = required
        super().__init__(
            f"Position holds {held} of {asset}, liquidation needs {required}"
        )


# ---------------------------------------------------------------------------
# Collaborator failures
# ---------------------------------------------------------------------------


class CollaboratorError(EngineError):
    pass


class TransferFailed(CollaboratorError):
    def __init__(self, token: str, sender: str, recipient: str, amount: int) -> None:
        self.token = token
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
        super().__init__(
            f"Transfer of {amount} {token} from {sender} to {recipient} failed"
        )


class MintFailed(CollaboratorError):
    def __init__(self, to: str, amount: int) -> None:
        self.to = to
        self.amount = amount
        super().__init__(f"Minting {amount} to {to} failed")


class BurnFailed(CollaboratorError):
    def __init__(self, amount: int) -> None:
        self.amount = amount
        super().__init__(f"Burning {amount} failed")


class OracleDataInvalid(CollaboratorError):
    def __init__(self, asset: str, reason: str) -> None:
        self.asset = asset
        self.reason = reason
        super().__init__(f"Invalid price data for {asset}: {reason}")


class ReentrantCall(EngineError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Re-entrant call into {operation}")


# ---------------------------------------------------------------------------
# Token collaborator failures (raised by the in-memory tokens)
# ---------------------------------------------------------------------------


class TokenError(Exception):
    """Raised by token ledgers for calls that cannot be expressed as ``False``."""


class NotOwner(TokenError):
    def __init__(self, caller: str, owner: str) -> None:
        self.caller = caller
        self.owner = owner
        super().__init__(f"{caller} is not the token owner ({owner})")
