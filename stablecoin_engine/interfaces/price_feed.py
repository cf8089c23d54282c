"""Price feed protocol: per-asset USD quote source."""
from typing import Protocol

from ..models import RoundData


class PriceFeed(Protocol):
    """Abstract interface for reading an asset's latest USD price."""

    @property
    def decimals(self) -> int: ...

    def latest_round_data(self) -> RoundData: ...
