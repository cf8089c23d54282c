"""Append-only event log for off-chain indexing."""
from __future__ import annotations

from typing import Iterator, Union

from ..models import CollateralDeposited, CollateralRedeemed, PositionLiquidated

Event = Union[CollateralDeposited, CollateralRedeemed, PositionLiquidated]


class EventLog:
    def __init__(self) -> None:
        self._events: list[Event] = []

    def emit(self, event: Event) -> None:
        self._events.append(event)

    def of_type(self, event_type: type) -> list[Event]:
        return [e for e in self._events if isinstance(e, event_type)]

    def truncate(self, length: int) -> None:
        """Drop events emitted after ``length``; used only to roll back."""
        del self._events[length:]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __getitem__(self, index: int) -> Event:
        return self._events[index]
