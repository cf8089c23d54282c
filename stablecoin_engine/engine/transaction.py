"""All-or-nothing operation scope with a non-reentrant execution lock.

Each public engine operation runs inside :meth:`TransactionManager.atomic`.
Ledger state and the event log are snapshotted on entry; collaborator calls
that already went through register a compensating action. If anything raises,
compensations run newest first, the snapshots are restored, and the original
exception propagates unchanged.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from ..errors import ReentrantCall
from .events import EventLog
from .ledger import CollateralLedger, DebtLedger

logger = logging.getLogger(__name__)


class Transaction:
    """Undo journal for a single operation."""

    def __init__(self, operation: str, collateral: CollateralLedger, debt: DebtLedger, events: EventLog) -> None:
        self.operation = operation
        self._collateral = collateral
        self._debt = debt
        self._events = events
        self._collateral_snapshot = collateral.snapshot()
        self._debt_snapshot = debt.snapshot()
        self._event_count = len(events)
        self._compensations: list[tuple[str, Callable[[], object]]] = []

    def on_rollback(self, description: str, action: Callable[[], object]) -> None:
        self._compensations.append((description, action))

    def rollback(self) -> None:
        for description, action in reversed(self._compensations):
            try:
                action()
            except Exception as e:
                logger.error(
                    "%s: compensation '%s' failed: %s", self.operation, description, e
                )
        self._compensations.clear()
        self._collateral.restore(self._collateral_snapshot)
        self._debt.restore(self._debt_snapshot)
        self._events.truncate(self._event_count)


class TransactionManager:
    def __init__(self, collateral: CollateralLedger, debt: DebtLedger, events: EventLog) -> None:
        self._collateral = collateral
        self._debt = debt
        self._events = events
        self._active: str | None = None

    @property
    def active(self) -> str | None:
        """Name of the operation currently holding the lock."""
        return self._active

    @contextmanager
    def atomic(self, operation: str) -> Iterator[Transaction]:
        if self._active is not None:
            logger.warning(
                "Rejected re-entrant %s while %s is in progress", operation, self._active
            )
            raise ReentrantCall(operation)

        self._active = operation
        tx = Transaction(operation, self._collateral, self._debt, self._events)
        try:
            yield tx
        except Exception as e:
            logger.warning("%s reverted: %s", operation, e)
            tx.rollback()
            raise
        finally:
            self._active = None
