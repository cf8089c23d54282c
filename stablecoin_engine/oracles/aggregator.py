"""Settable aggregator-style price feed."""
from __future__ import annotations

import logging
import time
from typing import Callable

from ..models import RoundData

logger = logging.getLogger(__name__)


class AggregatorFeed:
    """USD price feed holding one answer per round.

    A ``heartbeat`` of 0 disables staleness; otherwise a round older than
    ``heartbeat`` seconds is reported as stale.
    """

    def __init__(
        self,
        decimals: int,
        initial_answer: int,
        description: str = "",
        heartbeat: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._decimals = decimals
        self.description = description
        self.heartbeat = heartbeat
        self._clock = clock
        self._round_id = 0
        self._answer = 0
        self._updated_at = 0
        self.update_answer(initial_answer)

    @property
    def decimals(self) -> int:
        return self._decimals

    @property
    def latest_answer(self) -> int:
        return self._answer

    def update_answer(self, answer: int) -> None:
        self._round_id += 1
        self._answer = answer
        self._updated_at = int(self._clock())
        logger.debug(
            "Feed %s round %d: %d (%d decimals)",
            self.description or "?", self._round_id, answer, self._decimals,
        )

    def latest_round_data(self) -> RoundData:
        stale = bool(self.heartbeat) and (
            int(self._clock()) - self._updated_at > self.heartbeat
        )
        return RoundData(
            answer=self._answer,
            decimals=self._decimals,
            updated_at=self._updated_at,
            round_id=self._round_id,
            is_stale=stale,
        )
