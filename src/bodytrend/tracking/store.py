"""Weigh-in store interface and an in-memory implementation.

The trend engine only needs two things from storage: every weigh-in in
ascending date order, and a way to record a weigh-in for a date (replacing
any existing one). Anything satisfying ObservationStore can feed the engine.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Protocol

from bodytrend.tracking.models import Observation

logger = logging.getLogger(__name__)


class ObservationStore(Protocol):
    """Date-keyed weigh-in storage."""

    def list_ordered(self) -> list[Observation]:
        """Return all weigh-ins sorted ascending by date."""
        ...

    def upsert(self, observation: Observation) -> None:
        """Store a weigh-in, replacing any existing entry for the same date."""
        ...

    def delete(self, on_date: date) -> bool:
        """Remove the weigh-in for a date. Returns True if one existed."""
        ...


class InMemoryObservationStore:
    """ObservationStore backed by a dict keyed by date."""

    def __init__(self, observations: Optional[Iterable[Observation]] = None):
        self._by_date: dict[date, Observation] = {}
        for obs in observations or ():
            self.upsert(obs)

    def __len__(self) -> int:
        return len(self._by_date)

    def list_ordered(self) -> list[Observation]:
        return [self._by_date[d] for d in sorted(self._by_date)]

    def upsert(self, observation: Observation) -> None:
        if observation.date in self._by_date:
            logger.debug("Replacing weigh-in for %s", observation.date)
        self._by_date[observation.date] = observation

    def delete(self, on_date: date) -> bool:
        return self._by_date.pop(on_date, None) is not None
