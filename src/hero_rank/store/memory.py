"""In-process rating store.

Keeps records and the vote log in dictionaries guarded by a lock. Records
are copied on the way in and out, so nothing a caller holds can change
stored state behind the store's back.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from ..models import ComparisonEvent, RatingRecord
from .base import RatingStore, stamp, utcnow


class MemoryRatingStore(RatingStore):
    """Rating store backed by plain dictionaries.

    Example:
        ```python
        store = MemoryRatingStore()
        accessor = RatingAccessor(store)
        accessor.apply_comparison(1, 2)
        store.get(1).wins  # 1
        ```
    """

    def __init__(
        self,
        records: Iterable[RatingRecord] | None = None,
        events: Iterable[ComparisonEvent] | None = None,
    ):
        """Initialize the store, optionally seeded with records and votes."""
        self._lock = threading.RLock()
        self._records: dict[int, RatingRecord] = {}
        self._events: list[ComparisonEvent] = []
        self._next_sequence = 1

        for record in records or []:
            self._records[record.hero_id] = record.model_copy()
        for event in events or []:
            self.append_event(event)

    @property
    def name(self) -> str:
        return "memory"

    def get(self, hero_id: int) -> RatingRecord | None:
        with self._lock:
            record = self._records.get(hero_id)
            return record.model_copy() if record else None

    def all_records(self) -> list[RatingRecord]:
        with self._lock:
            return [self._records[h].model_copy() for h in sorted(self._records)]

    def commit_comparison(
        self,
        winner: RatingRecord,
        loser: RatingRecord,
        event: ComparisonEvent,
    ) -> ComparisonEvent:
        now = utcnow()
        new_winner = stamp(winner, now)
        new_loser = stamp(loser, now)
        with self._lock:
            logged = self._log(event)
            self._records[new_winner.hero_id] = new_winner
            self._records[new_loser.hero_id] = new_loser
            return logged

    def append_event(self, event: ComparisonEvent) -> ComparisonEvent:
        with self._lock:
            return self._log(event)

    def _log(self, event: ComparisonEvent) -> ComparisonEvent:
        logged = event.model_copy(update={"sequence": self._next_sequence})
        self._events.append(logged)
        self._next_sequence += 1
        return logged.model_copy()

    def events(self) -> list[ComparisonEvent]:
        with self._lock:
            return [event.model_copy() for event in self._events]

    def replace_all(self, records: Iterable[RatingRecord]) -> None:
        now = utcnow()
        fresh = {record.hero_id: stamp(record, now) for record in records}
        with self._lock:
            self._records = fresh

    def save_records(self, records: Iterable[RatingRecord]) -> None:
        now = utcnow()
        updated = [stamp(record, now) for record in records]
        with self._lock:
            for record in updated:
                self._records[record.hero_id] = record

    def count(self) -> int:
        with self._lock:
            return len(self._records)
