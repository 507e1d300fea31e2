"""Base rating store interface.

This module defines the abstract base class every store backend inherits
from. A store persists one RatingRecord per hero plus an append-only log of
votes; the accessor drives it and owns all rating logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone

from ..models import ComparisonEvent, RatingRecord


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def stamp(record: RatingRecord, now: datetime) -> RatingRecord:
    """Copy a record, filling created_at once and refreshing last_updated."""
    stamped = record.model_copy()
    if stamped.created_at is None:
        stamped.created_at = now
    stamped.last_updated = now
    return stamped


class RatingStore(ABC):
    """Abstract base class for rating store backends.

    Implementations must make commit_comparison() and replace_all() atomic:
    either every write in the call becomes visible or none does. Any backend
    failure is raised as StorageError.

    Supported backends:
    - MemoryRatingStore: In-process dictionaries, for tests and embedding
    - SQLiteRatingStore: SQLite file with hero_ratings and votes tables
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend's name identifier."""
        ...

    @abstractmethod
    def get(self, hero_id: int) -> RatingRecord | None:
        """Return the stored record for a hero, or None if it has none."""
        ...

    def get_many(self, hero_ids: Iterable[int]) -> dict[int, RatingRecord]:
        """Return stored records for several heroes, skipping unknown IDs."""
        found: dict[int, RatingRecord] = {}
        for hero_id in hero_ids:
            record = self.get(hero_id)
            if record is not None:
                found[hero_id] = record
        return found

    @abstractmethod
    def all_records(self) -> list[RatingRecord]:
        """Return every stored record, ordered by hero ID."""
        ...

    @abstractmethod
    def commit_comparison(
        self,
        winner: RatingRecord,
        loser: RatingRecord,
        event: ComparisonEvent,
    ) -> ComparisonEvent:
        """Write both updated records and log the vote as one atomic unit.

        Returns:
            The logged event with its sequence number assigned.

        Raises:
            StorageError: If the write fails. Nothing is written in that case.
        """
        ...

    @abstractmethod
    def append_event(self, event: ComparisonEvent) -> ComparisonEvent:
        """Append a vote to the log without touching ratings."""
        ...

    @abstractmethod
    def events(self) -> list[ComparisonEvent]:
        """Return the vote log in storage order (ascending sequence)."""
        ...

    @abstractmethod
    def replace_all(self, records: Iterable[RatingRecord]) -> None:
        """Delete every record and write the given ones, atomically."""
        ...

    @abstractmethod
    def save_records(self, records: Iterable[RatingRecord]) -> None:
        """Upsert several records in one atomic write."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of stored rating records."""
        ...

    def is_empty(self) -> bool:
        """Whether the store holds no rating records."""
        return self.count() == 0

    def find_inconsistent(self) -> list[RatingRecord]:
        """Records whose games count differs from wins + losses."""
        return [record for record in self.all_records() if not record.is_consistent]

    def close(self) -> None:
        """Release any resources held by the store."""
        pass

    def __enter__(self) -> RatingStore:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - release resources."""
        self.close()
