"""SQLite rating store.

Persists ratings in a ``hero_ratings`` table and votes in an append-only
``votes`` table. Paired rating writes run inside ``BEGIN IMMEDIATE`` so both
hero rows and the vote row commit together, or none of them does.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from ..exceptions import StorageError
from ..models import ComparisonEvent, RatingRecord
from .base import RatingStore, stamp, utcnow

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS hero_ratings (
        hero_id INTEGER PRIMARY KEY,
        hero_name TEXT,
        rating REAL NOT NULL,
        games INTEGER NOT NULL,
        wins INTEGER NOT NULL,
        losses INTEGER NOT NULL,
        is_provisional BOOLEAN NOT NULL,
        peak_rating REAL NOT NULL,
        lowest_rating REAL NOT NULL,
        win_rate REAL NOT NULL,
        current_streak INTEGER NOT NULL,
        last_updated TEXT,
        created_at TEXT
    );

    CREATE TABLE IF NOT EXISTS votes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        voted_for INTEGER NOT NULL,
        voted_against INTEGER NOT NULL,
        created_at TIMESTAMP
    );

    CREATE INDEX IF NOT EXISTS idx_hero_ratings_rating ON hero_ratings(rating);
    CREATE INDEX IF NOT EXISTS idx_votes_created ON votes(created_at);
"""

UPSERT_RATING = """
    INSERT INTO hero_ratings (hero_id, hero_name, rating, games, wins, losses,
                              is_provisional, peak_rating, lowest_rating, win_rate,
                              current_streak, last_updated, created_at)
    VALUES (:hero_id, :hero_name, :rating, :games, :wins, :losses,
            :is_provisional, :peak_rating, :lowest_rating, :win_rate,
            :current_streak, :last_updated, :created_at)
    ON CONFLICT(hero_id) DO UPDATE SET
        hero_name = COALESCE(excluded.hero_name, hero_ratings.hero_name),
        rating = excluded.rating,
        games = excluded.games,
        wins = excluded.wins,
        losses = excluded.losses,
        is_provisional = excluded.is_provisional,
        peak_rating = excluded.peak_rating,
        lowest_rating = excluded.lowest_rating,
        win_rate = excluded.win_rate,
        current_streak = excluded.current_streak,
        last_updated = excluded.last_updated
"""

INSERT_VOTE = "INSERT INTO votes (voted_for, voted_against, created_at) VALUES (?, ?, ?)"


def _encode_timestamp(timestamp: datetime | float | None) -> str | float | None:
    if isinstance(timestamp, datetime):
        return timestamp.isoformat()
    return timestamp


def _decode_timestamp(value: Any) -> datetime | float | None:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


class SQLiteRatingStore(RatingStore):
    """Rating store backed by a SQLite database file.

    Example:
        ```python
        with SQLiteRatingStore("./ratings.db") as store:
            accessor = RatingAccessor(store)
            accessor.apply_comparison(1, 2)
        ```
    """

    def __init__(self, path: str | Path = ":memory:"):
        """Open (and create if needed) the database.

        Args:
            path: Database file path, or ":memory:" for a private database.

        Raises:
            StorageError: If the database cannot be opened or initialized.
        """
        self.path = str(path)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(
                self.path,
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            logger.error(f"Failed to open rating store at {self.path}: {e}")
            raise StorageError(str(e), operation="open") from e
        logger.debug(f"Opened SQLite rating store at {self.path}")

    @property
    def name(self) -> str:
        return "sqlite"

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Cursor]:
        """Run the block inside BEGIN IMMEDIATE ... COMMIT, rolling back on error."""
        with self._lock:
            try:
                cursor = self._conn.cursor()
                cursor.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                logger.error(f"Rating store '{operation}' could not start a transaction: {e}")
                raise StorageError(str(e), operation=operation) from e
            try:
                yield cursor
                cursor.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback()
                logger.error(f"Rating store '{operation}' failed: {e}")
                raise StorageError(str(e), operation=operation) from e
            except BaseException:
                self._rollback()
                raise

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.warning(f"Rollback failed: {e}")

    def _query(self, operation: str, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error(f"Rating store '{operation}' failed: {e}")
                raise StorageError(str(e), operation=operation) from e

    def get(self, hero_id: int) -> RatingRecord | None:
        rows = self._query("get", "SELECT * FROM hero_ratings WHERE hero_id = ?", (hero_id,))
        return RatingRecord.from_row(rows[0]) if rows else None

    def all_records(self) -> list[RatingRecord]:
        rows = self._query("all_records", "SELECT * FROM hero_ratings ORDER BY hero_id")
        return [RatingRecord.from_row(row) for row in rows]

    def commit_comparison(
        self,
        winner: RatingRecord,
        loser: RatingRecord,
        event: ComparisonEvent,
    ) -> ComparisonEvent:
        now = utcnow()
        with self._transaction("commit_comparison") as cursor:
            cursor.execute(
                INSERT_VOTE,
                (event.winner_id, event.loser_id, _encode_timestamp(event.timestamp)),
            )
            sequence = cursor.lastrowid
            cursor.execute(UPSERT_RATING, stamp(winner, now).to_row())
            cursor.execute(UPSERT_RATING, stamp(loser, now).to_row())
        return event.model_copy(update={"sequence": sequence})

    def append_event(self, event: ComparisonEvent) -> ComparisonEvent:
        with self._transaction("append_event") as cursor:
            cursor.execute(
                INSERT_VOTE,
                (event.winner_id, event.loser_id, _encode_timestamp(event.timestamp)),
            )
            sequence = cursor.lastrowid
        return event.model_copy(update={"sequence": sequence})

    def events(self) -> list[ComparisonEvent]:
        rows = self._query(
            "events",
            "SELECT id, voted_for, voted_against, created_at FROM votes ORDER BY id",
        )
        return [
            ComparisonEvent(
                winner_id=row["voted_for"],
                loser_id=row["voted_against"],
                timestamp=_decode_timestamp(row["created_at"]),
                sequence=row["id"],
            )
            for row in rows
        ]

    def replace_all(self, records: Iterable[RatingRecord]) -> None:
        now = utcnow()
        rows = [stamp(record, now).to_row() for record in records]
        with self._transaction("replace_all") as cursor:
            cursor.execute("DELETE FROM hero_ratings")
            cursor.executemany(UPSERT_RATING, rows)
        logger.info(f"Replaced rating store contents with {len(rows)} record(s)")

    def save_records(self, records: Iterable[RatingRecord]) -> None:
        now = utcnow()
        rows = [stamp(record, now).to_row() for record in records]
        if not rows:
            return
        with self._transaction("save_records") as cursor:
            cursor.executemany(UPSERT_RATING, rows)

    def count(self) -> int:
        rows = self._query("count", "SELECT COUNT(*) AS n FROM hero_ratings")
        return rows[0]["n"]

    def find_inconsistent(self) -> list[RatingRecord]:
        rows = self._query(
            "find_inconsistent",
            "SELECT * FROM hero_ratings WHERE games != (wins + losses) ORDER BY hero_id",
        )
        return [RatingRecord.from_row(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
