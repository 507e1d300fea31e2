"""Rating store accessor for Hero Rank.

This module provides RatingAccessor, the single entry point that turns votes
into stored ratings. It owns the read-modify-write cycle around each vote,
full recomputes from the vote log, consistency scans and repairs.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path

from .config import EloConfig, HeroRankConfig, ProgressCallback
from .exceptions import (
    InconsistentStateError,
    InvalidComparisonError,
    RecomputeInProgressError,
    RecomputeRefusedError,
)
from .models import (
    ComparisonEvent,
    ConsistencyIssue,
    LeaderboardEntry,
    RatingChange,
    RatingRecord,
    RecomputeResult,
    RepairResult,
)
from .rating.leaderboard import build_leaderboard
from .rating.tracker import apply_result
from .recompute import recompute
from .store import MemoryRatingStore, RatingStore, store_from_config
from .store.base import utcnow

logger = logging.getLogger(__name__)

REPAIR_STRATEGIES = ("arithmetic", "replay")


class RatingAccessor:
    """Applies votes to a rating store.

    All writes go through one lock, so two votes touching the same hero can
    never interleave their read-modify-write. Vote rates are human-scale, so a
    single serialization point costs nothing noticeable.

    Example:
        ```python
        from hero_rank import RatingAccessor

        accessor = RatingAccessor()
        change = accessor.apply_comparison(winner_id=70, loser_id=644)
        print(change.winner_change, change.loser_change)  # 24 -24

        for entry in accessor.leaderboard(limit=10):
            print(entry.rank, entry.hero_id, entry.rating)
        ```
    """

    def __init__(
        self,
        store: RatingStore | None = None,
        config: EloConfig | None = None,
    ):
        """Initialize the accessor.

        Args:
            store: Rating store backend. Defaults to a fresh MemoryRatingStore.
            config: Engine configuration. Uses defaults if not provided.
        """
        self.store = store if store is not None else MemoryRatingStore()
        self.config = config or EloConfig()
        self._write_lock = threading.RLock()
        self._recomputing = threading.Event()

    @classmethod
    def from_config(cls, config: HeroRankConfig | str | Path) -> RatingAccessor:
        """Create an accessor from a HeroRankConfig or a YAML file path.

        Example:
            ```python
            accessor = RatingAccessor.from_config("./hero_rank.yaml")
            ```
        """
        if not isinstance(config, HeroRankConfig):
            config = HeroRankConfig.from_yaml(config)
        return cls(store=store_from_config(config.store), config=config.elo)

    @property
    def recompute_in_progress(self) -> bool:
        """Whether a recompute currently holds the store."""
        return self._recomputing.is_set()

    def _new_record(self, hero_id: int) -> RatingRecord:
        return RatingRecord.default(hero_id, self.config.initial_rating)

    def get_record(self, hero_id: int) -> RatingRecord:
        """Stored record for a hero, or the default record if it has none.

        Raises:
            StorageError: If the store cannot be read.
        """
        return self.store.get(hero_id) or self._new_record(hero_id)

    def apply_comparison(
        self,
        winner_id: int,
        loser_id: int,
        timestamp: datetime | float | None = None,
    ) -> RatingChange:
        """Apply one vote to both heroes' stored ratings.

        Reads (or creates) both records, computes new ratings, updates every
        counter and derived field, then commits both records together with
        the vote log entry.

        Args:
            winner_id: Hero the voter preferred.
            loser_id: Hero the voter passed over.
            timestamp: When the vote was cast. Defaults to now, taken inside
                the write lock so log order matches apply order.

        Returns:
            RatingChange with both deltas and both new ratings.

        Raises:
            InvalidComparisonError: For a self-comparison or non-integer IDs.
                Nothing is read or written.
            RecomputeInProgressError: If a recompute is running.
            StorageError: If the store read or write fails. Not retried.
        """
        event = ComparisonEvent(winner_id=winner_id, loser_id=loser_id, timestamp=timestamp)
        if not event.is_valid:
            reason = (
                "a hero cannot be compared with itself"
                if winner_id == loser_id
                else "hero IDs must be integers"
            )
            raise InvalidComparisonError(winner_id, loser_id, reason)

        if self._recomputing.is_set():
            raise RecomputeInProgressError(winner_id, loser_id)

        with self._write_lock:
            if event.timestamp is None:
                event.timestamp = utcnow()

            winner = self.get_record(winner_id)
            loser = self.get_record(loser_id)
            result = apply_result(winner, loser, self.config)
            logged = self.store.commit_comparison(winner, loser, event)

        logger.debug(
            f"Vote {winner_id} > {loser_id}: "
            f"{result.winner_change:+d} -> {result.new_winner_rating:g}, "
            f"{result.loser_change:+d} -> {result.new_loser_rating:g}"
        )

        return RatingChange(
            winner_id=winner_id,
            loser_id=loser_id,
            winner_change=result.winner_change,
            loser_change=result.loser_change,
            new_winner_rating=result.new_winner_rating,
            new_loser_rating=result.new_loser_rating,
            sequence=logged.sequence,
        )

    def leaderboard(
        self,
        limit: int | None = None,
        sort_by: str = "rating",
    ) -> list[LeaderboardEntry]:
        """Ranked heroes with Wilson scores and confidence labels.

        Args:
            limit: Keep only the top N heroes.
            sort_by: "rating", "wilson" or "win_rate".
        """
        return build_leaderboard(self.store.all_records(), self.config, limit, sort_by)

    def recompute_store(
        self,
        dry_run: bool = False,
        force: bool = False,
        cancel_event: threading.Event | None = None,
        progress: ProgressCallback | None = None,
    ) -> RecomputeResult:
        """Rebuild every stored rating by replaying the vote log.

        Live votes are rejected with RecomputeInProgressError for the whole
        run. Running it twice over the same log yields the same records.

        Args:
            dry_run: Compute and return the result without writing it.
            force: Allow clearing a store that already holds ratings.
            cancel_event: Set it to stop between votes; nothing is written.
            progress: Optional callback receiving Progress updates.

        Returns:
            RecomputeResult describing the run.

        Raises:
            RecomputeRefusedError: If the store holds ratings and neither
                force nor dry_run is set.
            StorageError: If the store cannot be read or written.
        """
        with self._write_lock:
            self._recomputing.set()
            try:
                existing = self.store.all_records()
                if existing and not force and not dry_run:
                    raise RecomputeRefusedError(len(existing))

                logger.info(f"Recomputing ratings (dry_run={dry_run}, force={force})")
                result = recompute(self.store.events(), self.config, cancel_event, progress)

                names = {r.hero_id: r.hero_name for r in existing if r.hero_name}
                for hero_id, record in result.ratings.items():
                    record.hero_name = names.get(hero_id)

                if result.cancelled:
                    logger.warning("Recompute cancelled; rating store left unchanged")
                elif dry_run:
                    result.dry_run = True
                    logger.info(
                        f"DRY RUN: would have written {result.unique_heroes} hero rating(s) "
                        f"from {result.applied_events} vote(s)"
                    )
                else:
                    self.store.replace_all(result.ratings.values())
                    logger.info(
                        f"Wrote {result.unique_heroes} hero rating(s) "
                        f"from {result.applied_events} vote(s)"
                    )
                return result
            finally:
                self._recomputing.clear()

    def check_consistency(self) -> list[ConsistencyIssue]:
        """Scan the store for records with games != wins + losses."""
        issues = []
        for record in self.store.find_inconsistent():
            expected_games = record.wins + record.losses
            issues.append(
                ConsistencyIssue(
                    hero_id=record.hero_id,
                    hero_name=record.hero_name,
                    games=record.games,
                    wins=record.wins,
                    losses=record.losses,
                    win_rate=record.win_rate,
                    expected_games=expected_games,
                    expected_win_rate=(
                        round(record.wins / expected_games * 100, 2) if expected_games else 0.0
                    ),
                )
            )
        if issues:
            logger.warning(f"Found {len(issues)} hero(es) with inconsistent games count")
        return issues

    def assert_consistent(self) -> None:
        """Raise InconsistentStateError if any stored record is inconsistent."""
        issues = self.check_consistency()
        if issues:
            raise InconsistentStateError([issue.hero_id for issue in issues])

    def repair(self, strategy: str = "arithmetic") -> RepairResult:
        """Fix inconsistent records. Safe to run repeatedly.

        Strategies:
            - "arithmetic": set games = wins + losses, then recompute
              win_rate and is_provisional for every record whose stored
              values disagree with its counters.
            - "replay": rebuild the whole store from the vote log.

        Raises:
            ValueError: If strategy is not recognized.
            StorageError: If the store cannot be read or written.
        """
        if strategy not in REPAIR_STRATEGIES:
            raise ValueError(
                f"Unknown repair strategy '{strategy}'. Valid strategies: {list(REPAIR_STRATEGIES)}"
            )

        with self._write_lock:
            issues = self.check_consistency()

            if strategy == "replay":
                result = self.recompute_store(force=True)
                repaired = result.unique_heroes
            else:
                changed = []
                for record in self.store.all_records():
                    fixed = record.model_copy()
                    fixed.games = fixed.wins + fixed.losses
                    fixed.refresh_derived(self.config.provisional_flag_threshold)
                    if (fixed.games, fixed.win_rate, fixed.is_provisional) != (
                        record.games,
                        record.win_rate,
                        record.is_provisional,
                    ):
                        changed.append(fixed)
                self.store.save_records(changed)
                repaired = len(changed)

            remaining = len(self.store.find_inconsistent())

        if remaining:
            logger.warning(f"{remaining} hero(es) still inconsistent after {strategy} repair")
        else:
            logger.info(f"Repair ({strategy}) complete: {repaired} record(s) rewritten")

        return RepairResult(
            strategy=strategy,
            issues=issues,
            repaired=repaired,
            remaining=remaining,
        )

    def close(self) -> None:
        """Close the underlying store."""
        self.store.close()

    def __enter__(self) -> RatingAccessor:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close the store."""
        self.close()
