"""Tests for the batch recompute replay."""

import random
import threading
from datetime import datetime, timedelta, timezone

import pytest

from hero_rank import (
    ComparisonEvent,
    EloConfig,
    MemoryRatingStore,
    RatingAccessor,
    RatingRecord,
    RecomputeRefusedError,
    recompute,
    sort_events,
)
from hero_rank.recompute import PROGRESS_EVERY


# ============================================================================
# Test Fixtures
# ============================================================================


def vote(winner_id, loser_id, timestamp=None, sequence=None) -> ComparisonEvent:
    return ComparisonEvent(
        winner_id=winner_id, loser_id=loser_id, timestamp=timestamp, sequence=sequence
    )


def random_history(count: int, seed: int = 3, heroes: int = 10) -> list[ComparisonEvent]:
    """Votes with strictly increasing timestamps."""
    rng = random.Random(seed)
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    events = []
    for i in range(count):
        winner, loser = rng.sample(range(1, heroes + 1), 2)
        events.append(vote(winner, loser, start + timedelta(seconds=i), sequence=i + 1))
    return events


def dump(ratings: dict[int, RatingRecord]) -> dict[int, dict]:
    return {hero_id: record.model_dump() for hero_id, record in ratings.items()}


# ============================================================================
# Ordering
# ============================================================================


class TestSortEvents:
    """Tests for sort_events()."""

    def test_orders_by_timestamp(self):
        events = [vote(1, 2, 30.0), vote(3, 4, 10.0), vote(5, 6, 20.0)]
        assert [e.winner_id for e in sort_events(events)] == [3, 5, 1]

    def test_ties_keep_input_order(self):
        events = [vote(1, 2, 5.0, 1), vote(3, 4, 5.0, 2), vote(5, 6, 1.0, 3), vote(7, 8, 5.0, 4)]
        assert [e.sequence for e in sort_events(events)] == [3, 1, 2, 4]

    def test_missing_timestamps_first(self):
        events = [vote(1, 2, 5.0), vote(3, 4), vote(5, 6, 1.0)]
        assert [e.winner_id for e in sort_events(events)] == [3, 5, 1]

    def test_accepts_mappings(self):
        events = [
            {"winner_id": 1, "loser_id": 2, "timestamp": 2.0},
            {"winner_id": 3, "loser_id": 4, "timestamp": 1.0},
        ]
        ordered = sort_events(events)
        assert all(isinstance(e, ComparisonEvent) for e in ordered)
        assert [e.winner_id for e in ordered] == [3, 1]


# ============================================================================
# Replay
# ============================================================================


class TestRecompute:
    """Tests for recompute()."""

    def test_empty_history(self):
        result = recompute([])
        assert result.ratings == {}
        assert result.total_events == 0
        assert result.applied_events == 0
        assert result.unique_heroes == 0
        assert result.top_heroes == []
        assert result.cancelled is False

    def test_single_vote(self):
        result = recompute([vote(1, 2, 1.0)])
        assert result.ratings[1].rating == 1524
        assert result.ratings[2].rating == 1476
        assert result.unique_heroes == 2
        assert [e.hero_id for e in result.top_heroes] == [1, 2]

    def test_idempotent(self):
        history = random_history(300)
        first = recompute(history)
        second = recompute(history)
        assert dump(first.ratings) == dump(second.ratings)

    def test_input_order_does_not_matter(self):
        history = random_history(200)
        shuffled = list(history)
        random.Random(9).shuffle(shuffled)
        assert dump(recompute(shuffled).ratings) == dump(recompute(history).ratings)

    def test_order_changes_ratings(self):
        """Elo updates do not commute, so replay order matters."""
        forward = recompute([vote(1, 2, 1.0), vote(2, 3, 2.0), vote(3, 1, 3.0)])
        backward = recompute([vote(1, 2, 3.0), vote(2, 3, 2.0), vote(3, 1, 1.0)])
        assert dump(forward.ratings) != dump(backward.ratings)

    def test_invalid_events_skipped(self):
        history = [
            vote(1, 2, 1.0),
            vote(4, 4, 2.0),
            vote("7", 2, 3.0),
            vote(1, None, 4.0),
            vote(2, 1, 5.0),
        ]
        result = recompute(history)
        assert result.total_events == 5
        assert result.applied_events == 2
        assert result.skipped_events == 3
        assert set(result.ratings) == {1, 2}

    def test_counters_match_history(self):
        history = random_history(250)
        result = recompute(history)
        for hero_id, record in result.ratings.items():
            assert record.games == record.wins + record.losses
            assert record.wins == sum(1 for e in history if e.winner_id == hero_id)
        assert sum(r.wins for r in result.ratings.values()) == 250

    def test_custom_config(self):
        config = EloConfig(provisional_threshold=0, initial_rating=1000)
        result = recompute([vote(1, 2, 1.0)], config)
        assert result.ratings[1].rating == 1016
        assert result.ratings[2].rating == 984

    def test_top_heroes_limited(self):
        history = [vote(1, loser, float(loser)) for loser in range(2, 20)]
        result = recompute(history)
        assert len(result.top_heroes) == 10
        assert result.top_heroes[0].hero_id == 1
        assert result.unique_heroes == 19

    def test_cancellation(self):
        cancel = threading.Event()
        cancel.set()
        result = recompute(random_history(50), cancel_event=cancel)
        assert result.cancelled is True
        assert result.applied_events == 0

    def test_progress_reports(self):
        updates = []
        recompute(random_history(PROGRESS_EVERY * 2 + 10), progress=updates.append)
        assert [u.percent for u in updates][-1] == 100.0
        assert len(updates) == 3
        assert all(u.stage == "replay" for u in updates)

    def test_cancel_from_progress_callback(self):
        cancel = threading.Event()

        def stop(progress):
            cancel.set()

        result = recompute(
            random_history(PROGRESS_EVERY * 3), cancel_event=cancel, progress=stop
        )
        assert result.cancelled is True
        assert result.applied_events == PROGRESS_EVERY


# ============================================================================
# Store Recompute
# ============================================================================


class TestRecomputeStore:
    """Tests for RatingAccessor.recompute_store()."""

    def test_empty_store_needs_no_force(self):
        store = MemoryRatingStore(events=random_history(40))
        result = RatingAccessor(store).recompute_store()
        assert result.dry_run is False
        assert store.count() == result.unique_heroes

    def test_refuses_populated_store(self):
        store = MemoryRatingStore(records=[RatingRecord.default(1)], events=random_history(5))
        accessor = RatingAccessor(store)
        with pytest.raises(RecomputeRefusedError, match="force=True"):
            accessor.recompute_store()
        assert [r.hero_id for r in store.all_records()] == [1]
        assert not accessor.recompute_in_progress

    def test_dry_run_writes_nothing(self):
        store = MemoryRatingStore(records=[RatingRecord.default(1)], events=random_history(30))
        result = RatingAccessor(store).recompute_store(dry_run=True)
        assert result.dry_run is True
        assert result.applied_events == 30
        assert [r.hero_id for r in store.all_records()] == [1]
        assert store.get(1).games == 0

    def test_force_replaces_records(self):
        store = MemoryRatingStore(
            records=[RatingRecord(hero_id=99, games=5, wins=5)],
            events=[vote(1, 2, 1.0)],
        )
        RatingAccessor(store).recompute_store(force=True)
        assert [r.hero_id for r in store.all_records()] == [1, 2]

    def test_cancel_writes_nothing(self):
        store = MemoryRatingStore(events=random_history(30))
        cancel = threading.Event()
        cancel.set()
        result = RatingAccessor(store).recompute_store(cancel_event=cancel)
        assert result.cancelled is True
        assert store.is_empty()

    def test_names_carried_forward(self):
        store = MemoryRatingStore(
            records=[RatingRecord(hero_id=1, hero_name="Spider-Man", games=1, wins=1)],
            events=[vote(1, 2, 1.0)],
        )
        result = RatingAccessor(store).recompute_store(force=True)
        assert store.get(1).hero_name == "Spider-Man"
        assert store.get(2).hero_name is None
        assert result.top_heroes[0].hero_id == 1

    def test_idempotent_against_store(self):
        store = MemoryRatingStore(events=random_history(120))
        accessor = RatingAccessor(store)
        accessor.recompute_store()
        first = [r.model_dump(exclude={"created_at", "last_updated"}) for r in store.all_records()]
        accessor.recompute_store(force=True)
        second = [r.model_dump(exclude={"created_at", "last_updated"}) for r in store.all_records()]
        assert first == second
