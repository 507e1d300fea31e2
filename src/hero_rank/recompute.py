"""Batch recompute: rebuild every rating from the vote history.

Elo updates do not commute, so votes are replayed in timestamp order through
the same apply step the live path uses. Given the same ordered votes, the
replay and the live path produce identical records.

The replay is a pure function over its inputs: its accumulator is local to
each call, and writing the result back is the accessor's job.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from typing import Any

from .config import EloConfig, ProgressCallback
from .models import ComparisonEvent, Progress, RecomputeResult
from .rating.leaderboard import build_leaderboard
from .rating.tracker import RatingTracker

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 500
TOP_HEROES = 10


def _coerce(event: ComparisonEvent | Mapping[str, Any]) -> ComparisonEvent:
    if isinstance(event, ComparisonEvent):
        return event
    return ComparisonEvent.model_validate(event)


def sort_events(
    events: Iterable[ComparisonEvent | Mapping[str, Any]],
) -> list[ComparisonEvent]:
    """Order votes by timestamp, oldest first.

    The sort is stable: votes with equal timestamps keep the order they were
    given in, which for store reads is ascending sequence number. Votes with
    no timestamp sort before all others.
    """
    return sorted((_coerce(event) for event in events), key=ComparisonEvent.sort_key)


def recompute(
    events: Iterable[ComparisonEvent | Mapping[str, Any]],
    config: EloConfig | None = None,
    cancel_event: threading.Event | None = None,
    progress: ProgressCallback | None = None,
) -> RecomputeResult:
    """Replay the vote history from scratch.

    Args:
        events: Votes as ComparisonEvents or mappings with winner_id,
            loser_id and timestamp keys. Sorted here; callers need not.
        config: Engine configuration (defaults to EloConfig()).
        cancel_event: Checked between votes; once set, the replay stops and
            the result is marked cancelled.
        progress: Optional callback receiving Progress updates.

    Returns:
        RecomputeResult with the rebuilt records and run statistics. Invalid
        votes (self-comparisons, non-integer IDs) are skipped and counted.
    """
    config = config or EloConfig()
    start = time.perf_counter()

    ordered = sort_events(events)
    total = len(ordered)
    tracker = RatingTracker(config)
    applied = 0
    skipped = 0
    cancelled = False

    logger.info(f"Replaying {total} vote(s)")
    for index, event in enumerate(ordered, start=1):
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"Recompute cancelled after {index - 1} of {total} vote(s)")
            cancelled = True
            break

        if not event.is_valid:
            logger.warning(
                f"Skipping invalid vote {event.winner_id!r} vs {event.loser_id!r}"
                f" (sequence={event.sequence})"
            )
            skipped += 1
            continue

        tracker.record_match(event.winner_id, event.loser_id)
        applied += 1

        if progress and index % PROGRESS_EVERY == 0:
            progress(
                Progress(
                    stage="replay",
                    percent=index / total * 100,
                    message=f"Replayed {index}/{total} votes",
                )
            )

    if progress and not cancelled:
        progress(Progress(stage="replay", percent=100.0, message=f"Replayed {total} votes"))

    ratings = tracker.records
    time_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"Replay finished: {applied} applied, {skipped} skipped, "
        f"{len(ratings)} hero(es) in {time_ms:.0f}ms"
    )

    return RecomputeResult(
        ratings=ratings,
        total_events=total,
        applied_events=applied,
        skipped_events=skipped,
        unique_heroes=len(ratings),
        top_heroes=build_leaderboard(ratings.values(), config, limit=TOP_HEROES),
        time_ms=time_ms,
        cancelled=cancelled,
    )
