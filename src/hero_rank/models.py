"""Core data models for Hero Rank.

This module defines the primary data structures used throughout the package:
- RatingRecord: A hero's current rating and win/loss counters
- ComparisonEvent: One vote between two heroes
- Result types: rating changes, recompute summaries, consistency reports
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ConfidenceLevel(str, Enum):
    """How much a hero's rating can be trusted, based on games played."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def description(self) -> str:
        """Human-readable explanation of the level."""
        if self is ConfidenceLevel.HIGH:
            return "High confidence - rating is stable"
        elif self is ConfidenceLevel.MEDIUM:
            return "Medium confidence - rating stabilizing"
        else:
            return "Low confidence - needs more games"


class RatingRecord(BaseModel):
    """The rating state of a single hero.

    Created lazily with default values the first time a hero appears in a
    comparison, then mutated once per comparison it takes part in.

    Attributes:
        hero_id: Stable identifier of the hero.
        hero_name: Optional display name, carried through untouched.
        rating: Current Elo rating.
        games: Comparisons played. Always wins + losses.
        wins: Comparisons won.
        losses: Comparisons lost.
        peak_rating: Highest rating ever held.
        lowest_rating: Lowest rating ever held.
        current_streak: Positive for consecutive wins, negative for losses.
        win_rate: Percentage (0-100), derived from wins and games.
        is_provisional: Derived, True while games < provisional flag threshold.
        created_at: When the record was first stored.
        last_updated: When the record was last stored.
    """

    hero_id: int
    hero_name: str | None = None
    rating: float = 1500.0
    games: int = Field(default=0, ge=0)
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    peak_rating: float = 1500.0
    lowest_rating: float = 1500.0
    current_streak: int = 0
    win_rate: float = 0.0
    is_provisional: bool = True
    created_at: datetime | None = None
    last_updated: datetime | None = None

    @classmethod
    def default(cls, hero_id: int, initial_rating: float = 1500.0) -> RatingRecord:
        """Create the record a hero gets the first time it is seen."""
        return cls(
            hero_id=hero_id,
            rating=initial_rating,
            peak_rating=initial_rating,
            lowest_rating=initial_rating,
        )

    @property
    def is_consistent(self) -> bool:
        """Whether games == wins + losses."""
        return self.games == self.wins + self.losses

    def record_win(self, new_rating: float, provisional_flag_threshold: int = 20) -> None:
        """Apply a won comparison to this record."""
        self.games += 1
        self.wins += 1
        self._set_rating(new_rating)
        self.current_streak = self.current_streak + 1 if self.current_streak >= 0 else 1
        self.refresh_derived(provisional_flag_threshold)

    def record_loss(self, new_rating: float, provisional_flag_threshold: int = 20) -> None:
        """Apply a lost comparison to this record."""
        self.games += 1
        self.losses += 1
        self._set_rating(new_rating)
        self.current_streak = self.current_streak - 1 if self.current_streak <= 0 else -1
        self.refresh_derived(provisional_flag_threshold)

    def refresh_derived(self, provisional_flag_threshold: int = 20) -> None:
        """Recompute win_rate and is_provisional from the counters."""
        self.win_rate = round(self.wins / self.games * 100, 2) if self.games > 0 else 0.0
        self.is_provisional = self.games < provisional_flag_threshold

    def _set_rating(self, new_rating: float) -> None:
        self.rating = new_rating
        self.peak_rating = max(self.peak_rating, new_rating)
        self.lowest_rating = min(self.lowest_rating, new_rating)

    def to_row(self) -> dict[str, Any]:
        """Map the record onto the persisted hero_ratings columns."""
        return {
            "hero_id": self.hero_id,
            "hero_name": self.hero_name,
            "rating": self.rating,
            "games": self.games,
            "wins": self.wins,
            "losses": self.losses,
            "peak_rating": self.peak_rating,
            "lowest_rating": self.lowest_rating,
            "win_rate": self.win_rate,
            "current_streak": self.current_streak,
            "is_provisional": self.is_provisional,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> RatingRecord:
        """Build a record from a persisted hero_ratings row."""
        return cls(
            hero_id=row["hero_id"],
            hero_name=row["hero_name"],
            rating=row["rating"],
            games=row["games"],
            wins=row["wins"],
            losses=row["losses"],
            peak_rating=row["peak_rating"],
            lowest_rating=row["lowest_rating"],
            win_rate=row["win_rate"],
            current_streak=row["current_streak"],
            is_provisional=bool(row["is_provisional"]),
            created_at=row["created_at"],
            last_updated=row["last_updated"],
        )


def _ordering_value(timestamp: datetime | float | None) -> float:
    if timestamp is None:
        return 0.0
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.timestamp()
    return float(timestamp)


class ComparisonEvent(BaseModel):
    """One vote: the winner was preferred over the loser.

    IDs are kept exactly as received so that malformed history entries can be
    counted during a replay instead of failing validation up front.

    Attributes:
        winner_id: Hero that won the comparison.
        loser_id: Hero that lost the comparison.
        timestamp: Wall-clock time or logical clock of the vote.
        sequence: Monotonic number assigned by the store on append.
    """

    winner_id: Any
    loser_id: Any
    timestamp: datetime | float | None = None
    sequence: int | None = None

    @property
    def is_valid(self) -> bool:
        """Whether both IDs are integers and differ."""
        for hero_id in (self.winner_id, self.loser_id):
            if isinstance(hero_id, bool) or not isinstance(hero_id, int):
                return False
        return self.winner_id != self.loser_id

    def sort_key(self) -> float:
        """Ordering key for replay. Events without a timestamp sort first."""
        return _ordering_value(self.timestamp)


class EloResult(BaseModel):
    """Output of the rating calculator for one comparison."""

    new_winner_rating: float
    new_loser_rating: float
    winner_change: int
    loser_change: int


class RatingChange(BaseModel):
    """What a caller gets back after a live comparison is applied.

    Attributes:
        winner_id: Hero that won.
        loser_id: Hero that lost.
        winner_change: Rating points gained by the winner (>= 0).
        loser_change: Rating points lost by the loser (<= 0).
        new_winner_rating: Winner's rating after the update.
        new_loser_rating: Loser's rating after the update.
        sequence: Position of the vote in the store's log, if assigned.
    """

    winner_id: int
    loser_id: int
    winner_change: int
    loser_change: int
    new_winner_rating: float
    new_loser_rating: float
    sequence: int | None = None


class WilsonInterval(BaseModel):
    """Wilson score confidence interval for a win probability."""

    lower: float = 0.0
    upper: float = 0.0


class LeaderboardEntry(BaseModel):
    """A hero with its ranking information.

    Attributes:
        rank: Position in the leaderboard (1-indexed).
        hero_id: Hero identifier.
        hero_name: Optional display name.
        rating: Elo rating.
        games: Comparisons played.
        wins: Comparisons won.
        losses: Comparisons lost.
        win_rate: Win percentage (0-100).
        wilson_score: Lower bound of the Wilson interval (0.0-1.0).
        confidence: Confidence label derived from games played.
        is_provisional: Whether the rating is still provisional.
    """

    rank: int
    hero_id: int
    hero_name: str | None = None
    rating: float = 1500.0
    games: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    wilson_score: float = 0.0
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    is_provisional: bool = True


class RecomputeResult(BaseModel):
    """The outcome of replaying the vote history.

    Attributes:
        ratings: Rebuilt rating records keyed by hero ID.
        total_events: Events read from the history.
        applied_events: Events applied to ratings.
        skipped_events: Invalid events skipped.
        unique_heroes: Heroes that appear in at least one applied event.
        top_heroes: Top 10 heroes by rating.
        time_ms: Wall time of the replay.
        dry_run: True when the result was not written to the store.
        cancelled: True when the replay stopped before the last event.
    """

    ratings: dict[int, RatingRecord] = Field(default_factory=dict)
    total_events: int = 0
    applied_events: int = 0
    skipped_events: int = 0
    unique_heroes: int = 0
    top_heroes: list[LeaderboardEntry] = Field(default_factory=list)
    time_ms: float = 0.0
    dry_run: bool = False
    cancelled: bool = False


class ConsistencyIssue(BaseModel):
    """A stored record whose counters disagree.

    Attributes:
        hero_id: Hero identifier.
        hero_name: Optional display name.
        games: Stored games count.
        wins: Stored wins.
        losses: Stored losses.
        win_rate: Stored win rate.
        expected_games: wins + losses.
        expected_win_rate: Win rate recomputed from expected_games.
    """

    hero_id: int
    hero_name: str | None = None
    games: int
    wins: int
    losses: int
    win_rate: float
    expected_games: int
    expected_win_rate: float


class RepairResult(BaseModel):
    """The outcome of a consistency repair pass.

    Attributes:
        strategy: "arithmetic" or "replay".
        issues: Inconsistencies found before repairing.
        repaired: Records rewritten.
        remaining: Inconsistencies still present after verification.
    """

    strategy: str
    issues: list[ConsistencyIssue] = Field(default_factory=list)
    repaired: int = 0
    remaining: int = 0


class Progress(BaseModel):
    """Progress information for long-running operations.

    Attributes:
        stage: Current stage name.
        percent: Completion percentage (0-100).
        message: Optional status message.
    """

    stage: str
    percent: float = 0.0
    message: str = ""
