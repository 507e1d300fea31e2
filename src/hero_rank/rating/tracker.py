"""In-memory rating accumulator.

RatingTracker holds a set of RatingRecords and applies comparisons to them
using the ELO calculator. The batch replay builds one per run, and the
accessor uses the same apply step for live votes so both paths produce
identical records for the same ordered votes.
"""

from __future__ import annotations

from ..config import EloConfig
from ..models import EloResult, RatingRecord
from .elo import ELO


def apply_result(
    winner: RatingRecord,
    loser: RatingRecord,
    config: EloConfig,
) -> EloResult:
    """Compute a comparison's outcome and apply it to both records in place."""
    result = ELO.compute_new_ratings(
        winner.rating,
        loser.rating,
        winner.games,
        loser.games,
        config,
    )
    winner.record_win(result.new_winner_rating, config.provisional_flag_threshold)
    loser.record_loss(result.new_loser_rating, config.provisional_flag_threshold)
    return result


class RatingTracker:
    """Tracks rating records for many heroes over a series of comparisons.

    Heroes are added lazily with default values the first time they appear.

    Example:
        ```python
        tracker = RatingTracker()
        tracker.record_match(1, 2)  # hero 1 beats hero 2
        tracker.record_match(2, 3)
        tracker.get_rankings()[0].hero_id  # 1
        ```
    """

    def __init__(
        self,
        config: EloConfig | None = None,
        records: dict[int, RatingRecord] | None = None,
    ):
        """Initialize the tracker.

        Args:
            config: Engine configuration (defaults to EloConfig()).
            records: Optional starting records; copied, never mutated.
        """
        self.config = config or EloConfig()
        self.records: dict[int, RatingRecord] = {
            hero_id: record.model_copy() for hero_id, record in (records or {}).items()
        }

    def get_or_create(self, hero_id: int) -> RatingRecord:
        """Return the hero's record, creating a default one if unseen."""
        record = self.records.get(hero_id)
        if record is None:
            record = RatingRecord.default(hero_id, self.config.initial_rating)
            self.records[hero_id] = record
        return record

    def record_match(self, winner_id: int, loser_id: int) -> EloResult:
        """Record a comparison result and update both heroes.

        Args:
            winner_id: Hero that won.
            loser_id: Hero that lost. Must differ from winner_id.

        Returns:
            EloResult for the comparison.

        Raises:
            ValueError: If winner_id == loser_id.
        """
        if winner_id == loser_id:
            raise ValueError(f"Hero {winner_id} cannot be compared with itself")

        return apply_result(
            self.get_or_create(winner_id),
            self.get_or_create(loser_id),
            self.config,
        )

    def get_rating(self, hero_id: int) -> float:
        """Current rating, or the initial rating for an unseen hero."""
        record = self.records.get(hero_id)
        return record.rating if record else self.config.initial_rating

    def get_rankings(self) -> list[RatingRecord]:
        """All records sorted by rating descending (ties by hero ID)."""
        return sorted(self.records.values(), key=lambda r: (-r.rating, r.hero_id))
