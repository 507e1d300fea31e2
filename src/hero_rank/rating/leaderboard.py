"""Leaderboard construction from rating records."""

from __future__ import annotations

from collections.abc import Iterable

from ..config import EloConfig
from ..models import LeaderboardEntry, RatingRecord
from .wilson import get_confidence_level, wilson_score

SORT_KEYS = ("rating", "wilson", "win_rate")


def build_leaderboard(
    records: Iterable[RatingRecord],
    config: EloConfig | None = None,
    limit: int | None = None,
    sort_by: str = "rating",
) -> list[LeaderboardEntry]:
    """Rank heroes and attach confidence information.

    Args:
        records: Rating records to rank.
        config: Engine configuration (confidence level and thresholds).
        limit: Keep only the top N entries.
        sort_by: "rating", "wilson" (Wilson lower bound) or "win_rate".
            Ties fall back to rating, then hero ID.

    Returns:
        Ranked entries, best first, ranks starting at 1.

    Raises:
        ValueError: If sort_by is not recognized.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{sort_by}'. Valid keys: {list(SORT_KEYS)}")
    config = config or EloConfig()

    scored = [
        (record, wilson_score(record.wins, record.wins + record.losses, config.confidence_level))
        for record in records
    ]

    def key(item: tuple[RatingRecord, float]) -> tuple:
        record, score = item
        primary = {
            "rating": record.rating,
            "wilson": score,
            "win_rate": record.win_rate,
        }[sort_by]
        return (-primary, -record.rating, record.hero_id)

    scored.sort(key=key)
    if limit is not None:
        scored = scored[:limit]

    leaderboard: list[LeaderboardEntry] = []
    for rank, (record, score) in enumerate(scored, start=1):
        leaderboard.append(
            LeaderboardEntry(
                rank=rank,
                hero_id=record.hero_id,
                hero_name=record.hero_name,
                rating=record.rating,
                games=record.games,
                wins=record.wins,
                losses=record.losses,
                win_rate=record.win_rate,
                wilson_score=score,
                confidence=get_confidence_level(record.games, config.confidence_thresholds),
                is_provisional=record.is_provisional,
            )
        )
    return leaderboard
