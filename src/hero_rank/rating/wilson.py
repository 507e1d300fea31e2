"""Wilson score confidence estimation.

Raw win rates are misleading for heroes with few games: 3 wins out of 3 is
"100%" but says very little. The lower bound of the Wilson score interval is
a conservative estimate of the true win probability that rewards heroes for
winning consistently over many games, and converges to the raw win rate as
games grow.
"""

from __future__ import annotations

import math
from statistics import NormalDist

from ..config import ConfidenceThresholds
from ..exceptions import ConfigError
from ..models import ConfidenceLevel, WilsonInterval

# Common confidence levels and their two-sided z-scores
Z_SCORES: dict[float, float] = {
    0.90: 1.645,
    0.95: 1.96,
    0.99: 2.576,
}

DEFAULT_THRESHOLDS = ConfidenceThresholds()


def z_score(confidence_level: float = 0.95) -> float:
    """Two-sided z-score for a confidence level.

    Uses the rounded textbook values for 90%, 95% and 99%, and the inverse
    normal CDF for anything else.

    Raises:
        ConfigError: If confidence_level is not strictly between 0 and 1.
    """
    if not 0.0 < confidence_level < 1.0:
        raise ConfigError(
            f"must be between 0 and 1, got {confidence_level}",
            field="confidence_level",
        )
    if confidence_level in Z_SCORES:
        return Z_SCORES[confidence_level]
    return NormalDist().inv_cdf(1 - (1 - confidence_level) / 2)


def _validate_counts(wins: int, games: int) -> None:
    if games < 0 or wins < 0:
        raise ValueError(f"wins and games must be non-negative, got wins={wins}, games={games}")
    if wins > games:
        raise ValueError(f"wins ({wins}) cannot exceed games ({games})")


def _center_and_margin(wins: int, games: int, z: float) -> tuple[float, float, float]:
    p = wins / games
    z2 = z * z
    denominator = 1 + z2 / games
    center = p + z2 / (2 * games)
    margin = z * math.sqrt((p * (1 - p) + z2 / (4 * games)) / games)
    return center, margin, denominator


def wilson_score(wins: int, games: int, confidence_level: float = 0.95) -> float:
    """Lower bound of the Wilson score interval.

    Args:
        wins: Number of wins.
        games: Number of games played.
        confidence_level: Confidence level for the interval (default 95%).

    Returns:
        Score between 0 and 1. Zero when no games have been played.

    Example:
        ```python
        wilson_score(10, 10)    # ~0.72
        wilson_score(100, 100)  # ~0.96
        ```
    """
    _validate_counts(wins, games)
    if games == 0:
        return 0.0
    center, margin, denominator = _center_and_margin(wins, games, z_score(confidence_level))
    return min(1.0, max(0.0, (center - margin) / denominator))


def wilson_score_interval(
    wins: int,
    games: int,
    confidence_level: float = 0.95,
) -> WilsonInterval:
    """Full Wilson score interval (lower and upper bounds).

    Returns:
        WilsonInterval; both bounds are 0 when no games have been played.
    """
    _validate_counts(wins, games)
    if games == 0:
        return WilsonInterval(lower=0.0, upper=0.0)
    center, margin, denominator = _center_and_margin(wins, games, z_score(confidence_level))
    return WilsonInterval(
        lower=min(1.0, max(0.0, (center - margin) / denominator)),
        upper=min(1.0, max(0.0, (center + margin) / denominator)),
    )


def get_confidence_level(
    games: int,
    thresholds: ConfidenceThresholds | None = None,
) -> ConfidenceLevel:
    """Classify how trustworthy a rating is from its game count."""
    thresholds = thresholds or DEFAULT_THRESHOLDS
    if games >= thresholds.high:
        return ConfidenceLevel.HIGH
    elif games >= thresholds.medium:
        return ConfidenceLevel.MEDIUM
    else:
        return ConfidenceLevel.LOW


def true_skill_estimate(
    rating: float,
    wins: int,
    games: int,
    weight: float = 0.3,
    rating_scale: float = 2000.0,
) -> float:
    """Blend the Elo rating with the Wilson score into one 0-1 estimate.

    The rating is normalized by rating_scale; weight is the share given to
    the Wilson score.
    """
    normalized_rating = rating / rating_scale
    return normalized_rating * (1 - weight) + wilson_score(wins, games) * weight


def format_wilson_score(score: float, decimals: int = 1) -> str:
    """Format a 0-1 score as a percentage string, e.g. "72.2%"."""
    return f"{score * 100:.{decimals}f}%"
