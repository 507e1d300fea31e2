"""Rating module for Hero Rank.

This module provides the pure rating engine: the Elo calculator, the Wilson
score confidence estimator and an in-memory accumulator used for replays.

Components:
    - ELO: Expected scores, K-factor selection and rating updates
    - RatingTracker: Applies comparisons to in-memory rating records
    - wilson_score / wilson_score_interval: Confidence-adjusted win rates
    - get_confidence_level: High/Medium/Low label from games played
    - build_leaderboard: Ranked entries with Wilson scores and confidence

Example:
    ```python
    from hero_rank.rating import ELO, wilson_score

    result = ELO.compute_new_ratings(1500, 1500, 0, 0)
    print(result.winner_change)  # 24

    print(wilson_score(10, 10) < wilson_score(100, 100))  # True
    ```
"""

from .elo import ELO, round_half_up
from .leaderboard import build_leaderboard
from .tracker import RatingTracker, apply_result
from .wilson import (
    format_wilson_score,
    get_confidence_level,
    true_skill_estimate,
    wilson_score,
    wilson_score_interval,
    z_score,
)

__all__ = [
    "ELO",
    "round_half_up",
    "RatingTracker",
    "apply_result",
    "build_leaderboard",
    "wilson_score",
    "wilson_score_interval",
    "get_confidence_level",
    "true_skill_estimate",
    "format_wilson_score",
    "z_score",
]
