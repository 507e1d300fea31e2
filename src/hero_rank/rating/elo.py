"""Elo rating calculator for hero rankings.

This module implements the Elo rating system commonly used in chess, adapted
for pairwise hero votes. Heroes with few games use a larger K-factor so their
ratings settle quickly; established heroes move more slowly.

Everything here is pure: no storage, no locking, safe to call from any thread.
"""

from __future__ import annotations

import math

from ..config import EloConfig
from ..models import EloResult

DEFAULT_CONFIG = EloConfig()
MAX_EXPONENT = 300


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    Matches the rounding historical ratings were produced with, so that
    ``round_half_up(2.5) == 3`` and ``round_half_up(-2.5) == -2``. Python's
    built-in round() would give 2 and -2.
    """
    return math.floor(value + 0.5)


class ELO:
    """Elo rating system for hero rankings.

    The Elo system calculates ratings based on expected vs actual performance.
    After each comparison, both winner and loser have their ratings adjusted.
    Each side picks its own K-factor from its own game count.

    Example:
        ```python
        # Two fresh heroes: both provisional, K=48
        result = ELO.compute_new_ratings(1500, 1500, 0, 0)
        # result.winner_change == 24, result.loser_change == -24

        # Established favorite beats an underdog
        result = ELO.compute_new_ratings(1600, 1400, 50, 50)
        # result.winner_change == 8, result.loser_change == -8
        ```
    """

    @staticmethod
    def expected_score(rating_a: float, rating_b: float) -> float:
        """Calculate expected score for hero A against hero B.

        The expected score represents the probability of hero A winning,
        based on the difference in ratings.

        Args:
            rating_a: Elo rating of hero A.
            rating_b: Elo rating of hero B.

        Returns:
            Expected score between 0 and 1.

        Example:
            ```python
            ELO.expected_score(1500, 1500)  # 0.5
            ELO.expected_score(1600, 1400)  # ~0.76
            ```
        """
        exponent = (rating_b - rating_a) / 400
        # 10 ** exponent overflows a float past ~308; the score is already 0 there
        if exponent > MAX_EXPONENT:
            return 0.0
        return 1 / (1 + 10**exponent)

    @staticmethod
    def k_factor(games: int, config: EloConfig | None = None) -> int:
        """K-factor for a hero with the given number of games."""
        config = config or DEFAULT_CONFIG
        if games < config.provisional_threshold:
            return config.provisional_k_factor
        return config.k_factor

    @staticmethod
    def is_provisional(games: int, config: EloConfig | None = None) -> bool:
        """Whether a hero with this many games is still flagged provisional."""
        config = config or DEFAULT_CONFIG
        return games < config.provisional_flag_threshold

    @staticmethod
    def compute_new_ratings(
        winner_rating: float,
        loser_rating: float,
        winner_games: int,
        loser_games: int,
        config: EloConfig | None = None,
    ) -> EloResult:
        """Compute both heroes' new ratings after a comparison.

        Winner scores 1, loser scores 0. Changes are rounded half up, so
        the winner never loses points and the loser never gains any.
        Ratings are not clamped.

        Args:
            winner_rating: Current rating of the winner.
            loser_rating: Current rating of the loser.
            winner_games: Games the winner has played before this one.
            loser_games: Games the loser has played before this one.
            config: Engine configuration (defaults to EloConfig()).

        Returns:
            EloResult with new ratings and the integer changes.
        """
        config = config or DEFAULT_CONFIG
        winner_k = ELO.k_factor(winner_games, config)
        loser_k = ELO.k_factor(loser_games, config)

        winner_expected = ELO.expected_score(winner_rating, loser_rating)
        loser_expected = ELO.expected_score(loser_rating, winner_rating)

        winner_change = round_half_up(winner_k * (1 - winner_expected))
        loser_change = round_half_up(loser_k * (0 - loser_expected))

        return EloResult(
            new_winner_rating=winner_rating + winner_change,
            new_loser_rating=loser_rating + loser_change,
            winner_change=winner_change,
            loser_change=loser_change,
        )

    @staticmethod
    def update(
        winner_rating: float,
        loser_rating: float,
        winner_games: int = 0,
        loser_games: int = 0,
        config: EloConfig | None = None,
    ) -> tuple[float, float]:
        """Shorthand for compute_new_ratings returning (new_winner, new_loser)."""
        result = ELO.compute_new_ratings(
            winner_rating, loser_rating, winner_games, loser_games, config
        )
        return result.new_winner_rating, result.new_loser_rating
