"""Hero Rank - Elo ratings from pairwise hero votes.

Turns a stream of "A beats B" votes into a ranking: an Elo calculator with
provisional K-factors, Wilson score confidence estimates, an accessor that
applies votes to a rating store atomically, and a replay that rebuilds every
rating from the vote log.

Example:
    ```python
    from hero_rank import RatingAccessor

    accessor = RatingAccessor()
    change = accessor.apply_comparison(winner_id=70, loser_id=644)
    print(change.new_winner_rating)  # 1524.0

    result = accessor.recompute_store(force=True)
    print(result.top_heroes[0].hero_id)  # 70
    ```
"""

from .accessor import RatingAccessor
from .config import (
    ConfidenceThresholds,
    EloConfig,
    HeroRankConfig,
    ProgressCallback,
    StoreConfig,
)
from .exceptions import (
    ConfigError,
    HeroRankError,
    InconsistentStateError,
    InvalidComparisonError,
    RecomputeInProgressError,
    RecomputeRefusedError,
    StorageError,
)
from .models import (
    ComparisonEvent,
    ConfidenceLevel,
    ConsistencyIssue,
    EloResult,
    LeaderboardEntry,
    Progress,
    RatingChange,
    RatingRecord,
    RecomputeResult,
    RepairResult,
    WilsonInterval,
)
from .rating import (
    ELO,
    RatingTracker,
    build_leaderboard,
    format_wilson_score,
    get_confidence_level,
    round_half_up,
    true_skill_estimate,
    wilson_score,
    wilson_score_interval,
)
from .recompute import recompute, sort_events
from .reporter import TextReporter, print_results
from .store import (
    MemoryRatingStore,
    RatingStore,
    SQLiteRatingStore,
    get_store,
    store_from_config,
)

__version__ = "0.1.0"

__all__ = [
    # Main entry point
    "RatingAccessor",
    # Configuration
    "EloConfig",
    "ConfidenceThresholds",
    "StoreConfig",
    "HeroRankConfig",
    "ProgressCallback",
    # Core models
    "RatingRecord",
    "ComparisonEvent",
    "ConfidenceLevel",
    # Result models
    "EloResult",
    "RatingChange",
    "WilsonInterval",
    "LeaderboardEntry",
    "RecomputeResult",
    "ConsistencyIssue",
    "RepairResult",
    "Progress",
    # Rating engine
    "ELO",
    "RatingTracker",
    "round_half_up",
    "wilson_score",
    "wilson_score_interval",
    "get_confidence_level",
    "true_skill_estimate",
    "format_wilson_score",
    "build_leaderboard",
    # Recompute
    "recompute",
    "sort_events",
    # Stores
    "RatingStore",
    "MemoryRatingStore",
    "SQLiteRatingStore",
    "get_store",
    "store_from_config",
    # Reporter
    "TextReporter",
    "print_results",
    # Exceptions
    "HeroRankError",
    "InvalidComparisonError",
    "StorageError",
    "InconsistentStateError",
    "RecomputeInProgressError",
    "RecomputeRefusedError",
    "ConfigError",
]
