"""Custom exceptions for Hero Rank.

Every error raised by the rating engine derives from HeroRankError and carries
a message that says what went wrong and what the caller can do about it.
"""

from __future__ import annotations

from typing import Any


class HeroRankError(Exception):
    """Base exception for all Hero Rank errors."""

    pass


class InvalidComparisonError(HeroRankError):
    """A comparison that can never be applied.

    Raised for self-comparisons (winner == loser) and malformed hero IDs.
    Never worth retrying; batch replays skip and count these instead.
    """

    def __init__(self, winner_id: Any, loser_id: Any, reason: str | None = None):
        self.winner_id = winner_id
        self.loser_id = loser_id
        self.reason = reason or "winner and loser must be distinct integer hero IDs"
        message = f"Invalid comparison {winner_id!r} vs {loser_id!r}: {self.reason}"
        super().__init__(message)


class StorageError(HeroRankError):
    """Reading from or writing to the rating store failed.

    The accessor never retries; retry and backoff belong to the caller.
    """

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        full_message = message
        if operation:
            full_message = f"Rating store '{operation}' failed: {message}"
        super().__init__(full_message)


class InconsistentStateError(HeroRankError):
    """Stored ratings violate games == wins + losses.

    Usually left behind by a partial write or a double count. Run
    RatingAccessor.repair() to fix it.
    """

    def __init__(self, hero_ids: list[int]):
        self.hero_ids = list(hero_ids)
        shown = ", ".join(str(h) for h in self.hero_ids[:10])
        if len(self.hero_ids) > 10:
            shown += f", ... ({len(self.hero_ids) - 10} more)"
        message = (
            f"{len(self.hero_ids)} rating record(s) have games != wins + losses: {shown}\n"
            "Run repair(strategy='arithmetic') or repair(strategy='replay') to fix them."
        )
        super().__init__(message)


class RecomputeInProgressError(HeroRankError):
    """A live vote arrived while a full recompute holds the store."""

    def __init__(self, winner_id: Any = None, loser_id: Any = None):
        self.winner_id = winner_id
        self.loser_id = loser_id
        message = (
            "A rating recompute is in progress; live comparisons are rejected until it finishes."
        )
        if winner_id is not None or loser_id is not None:
            message += f"\nRejected comparison: {winner_id!r} vs {loser_id!r}"
        super().__init__(message)


class RecomputeRefusedError(HeroRankError):
    """Recompute would overwrite existing ratings without force=True."""

    def __init__(self, existing: int):
        self.existing = existing
        message = (
            f"Rating store already holds {existing} record(s).\n"
            "Pass force=True to clear them and rebuild from the vote log."
        )
        super().__init__(message)


class ConfigError(HeroRankError):
    """Error in configuration.

    Raised when configuration is invalid or missing required fields.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        full_message = message
        if field:
            full_message = f"Configuration error in '{field}': {message}"
        super().__init__(full_message)
