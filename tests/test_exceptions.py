"""Tests for Hero Rank exceptions."""

import pytest

from hero_rank import (
    ConfigError,
    HeroRankError,
    InconsistentStateError,
    InvalidComparisonError,
    RecomputeInProgressError,
    RecomputeRefusedError,
    StorageError,
)


class TestHeroRankError:
    """Tests for base exception."""

    def test_is_exception(self) -> None:
        error = HeroRankError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    @pytest.mark.parametrize(
        "error",
        [
            InvalidComparisonError(1, 1),
            StorageError("boom"),
            InconsistentStateError([1]),
            RecomputeInProgressError(),
            RecomputeRefusedError(3),
            ConfigError("bad"),
        ],
    )
    def test_all_inherit_from_base(self, error) -> None:
        assert isinstance(error, HeroRankError)


class TestInvalidComparisonError:
    """Tests for InvalidComparisonError."""

    def test_default_reason(self) -> None:
        error = InvalidComparisonError(5, 5)
        assert error.winner_id == 5
        assert error.loser_id == 5
        assert "5 vs 5" in str(error)
        assert "distinct integer hero IDs" in str(error)

    def test_custom_reason(self) -> None:
        error = InvalidComparisonError("a", 2, "hero IDs must be integers")
        assert "'a' vs 2" in str(error)
        assert error.reason == "hero IDs must be integers"


class TestStorageError:
    """Tests for StorageError."""

    def test_basic_message(self) -> None:
        assert str(StorageError("disk full")) == "disk full"

    def test_with_operation(self) -> None:
        error = StorageError("disk full", operation="commit_comparison")
        assert error.operation == "commit_comparison"
        assert "Rating store 'commit_comparison' failed: disk full" in str(error)


class TestInconsistentStateError:
    """Tests for InconsistentStateError."""

    def test_lists_heroes(self) -> None:
        error = InconsistentStateError([3, 7])
        assert error.hero_ids == [3, 7]
        assert "2 rating record(s)" in str(error)
        assert "3, 7" in str(error)
        assert "repair(" in str(error)

    def test_truncates_long_lists(self) -> None:
        error = InconsistentStateError(list(range(25)))
        assert "(15 more)" in str(error)


class TestRecomputeErrors:
    """Tests for the recompute guard errors."""

    def test_in_progress(self) -> None:
        assert "in progress" in str(RecomputeInProgressError())
        error = RecomputeInProgressError(1, 2)
        assert "Rejected comparison: 1 vs 2" in str(error)

    def test_refused(self) -> None:
        error = RecomputeRefusedError(12)
        assert error.existing == 12
        assert "12 record(s)" in str(error)
        assert "force=True" in str(error)


class TestConfigError:
    """Tests for ConfigError."""

    def test_basic_message(self) -> None:
        assert str(ConfigError("Invalid value")) == "Invalid value"

    def test_with_field(self) -> None:
        error = ConfigError("Must be positive", field="k_factor")
        assert error.field == "k_factor"
        assert "k_factor" in str(error)
        assert "Must be positive" in str(error)
