"""Tests for the reporter module."""

import pytest

from hero_rank import (
    ConfidenceLevel,
    ConsistencyIssue,
    LeaderboardEntry,
    RatingChange,
    RecomputeResult,
    RepairResult,
    TextReporter,
    print_results,
)


def make_entry(rank: int, hero_id: int, **kwargs) -> LeaderboardEntry:
    defaults = dict(
        rating=1500.0,
        games=40,
        wins=25,
        losses=15,
        win_rate=62.5,
        wilson_score=0.4702,
        confidence=ConfidenceLevel.HIGH,
        is_provisional=False,
    )
    defaults.update(kwargs)
    return LeaderboardEntry(rank=rank, hero_id=hero_id, **defaults)


def make_issue() -> ConsistencyIssue:
    return ConsistencyIssue(
        hero_id=70,
        hero_name="Batman",
        games=12,
        wins=6,
        losses=4,
        win_rate=50.0,
        expected_games=10,
        expected_win_rate=60.0,
    )


class TestTextReporterChange:
    """Tests for TextReporter.format_change()."""

    def test_basic_change(self) -> None:
        change = RatingChange(
            winner_id=70,
            loser_id=644,
            winner_change=24,
            loser_change=-24,
            new_winner_rating=1524,
            new_loser_rating=1476,
        )
        output = TextReporter().format_change(change)
        assert "#70" in output
        assert "#644" in output
        assert "1524 (+24)" in output
        assert "1476 (-24)" in output


class TestTextReporterLeaderboard:
    """Tests for TextReporter.format_leaderboard()."""

    def test_basic_leaderboard(self) -> None:
        entries = [
            make_entry(1, 70, hero_name="Batman", rating=1620),
            make_entry(2, 644, rating=1580),
        ]
        output = TextReporter().format_leaderboard(entries)

        assert "Leaderboard" in output
        assert "#70 Batman" in output
        assert "#644" in output
        assert "1620" in output
        assert "25W/15L" in output
        assert "47.0%" in output
        assert "High" in output
        assert "provisional" not in output

    def test_provisional_marker(self) -> None:
        entries = [make_entry(1, 1, games=3, confidence=ConfidenceLevel.LOW, is_provisional=True)]
        output = TextReporter().format_leaderboard(entries)
        assert "Low*" in output
        assert "* provisional rating" in output

    def test_empty_leaderboard(self) -> None:
        output = TextReporter().format_leaderboard([])
        assert "(no rated heroes)" in output


class TestTextReporterRecompute:
    """Tests for TextReporter.format_recompute()."""

    def test_completed_run(self) -> None:
        result = RecomputeResult(
            total_events=120,
            applied_events=118,
            skipped_events=2,
            unique_heroes=15,
            top_heroes=[make_entry(1, 70, hero_name="Batman", rating=1612)],
            time_ms=42.0,
        )
        output = TextReporter().format_recompute(result)

        assert "Migrated 118 votes for 15 heroes" in output
        assert "Votes read:    120" in output
        assert "Votes skipped: 2" in output
        assert "Top Heroes:" in output
        assert "#70 Batman" in output
        assert "42ms" in output

    def test_dry_run(self) -> None:
        result = RecomputeResult(applied_events=5, unique_heroes=4, dry_run=True)
        output = TextReporter().format_recompute(result)
        assert "DRY RUN: would have migrated 5 votes for 4 heroes" in output
        assert "Top Heroes:" not in output

    def test_cancelled(self) -> None:
        result = RecomputeResult(total_events=100, applied_events=30, skipped_events=1, cancelled=True)
        output = TextReporter().format_recompute(result)
        assert "CANCELLED after 31 vote(s)" in output


class TestTextReporterConsistency:
    """Tests for format_consistency() and format_repair()."""

    def test_clean(self) -> None:
        output = TextReporter().format_consistency([])
        assert "No inconsistencies found" in output

    def test_issues(self) -> None:
        output = TextReporter().format_consistency([make_issue()])
        assert "Found 1 heroes with inconsistent data" in output
        assert "#70 Batman" in output
        assert "games=12, wins=6, losses=4, win_rate=50.0%" in output
        assert "Expected: games=10, win_rate=60.0%" in output

    def test_repair_passed(self) -> None:
        result = RepairResult(strategy="arithmetic", issues=[make_issue()], repaired=1)
        output = TextReporter().format_repair(result)
        assert "Repair (arithmetic)" in output
        assert "Records rewritten: 1" in output
        assert "Verification passed!" in output

    def test_repair_remaining(self) -> None:
        result = RepairResult(strategy="replay", repaired=3, remaining=2)
        output = TextReporter().format_repair(result)
        assert "Warning: 2 heroes still have inconsistent data." in output


class TestPrintResults:
    """Tests for the print_results convenience function."""

    def test_print_change(self, capsys) -> None:
        change = RatingChange(
            winner_id=1,
            loser_id=2,
            winner_change=16,
            loser_change=-16,
            new_winner_rating=1516,
            new_loser_rating=1484,
        )
        print_results(change)
        captured = capsys.readouterr()
        assert "1516 (+16)" in captured.out

    def test_print_leaderboard(self, capsys) -> None:
        print_results([make_entry(1, 9)])
        captured = capsys.readouterr()
        assert "Leaderboard" in captured.out

    def test_print_recompute(self, capsys) -> None:
        print_results(RecomputeResult(applied_events=2, unique_heroes=3))
        captured = capsys.readouterr()
        assert "Migrated 2 votes for 3 heroes" in captured.out

    def test_print_repair(self, capsys) -> None:
        print_results(RepairResult(strategy="arithmetic"))
        captured = capsys.readouterr()
        assert "Verification passed!" in captured.out

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="Unsupported result type"):
            print_results("not a result")
