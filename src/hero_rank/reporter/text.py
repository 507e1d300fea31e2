"""Text reporter for Hero Rank results.

Provides human-readable formatting for leaderboards, single vote outcomes,
recompute runs and consistency repairs.
"""

from __future__ import annotations

from ..models import (
    ConsistencyIssue,
    LeaderboardEntry,
    RatingChange,
    RecomputeResult,
    RepairResult,
)
from ..rating.wilson import format_wilson_score


class TextReporter:
    """Formats results as human-readable text.

    Example:
        ```python
        reporter = TextReporter()
        print(reporter.format_leaderboard(accessor.leaderboard(limit=10)))
        ```
    """

    @staticmethod
    def _hero(hero_id: int, hero_name: str | None) -> str:
        return f"#{hero_id} {hero_name}" if hero_name else f"#{hero_id}"

    def format_change(self, change: RatingChange) -> str:
        """Format the outcome of a single vote.

        Args:
            change: The rating change to format.

        Returns:
            Formatted string.
        """
        return (
            f"Hero #{change.winner_id}: {change.new_winner_rating:g} ({change.winner_change:+d})  "
            f"beat  Hero #{change.loser_id}: {change.new_loser_rating:g} ({change.loser_change:+d})"
        )

    def format_leaderboard(self, entries: list[LeaderboardEntry]) -> str:
        """Format a leaderboard as a table.

        Args:
            entries: Ranked entries, best first.

        Returns:
            Formatted string.
        """
        lines = [
            "Leaderboard",
            f"{'=' * 78}",
            f"  {'Rank':<6} {'Hero':<24} {'Rating':<8} {'W/L':<12} {'Win %':<8} "
            f"{'Wilson':<8} {'Confidence'}",
            f"  {'-' * 74}",
        ]

        if not entries:
            lines.append("  (no rated heroes)")

        for entry in entries:
            marker = "*" if entry.is_provisional else " "
            lines.append(
                f"  {entry.rank:<6} {self._hero(entry.hero_id, entry.hero_name):<24} "
                f"{entry.rating:<8g} {f'{entry.wins}W/{entry.losses}L':<12} "
                f"{entry.win_rate:<8.1f} {format_wilson_score(entry.wilson_score):<8} "
                f"{entry.confidence.value}{marker}"
            )

        if any(entry.is_provisional for entry in entries):
            lines.append("")
            lines.append("  * provisional rating")

        return "\n".join(lines)

    def format_recompute(self, result: RecomputeResult) -> str:
        """Format a recompute run summary.

        Args:
            result: The recompute result to format.

        Returns:
            Formatted string.
        """
        if result.cancelled:
            headline = f"CANCELLED after {result.applied_events + result.skipped_events} vote(s)"
        elif result.dry_run:
            headline = (
                f"DRY RUN: would have migrated {result.applied_events} votes "
                f"for {result.unique_heroes} heroes"
            )
        else:
            headline = (
                f"Migrated {result.applied_events} votes for {result.unique_heroes} heroes"
            )

        lines = [
            "Recompute Results",
            f"{'=' * 50}",
            headline,
            f"Votes read:    {result.total_events}",
            f"Votes skipped: {result.skipped_events}",
            f"Time:          {result.time_ms:.0f}ms",
        ]

        if result.top_heroes:
            lines.append("")
            lines.append("Top Heroes:")
            for entry in result.top_heroes:
                lines.append(
                    f"  {entry.rank:>2}. {self._hero(entry.hero_id, entry.hero_name):<24} "
                    f"{entry.rating:g}  ({entry.games} games, {entry.win_rate:.1f}% wins)"
                )

        return "\n".join(lines)

    def format_consistency(self, issues: list[ConsistencyIssue]) -> str:
        """Format the output of a consistency scan.

        Args:
            issues: Inconsistent records found.

        Returns:
            Formatted string.
        """
        if not issues:
            return "No inconsistencies found. All heroes have correct games count."

        lines = [f"Found {len(issues)} heroes with inconsistent data:", ""]
        for issue in issues:
            lines.append(f"Hero {self._hero(issue.hero_id, issue.hero_name)}:")
            lines.append(
                f"  Current:  games={issue.games}, wins={issue.wins}, "
                f"losses={issue.losses}, win_rate={issue.win_rate:.1f}%"
            )
            lines.append(
                f"  Expected: games={issue.expected_games}, "
                f"win_rate={issue.expected_win_rate:.1f}%"
            )
        return "\n".join(lines)

    def format_repair(self, result: RepairResult) -> str:
        """Format a repair pass summary.

        Args:
            result: The repair result to format.

        Returns:
            Formatted string.
        """
        lines = [
            f"Repair ({result.strategy})",
            f"{'=' * 50}",
            self.format_consistency(result.issues),
            "",
            f"Records rewritten: {result.repaired}",
        ]
        if result.remaining:
            lines.append(f"Warning: {result.remaining} heroes still have inconsistent data.")
        else:
            lines.append("Verification passed! All heroes now have consistent data.")
        return "\n".join(lines)


def print_results(
    result: RatingChange | RecomputeResult | RepairResult | list[LeaderboardEntry],
) -> None:
    """Convenience function to print formatted results.

    Automatically detects the result type and prints the appropriate format.

    Args:
        result: Any Hero Rank result object, or a leaderboard list.

    Example:
        ```python
        from hero_rank import RatingAccessor, print_results

        print_results(RatingAccessor().recompute_store(dry_run=True))
        ```
    """
    reporter = TextReporter()

    if isinstance(result, RatingChange):
        print(reporter.format_change(result))
    elif isinstance(result, RecomputeResult):
        print(reporter.format_recompute(result))
    elif isinstance(result, RepairResult):
        print(reporter.format_repair(result))
    elif isinstance(result, list) and all(isinstance(e, LeaderboardEntry) for e in result):
        print(reporter.format_leaderboard(result))
    else:
        raise TypeError(f"Unsupported result type: {type(result).__name__}")
