"""
Difficulty Adjuster and Hint-Level Policy.

Both are pure functions of the aggregated performance snapshot, evaluated
as ordered rule lists where the first match wins.
"""

from __future__ import annotations

from drawlearn.core.models import DifficultyBand, HintLevel, PerformanceSnapshot

HARD_MIN_STREAK = 3
HARD_MAX_AVG_HINTS = 0.5
HARD_MAX_AVG_TIME_MS = 30000

MEDIUM_MIN_STREAK = 2
MEDIUM_MAX_AVG_HINTS = 1.0

EASY_MIN_AVG_HINTS = 2.0


def adjust_difficulty(snapshot: PerformanceSnapshot) -> DifficultyBand:
    """
    Map streak, hint and time signals to a difficulty band.

    Args:
        snapshot: Aggregated performance for the item

    Returns:
        DifficultyBand for the next challenge
    """
    streak = snapshot.success_streak
    avg_hints = snapshot.avg_hints

    if (
        streak >= HARD_MIN_STREAK
        and avg_hints <= HARD_MAX_AVG_HINTS
        and snapshot.avg_time < HARD_MAX_AVG_TIME_MS
    ):
        return DifficultyBand.HARD

    if streak >= MEDIUM_MIN_STREAK and avg_hints <= MEDIUM_MAX_AVG_HINTS:
        return DifficultyBand.MEDIUM

    if avg_hints >= EASY_MIN_AVG_HINTS or streak == 0:
        return DifficultyBand.EASY

    # New or ambiguous learners
    return DifficultyBand.VERY_EASY


def get_hint_level(snapshot: PerformanceSnapshot) -> HintLevel:
    """Choose how much help to show alongside the next challenge."""
    streak = snapshot.success_streak
    avg_hints = snapshot.avg_hints

    if streak == 0 and avg_hints >= 2:
        return HintLevel.FULL
    if streak <= 1 and avg_hints >= 1:
        return HintLevel.PARTIAL
    return HintLevel.MINIMAL
