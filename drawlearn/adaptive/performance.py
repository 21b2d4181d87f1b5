"""
Performance Aggregator.

Reduces a learner's attempt log for one vocabulary item into the signals
the stage selector, difficulty adjuster and hint policy consume.

Attempt lists are always ordered most recent first.
"""

from __future__ import annotations

from collections.abc import Sequence

from drawlearn.core.models import (
    AttemptRecord,
    ChallengeResult,
    PerformanceMetrics,
    PerformanceSnapshot,
)

DEFAULT_HISTORY_WINDOW = 10

# Readiness thresholds for the open-ended challenge stage
READY_MIN_STREAK = 3
READY_MAX_AVG_HINTS = 1.0
READY_MIN_CONFIDENCE = 70.0

# Confidence index penalty per average hint
HINT_DEPENDENCY_PENALTY = 0.1


def calculate_success_streak(attempts: Sequence[AttemptRecord]) -> int:
    """
    Count consecutive passes at the head of a recency-ordered attempt list.

    Args:
        attempts: Attempts, most recent first

    Returns:
        Length of the leading run of passes (0 if the latest is not a pass)
    """
    streak = 0
    for attempt in attempts:
        if attempt.result != ChallengeResult.PASS:
            break
        streak += 1
    return streak


def build_snapshot(
    item_id: str,
    attempts: Sequence[AttemptRecord],
    window: int = DEFAULT_HISTORY_WINDOW,
) -> PerformanceSnapshot:
    """
    Build a PerformanceSnapshot for one item from its recent history.

    Attempts for other items are ignored, then the list is cut to the most
    recent ``window`` entries. ``failure_count`` counts retry outcomes only;
    skips break the streak without counting as failures.

    Args:
        item_id: Vocabulary item being aggregated
        attempts: Attempt history, most recent first
        window: Maximum number of attempts considered

    Returns:
        PerformanceSnapshot (empty defaults when there is no history)
    """
    recent = tuple(a for a in attempts if a.item_id == item_id)[: max(window, 0)]
    if not recent:
        return PerformanceSnapshot(item_id=item_id)

    count = len(recent)
    return PerformanceSnapshot(
        item_id=item_id,
        recent_attempts=recent,
        success_streak=calculate_success_streak(recent),
        failure_count=sum(1 for a in recent if a.result == ChallengeResult.RETRY),
        avg_hints=sum(a.hints_used for a in recent) / count,
        avg_time=sum(a.time_taken_ms for a in recent) / count,
        last_stage=recent[0].stage,
    )


def calculate_metrics(attempts: Sequence[AttemptRecord]) -> PerformanceMetrics:
    """
    Calculate summary metrics from recent attempts.

    The confidence index is the pass rate minus a hint-dependency penalty,
    floored at zero. Both pass_rate and confidence_index are percentages.
    """
    if not attempts:
        return PerformanceMetrics()

    count = len(attempts)
    pass_rate = sum(1 for a in attempts if a.passed) / count
    avg_hints = sum(a.hints_used for a in attempts) / count
    confidence = max(0.0, pass_rate - avg_hints * HINT_DEPENDENCY_PENALTY)

    return PerformanceMetrics(
        pass_rate=pass_rate * 100,
        avg_time=sum(a.time_taken_ms for a in attempts) / count,
        avg_hints=avg_hints,
        confidence_index=confidence * 100,
        success_streak=calculate_success_streak(attempts),
    )


def is_ready_for_challenge(attempts: Sequence[AttemptRecord]) -> bool:
    """Whether the learner shows enough unaided success for open practice."""
    metrics = calculate_metrics(attempts)
    return (
        metrics.success_streak >= READY_MIN_STREAK
        and metrics.avg_hints <= READY_MAX_AVG_HINTS
        and metrics.confidence_index >= READY_MIN_CONFIDENCE
    )
