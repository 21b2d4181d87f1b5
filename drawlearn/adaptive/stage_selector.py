"""
Stage Selector.

Finite-state machine over the five pedagogical stages:

    understand -> try -> review -> challenge
                   ^        |
                   |        v
                   +---- retry

Stage only advances on demonstrated competence (streak thresholds and low
hint use). Any failure with no current streak forces ``retry``.
"""

from __future__ import annotations

from loguru import logger

from drawlearn.core.models import PerformanceSnapshot, Stage

# Every output reachable from a given last stage
STAGE_TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.UNDERSTAND: frozenset({Stage.UNDERSTAND, Stage.TRY, Stage.RETRY}),
    Stage.TRY: frozenset({Stage.TRY, Stage.REVIEW, Stage.RETRY}),
    Stage.REVIEW: frozenset({Stage.REVIEW, Stage.CHALLENGE, Stage.RETRY}),
    Stage.RETRY: frozenset({Stage.RETRY, Stage.TRY}),
    Stage.CHALLENGE: frozenset({Stage.CHALLENGE, Stage.RETRY}),
}

UNDERSTAND_TO_TRY_STREAK = 2
TRY_TO_REVIEW_STREAK = 1
TRY_TO_REVIEW_MAX_HINTS = 1
REVIEW_TO_CHALLENGE_STREAK = 2
RETRY_TO_TRY_STREAK = 1


def select_next_stage(snapshot: PerformanceSnapshot) -> Stage:
    """
    Pick the stage for the next exercise on this item.

    Args:
        snapshot: Aggregated performance for the item

    Returns:
        The next Stage
    """
    last_stage = Stage.parse(snapshot.last_stage)
    if last_stage is None or not snapshot.recent_attempts:
        return Stage.UNDERSTAND

    streak = snapshot.success_streak

    if snapshot.failure_count > 0 and streak == 0:
        next_stage = Stage.RETRY
    elif last_stage == Stage.UNDERSTAND:
        next_stage = Stage.TRY if streak >= UNDERSTAND_TO_TRY_STREAK else Stage.UNDERSTAND
    elif last_stage == Stage.TRY:
        last_hints = snapshot.recent_attempts[0].hints_used
        if streak >= TRY_TO_REVIEW_STREAK and last_hints <= TRY_TO_REVIEW_MAX_HINTS:
            next_stage = Stage.REVIEW
        else:
            next_stage = Stage.TRY
    elif last_stage == Stage.REVIEW:
        # A missed review anywhere in the window outranks the streak
        if snapshot.failure_count > 0:
            next_stage = Stage.RETRY
        elif streak >= REVIEW_TO_CHALLENGE_STREAK:
            next_stage = Stage.CHALLENGE
        else:
            next_stage = Stage.REVIEW
    elif last_stage == Stage.RETRY:
        next_stage = Stage.TRY if streak >= RETRY_TO_TRY_STREAK else Stage.RETRY
    else:
        next_stage = Stage.CHALLENGE

    logger.debug(
        f"Stage {last_stage.value} -> {next_stage.value} "
        f"(streak={streak}, failures={snapshot.failure_count})"
    )
    return next_stage
