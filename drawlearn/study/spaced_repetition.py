"""
Spaced Repetition Scheduler.

A modified SM-2 variant tuned for young learners:

- A continuous mastery score in [0, 1] replaces SM-2's ease factor
- Hint use costs one quality point
- Intervals grow by ``2 * (0.5 + mastery / 2)`` per successful review and
  reset to one day on any review below quality 3
- Intervals are capped at 14 days

Growth uses round-half-up, so an interval of 4.5 days becomes 5.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from drawlearn.core.errors import InvalidOutcomeError
from drawlearn.core.models import (
    ChallengeResult,
    ReviewOutcome,
    SpacedRepetitionState,
    utc_now,
)

# Quality scale
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# Mastery deltas by adjusted quality band
MASTERY_GAIN_STRONG = 0.15  # quality >= 4
MASTERY_GAIN_WEAK = 0.08  # quality == 3
MASTERY_LOSS_WEAK = 0.05  # quality == 2
MASTERY_LOSS_STRONG = 0.15  # quality < 2

MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 14
SECOND_REVIEW_INTERVAL_DAYS = 3

DEFAULT_EXPECTED_TIME_MS = 45000
DEFAULT_REVIEW_LIMIT = 5
DEFAULT_MASTERY_THRESHOLD = 0.6

# Review priority weights
OVERDUE_DAY_WEIGHT = 10
LOW_MASTERY_WEIGHT = 5


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with .5 going up.

    Mastery steps are decimal fractions, so the product is first rounded to
    9 places to keep float noise (4.4999999999) from landing below the half.
    """
    return int(math.floor(round(value, 9) + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class StudySchedule:
    """Upcoming review load."""

    today: int = 0
    this_week: int = 0
    next_week: int = 0


class SpacedRepetitionScheduler:
    """
    Compute review intervals and mastery updates.

    Stateless apart from its configuration: every method is a pure function
    of its arguments and the supplied clock value.
    """

    def __init__(
        self,
        max_interval_days: int = MAX_INTERVAL_DAYS,
        expected_time_ms: float = DEFAULT_EXPECTED_TIME_MS,
    ):
        """
        Initialize scheduler.

        Args:
            max_interval_days: Upper clamp for review intervals (at most 14)
            expected_time_ms: Baseline answer time for the slow-answer penalty
        """
        if not MIN_INTERVAL_DAYS <= max_interval_days <= MAX_INTERVAL_DAYS:
            raise ValueError(
                f"max_interval_days must be between {MIN_INTERVAL_DAYS} and {MAX_INTERVAL_DAYS}"
            )
        self.max_interval_days = max_interval_days
        self.expected_time_ms = expected_time_ms

    # -------------------------------------------------------------------------
    # Outcome grading
    # -------------------------------------------------------------------------

    def result_to_quality(
        self,
        result: ChallengeResult | str,
        hints_used: int,
        time_spent_ms: float,
        expected_time_ms: float | None = None,
    ) -> int:
        """
        Convert a challenge outcome to a 0-5 review quality.

        skip -> 0, retry -> 1. A pass scores 5 with no hints, 4 with one,
        3 with two or more, then loses a point (floored at 1) when the
        answer took more than twice the expected time.

        Args:
            result: Challenge outcome
            hints_used: Hints shown during the attempt
            time_spent_ms: Time taken in milliseconds
            expected_time_ms: Override for the baseline answer time

        Returns:
            Quality rating 0-5
        """
        result = ChallengeResult(result)
        if hints_used < 0 or time_spent_ms < 0:
            raise InvalidOutcomeError(
                f"hints_used and time_spent_ms must be non-negative "
                f"(got {hints_used}, {time_spent_ms})"
            )

        if result == ChallengeResult.SKIP:
            return 0
        if result == ChallengeResult.RETRY:
            return 1

        if hints_used == 0:
            quality = 5
        elif hints_used == 1:
            quality = 4
        else:
            quality = 3

        baseline = self.expected_time_ms if expected_time_ms is None else expected_time_ms
        if time_spent_ms > baseline * 2:
            quality = max(1, quality - 1)

        return quality

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def calculate_next_review(
        self,
        state: SpacedRepetitionState | None,
        outcome: ReviewOutcome,
        now: datetime | None = None,
        item_id: str | None = None,
        learner_id: str | None = None,
    ) -> SpacedRepetitionState:
        """
        Apply one review to the scheduling state.

        Args:
            state: Previous state, or None for the first review
            outcome: Review quality, hint use and time spent
            now: Review time (defaults to the current UTC time)
            item_id: Item id used when there is no previous state
            learner_id: Learner id used when there is no previous state

        Returns:
            New SpacedRepetitionState
        """
        if not MIN_QUALITY <= outcome.quality <= MAX_QUALITY:
            raise InvalidOutcomeError(
                f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {outcome.quality}"
            )
        now = now or utc_now()

        quality = max(0, outcome.quality - 1) if outcome.was_hint_used else outcome.quality

        if state is not None:
            mastery = _clamp(state.mastery_score, 0.0, 1.0)
            interval = int(_clamp(state.interval_days, MIN_INTERVAL_DAYS, self.max_interval_days))
            review_count = max(0, state.review_count) + 1
        else:
            mastery = 0.0
            interval = MIN_INTERVAL_DAYS
            review_count = 1

        if quality >= 4:
            mastery = min(1.0, mastery + MASTERY_GAIN_STRONG)
        elif quality >= 3:
            mastery = min(1.0, mastery + MASTERY_GAIN_WEAK)
        elif quality >= 2:
            mastery = max(0.0, mastery - MASTERY_LOSS_WEAK)
        else:
            mastery = max(0.0, mastery - MASTERY_LOSS_STRONG)

        if quality < PASSING_QUALITY:
            interval = MIN_INTERVAL_DAYS
        elif review_count == 1:
            interval = MIN_INTERVAL_DAYS
        elif review_count == 2:
            interval = SECOND_REVIEW_INTERVAL_DAYS
        else:
            interval = round_half_up(interval * 2 * (0.5 + mastery * 0.5))

        interval = int(_clamp(interval, MIN_INTERVAL_DAYS, self.max_interval_days))

        new_state = SpacedRepetitionState(
            item_id=state.item_id if state is not None else (item_id or ""),
            next_due=now + timedelta(days=interval),
            interval_days=interval,
            mastery_score=mastery,
            review_count=review_count,
            learner_id=state.learner_id if state is not None else learner_id,
        )

        logger.debug(
            f"Review {new_state.item_id}: q={outcome.quality} (adj {quality}) "
            f"mastery={mastery:.2f} interval={interval}d reviews={review_count}"
        )
        return new_state

    # -------------------------------------------------------------------------
    # Due-ness and prioritisation
    # -------------------------------------------------------------------------

    @staticmethod
    def is_due(state: SpacedRepetitionState, now: datetime | None = None) -> bool:
        """An item is due once its next_due time has passed."""
        return state.next_due <= (now or utc_now())

    @staticmethod
    def get_priority(state: SpacedRepetitionState, now: datetime | None = None) -> float:
        """
        Review urgency (higher first).

        Combines days overdue with a penalty for low mastery so overdue and
        weak items surface first.
        """
        now = now or utc_now()
        days_past_due = (now - state.next_due).total_seconds() / 86400
        return max(0.0, days_past_due) * OVERDUE_DAY_WEIGHT + (
            1 - state.mastery_score
        ) * LOW_MASTERY_WEIGHT

    def select_items_to_review(
        self,
        states: Iterable[SpacedRepetitionState],
        limit: int = DEFAULT_REVIEW_LIMIT,
        now: datetime | None = None,
    ) -> list[SpacedRepetitionState]:
        """Due items ordered by priority, most urgent first."""
        now = now or utc_now()
        due = [s for s in states if self.is_due(s, now)]
        due.sort(key=lambda s: self.get_priority(s, now), reverse=True)
        return due[: max(limit, 0)]

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_retention_rate(
        states: Sequence[SpacedRepetitionState],
        threshold: float = DEFAULT_MASTERY_THRESHOLD,
    ) -> float:
        """Percentage of items at or above the mastery threshold."""
        if not states:
            return 0.0
        mastered = sum(1 for s in states if s.mastery_score >= threshold)
        return mastered / len(states) * 100

    @staticmethod
    def generate_study_schedule(
        states: Iterable[SpacedRepetitionState],
        now: datetime | None = None,
    ) -> StudySchedule:
        """
        Count reviews due today, within a week and within two weeks.

        Items due earlier than today fall into the this-week bucket.
        """
        now = now or utc_now()
        week_end = now + timedelta(days=7)
        two_weeks_end = now + timedelta(days=14)

        today = this_week = next_week = 0
        for state in states:
            if state.next_due.date() == now.date():
                today += 1
            elif state.next_due <= week_end:
                this_week += 1
            elif state.next_due <= two_weeks_end:
                next_week += 1

        return StudySchedule(today=today, this_week=this_week, next_week=next_week)
