"""
Unit tests for the spaced repetition scheduler.

Tests:
- Outcome -> quality mapping
- Mastery bands and interval rules (including round-half-up growth)
- Clamps on mastery and interval
- Due-ness, priority ordering and study analytics
"""

import itertools
from datetime import timedelta

import pytest

from drawlearn.core.errors import InvalidOutcomeError
from drawlearn.core.models import ChallengeResult, ReviewOutcome, SpacedRepetitionState
from drawlearn.study.spaced_repetition import SpacedRepetitionScheduler, round_half_up


@pytest.fixture
def scheduler():
    return SpacedRepetitionScheduler()


def state(now, interval=1, mastery=0.0, reviews=0, due_offset_days=0.0, item_id="w-cat"):
    return SpacedRepetitionState(
        item_id=item_id,
        next_due=now + timedelta(days=due_offset_days),
        interval_days=interval,
        mastery_score=mastery,
        review_count=reviews,
        learner_id="learner-1",
    )


class TestResultToQuality:
    def test_skip_is_zero(self, scheduler):
        assert scheduler.result_to_quality("skip", 0, 1000) == 0

    @pytest.mark.parametrize("hints,time_ms", [(0, 1000), (3, 1000), (0, 500000)])
    def test_retry_is_always_one(self, scheduler, hints, time_ms):
        assert scheduler.result_to_quality(ChallengeResult.RETRY, hints, time_ms) == 1

    @pytest.mark.parametrize("hints,expected", [(0, 5), (1, 4), (2, 3), (4, 3)])
    def test_pass_by_hints(self, scheduler, hints, expected):
        assert scheduler.result_to_quality("pass", hints, 45000) == expected

    def test_pass_at_exactly_twice_baseline_not_penalised(self, scheduler):
        assert scheduler.result_to_quality("pass", 0, 90000) == 5

    def test_slow_pass_loses_a_point(self, scheduler):
        assert scheduler.result_to_quality("pass", 0, 90001) == 4
        assert scheduler.result_to_quality("pass", 2, 90001) == 2

    def test_custom_baseline(self, scheduler):
        assert scheduler.result_to_quality("pass", 0, 25000, expected_time_ms=10000) == 4

    def test_negative_hints_rejected(self, scheduler):
        with pytest.raises(InvalidOutcomeError):
            scheduler.result_to_quality("pass", -1, 1000)


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(4.5) == 5
        assert round_half_up(2.5) == 3
        assert round_half_up(4.49) == 4


class TestCalculateNextReview:
    def test_first_review_perfect(self, scheduler, now):
        new = scheduler.calculate_next_review(
            None, ReviewOutcome(quality=5), now=now, item_id="w-cat", learner_id="learner-1"
        )
        assert new.review_count == 1
        assert new.interval_days == 1
        assert new.mastery_score == pytest.approx(0.15)
        assert new.next_due == now + timedelta(days=1)
        assert new.item_id == "w-cat"
        assert new.learner_id == "learner-1"

    def test_second_review_is_three_days(self, scheduler, now):
        new = scheduler.calculate_next_review(
            state(now, interval=1, mastery=0.15, reviews=1), ReviewOutcome(quality=4), now=now
        )
        assert new.interval_days == 3
        assert new.mastery_score == pytest.approx(0.30)

    def test_third_review_growth_rounds_half_up(self, scheduler, now):
        # Mastery 0.35 + 0.15 = 0.5 -> round(3 * 2 * 0.75) = round(4.5) = 5
        new = scheduler.calculate_next_review(
            state(now, interval=3, mastery=0.35, reviews=2), ReviewOutcome(quality=5), now=now
        )
        assert new.review_count == 3
        assert new.mastery_score == pytest.approx(0.5)
        assert new.interval_days == 5

    def test_quality_two_resets_interval(self, scheduler, now):
        new = scheduler.calculate_next_review(
            state(now, interval=8, mastery=0.6, reviews=5), ReviewOutcome(quality=2), now=now
        )
        assert new.interval_days == 1
        assert new.mastery_score == pytest.approx(0.55)

    def test_quality_three_small_gain(self, scheduler, now):
        new = scheduler.calculate_next_review(
            state(now, interval=1, mastery=0.2, reviews=0), ReviewOutcome(quality=3), now=now
        )
        assert new.mastery_score == pytest.approx(0.28)

    def test_low_quality_big_loss_clamped_at_zero(self, scheduler, now):
        new = scheduler.calculate_next_review(
            state(now, mastery=0.1, reviews=3), ReviewOutcome(quality=1), now=now
        )
        assert new.mastery_score == 0.0
        assert new.interval_days == 1

    def test_hint_costs_one_quality_point(self, scheduler, now):
        # 3 with a hint behaves like 2: interval reset and -0.05
        new = scheduler.calculate_next_review(
            state(now, interval=6, mastery=0.5, reviews=4),
            ReviewOutcome(quality=3, was_hint_used=True),
            now=now,
        )
        assert new.interval_days == 1
        assert new.mastery_score == pytest.approx(0.45)

    def test_hint_with_zero_quality_stays_zero(self, scheduler, now):
        new = scheduler.calculate_next_review(
            state(now, mastery=0.5, reviews=1),
            ReviewOutcome(quality=0, was_hint_used=True),
            now=now,
        )
        assert new.mastery_score == pytest.approx(0.35)

    def test_interval_capped_at_fourteen(self, scheduler, now):
        new = scheduler.calculate_next_review(
            state(now, interval=10, mastery=0.9, reviews=6), ReviewOutcome(quality=5), now=now
        )
        assert new.interval_days == 14
        assert new.mastery_score == 1.0

    def test_out_of_range_prior_state_is_clamped(self, scheduler, now):
        new = scheduler.calculate_next_review(
            state(now, interval=90, mastery=1.7, reviews=5), ReviewOutcome(quality=4), now=now
        )
        assert 0.0 <= new.mastery_score <= 1.0
        assert 1 <= new.interval_days <= 14

    def test_invalid_quality_rejected(self, scheduler, now):
        with pytest.raises(InvalidOutcomeError):
            scheduler.calculate_next_review(None, ReviewOutcome(quality=6), now=now)

    def test_deterministic(self, scheduler, now):
        prior = state(now, interval=3, mastery=0.4, reviews=2)
        outcome = ReviewOutcome(quality=4, was_hint_used=False)
        first = scheduler.calculate_next_review(prior, outcome, now=now)
        second = scheduler.calculate_next_review(prior, outcome, now=now)
        assert first == second

    def test_bounds_hold_for_all_inputs(self, scheduler, now):
        grid = itertools.product(
            range(0, 6),
            [False, True],
            [1, 3, 7, 14],
            [0.0, 0.05, 0.5, 0.95, 1.0],
            [0, 1, 2, 5],
        )
        for quality, hint, interval, mastery, reviews in grid:
            new = scheduler.calculate_next_review(
                state(now, interval=interval, mastery=mastery, reviews=reviews),
                ReviewOutcome(quality=quality, was_hint_used=hint),
                now=now,
            )
            assert 0.0 <= new.mastery_score <= 1.0
            assert 1 <= new.interval_days <= 14
            assert new.review_count == reviews + 1


class TestDueAndPriority:
    def test_is_due(self, scheduler, now):
        assert scheduler.is_due(state(now, due_offset_days=0), now) is True
        assert scheduler.is_due(state(now, due_offset_days=-1), now) is True
        assert scheduler.is_due(state(now, due_offset_days=0.5), now) is False

    def test_priority_formula(self, scheduler, now):
        overdue = state(now, mastery=0.4, due_offset_days=-2)
        assert scheduler.get_priority(overdue, now) == pytest.approx(2 * 10 + 0.6 * 5)

    def test_future_items_have_no_overdue_component(self, scheduler, now):
        future = state(now, mastery=0.8, due_offset_days=3)
        assert scheduler.get_priority(future, now) == pytest.approx(1.0)

    def test_select_items_to_review_orders_and_limits(self, scheduler, now):
        states = [
            state(now, mastery=0.9, due_offset_days=-0.1, item_id="fresh-strong"),
            state(now, mastery=0.1, due_offset_days=-0.1, item_id="fresh-weak"),
            state(now, mastery=0.9, due_offset_days=-3, item_id="overdue"),
            state(now, mastery=0.0, due_offset_days=2, item_id="not-due"),
        ]
        queue = scheduler.select_items_to_review(states, limit=2, now=now)
        assert [s.item_id for s in queue] == ["overdue", "fresh-weak"]


class TestAnalytics:
    def test_retention_rate(self, scheduler, now):
        states = [state(now, mastery=m) for m in (0.6, 0.59, 0.9, 0.1)]
        assert scheduler.calculate_retention_rate(states) == pytest.approx(50.0)
        assert scheduler.calculate_retention_rate([]) == 0.0

    def test_study_schedule(self, scheduler, now):
        states = [
            state(now, due_offset_days=0.1),  # today
            state(now, due_offset_days=-2),  # overdue -> this week
            state(now, due_offset_days=5),  # this week
            state(now, due_offset_days=10),  # next week
            state(now, due_offset_days=20),  # beyond
        ]
        schedule = scheduler.generate_study_schedule(states, now)
        assert (schedule.today, schedule.this_week, schedule.next_week) == (1, 2, 1)


class TestIntervalCap:
    @pytest.mark.parametrize("cap", [0, 15, 60])
    def test_cap_outside_range_rejected(self, cap):
        with pytest.raises(ValueError):
            SpacedRepetitionScheduler(max_interval_days=cap)

    def test_settings_reject_cap_above_fourteen(self):
        from pydantic import ValidationError

        from config import Settings

        with pytest.raises(ValidationError):
            Settings(max_interval_days=60)

    def test_lower_cap_is_honoured(self, now):
        scheduler = SpacedRepetitionScheduler(max_interval_days=5)
        current = None
        for _ in range(8):
            current = scheduler.calculate_next_review(
                current, ReviewOutcome(quality=5), now=now, item_id="w-cat", learner_id="learner-1"
            )
        assert current.interval_days == 5
