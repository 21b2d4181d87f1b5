"""
Unit tests for the in-memory stores and learner progress.
"""

from datetime import timedelta

import pytest

from drawlearn.core.errors import StaleStateError
from drawlearn.core.models import ChallengeResult, ScoringPolicy, SpacedRepetitionState
from drawlearn.study.progress import LearnerProgress, ProgressTracker, xp_for_result
from drawlearn.study.stores import InMemoryHistoryStore, InMemorySchedulingStore


def sr_state(now, reviews=1, item_id="w-cat", learner_id="learner-1", mastery=0.2):
    return SpacedRepetitionState(
        item_id=item_id,
        next_due=now + timedelta(days=1),
        interval_days=1,
        mastery_score=mastery,
        review_count=reviews,
        learner_id=learner_id,
    )


class TestHistoryStore:
    def test_fetch_is_most_recent_first(self, make_attempt):
        store = InMemoryHistoryStore()
        first = make_attempt("retry", minutes_ago=10)
        second = make_attempt("pass", minutes_ago=5)
        store.append_attempt(first)
        store.append_attempt(second)

        assert store.fetch_recent_attempts("learner-1", "w-cat", 10) == [second, first]

    def test_fetch_filters_item_and_limits(self, make_attempt):
        store = InMemoryHistoryStore()
        for i in range(5):
            store.append_attempt(make_attempt(item_id="w-cat", minutes_ago=10 - i))
        store.append_attempt(make_attempt(item_id="w-dog"))

        assert len(store.fetch_recent_attempts("learner-1", "w-cat", 3)) == 3
        assert len(store.fetch_recent_attempts("learner-1", None, 100)) == 6
        assert store.fetch_recent_attempts("someone-else", "w-cat", 3) == []

    def test_requires_learner_id(self, make_attempt):
        with pytest.raises(ValueError):
            InMemoryHistoryStore().append_attempt(make_attempt(learner_id=None))


class TestSchedulingStore:
    def test_upsert_and_get(self, now):
        store = InMemorySchedulingStore()
        assert store.get_state("learner-1", "w-cat") is None

        store.upsert_state(sr_state(now, reviews=1), expected_review_count=0)
        assert store.get_state("learner-1", "w-cat").review_count == 1

    def test_compare_and_swap_rejects_stale_writer(self, now):
        store = InMemorySchedulingStore()
        store.upsert_state(sr_state(now, reviews=1), expected_review_count=0)
        store.upsert_state(sr_state(now, reviews=2), expected_review_count=1)

        with pytest.raises(StaleStateError) as exc_info:
            store.upsert_state(sr_state(now, reviews=2), expected_review_count=1)
        assert exc_info.value.actual == 2
        assert store.get_state("learner-1", "w-cat").review_count == 2

    def test_list_states_per_learner(self, now):
        store = InMemorySchedulingStore()
        store.upsert_state(sr_state(now, item_id="w-cat"))
        store.upsert_state(sr_state(now, item_id="w-dog"))
        store.upsert_state(sr_state(now, learner_id="learner-2"))

        assert {s.item_id for s in store.list_states("learner-1")} == {"w-cat", "w-dog"}


class TestProgress:
    def test_xp_for_result(self):
        scoring = ScoringPolicy(xp=15)
        assert xp_for_result(scoring, ChallengeResult.PASS) == 15
        assert xp_for_result(scoring, ChallengeResult.RETRY) == 7
        assert xp_for_result(scoring, ChallengeResult.SKIP) == 7

    def test_badges_unique_in_award_order(self):
        progress = LearnerProgress(learner_id="learner-1")
        assert progress.add_badge("Word Builder") is True
        assert progress.add_badge("Story Artist") is True
        assert progress.add_badge("Word Builder") is False
        assert progress.badges == ["Word Builder", "Story Artist"]

    def test_refresh_mastery(self, now):
        progress = LearnerProgress(learner_id="learner-1")
        progress.refresh_mastery([sr_state(now, mastery=0.7), sr_state(now, mastery=0.3)])
        assert progress.words_mastered == 1

    def test_tracker_reuses_progress(self):
        tracker = ProgressTracker()
        tracker.get("learner-1").add_xp(10)
        assert tracker.get("learner-1").total_xp == 10
