"""
Learner Progress.

XP and badge bookkeeping for a learner. Badges are unique and kept in the
order they were first earned.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from drawlearn.core.models import ChallengeResult, ScoringPolicy, SpacedRepetitionState
from drawlearn.study.spaced_repetition import DEFAULT_MASTERY_THRESHOLD


def xp_for_result(scoring: ScoringPolicy, result: ChallengeResult) -> int:
    """Full XP on a pass, half (rounded down) otherwise."""
    return scoring.xp if result == ChallengeResult.PASS else scoring.xp // 2


@dataclass
class LearnerProgress:
    learner_id: str
    total_xp: int = 0
    badges: list[str] = field(default_factory=list)
    challenges_completed: int = 0
    words_mastered: int = 0

    def add_xp(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"XP must be non-negative, got {amount}")
        self.total_xp += amount

    def add_badge(self, badge: str) -> bool:
        """Record a badge; returns False if it was already held."""
        if badge in self.badges:
            return False
        self.badges.append(badge)
        return True

    def refresh_mastery(
        self,
        states: Iterable[SpacedRepetitionState],
        threshold: float = DEFAULT_MASTERY_THRESHOLD,
    ) -> None:
        self.words_mastered = sum(1 for s in states if s.mastery_score >= threshold)


class ProgressTracker:
    """In-process registry of LearnerProgress, one per learner."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._progress: dict[str, LearnerProgress] = {}

    def get(self, learner_id: str) -> LearnerProgress:
        with self._lock:
            if learner_id not in self._progress:
                self._progress[learner_id] = LearnerProgress(learner_id=learner_id)
            return self._progress[learner_id]
