"""
Adaptive Selection Engine.

Components:
- performance: Aggregates attempt history into a PerformanceSnapshot
- stage_selector: Stage progression state machine
- difficulty: Difficulty bands and hint verbosity policy
- challenge_selector: Coverage-weighted challenge selection
"""
from drawlearn.adaptive.challenge_selector import (
    ChallengeSelector,
    RandomSource,
    candidate_weight,
    weighted_choice,
)
from drawlearn.adaptive.difficulty import adjust_difficulty, get_hint_level
from drawlearn.adaptive.performance import (
    DEFAULT_HISTORY_WINDOW,
    build_snapshot,
    calculate_metrics,
    calculate_success_streak,
    is_ready_for_challenge,
)
from drawlearn.adaptive.stage_selector import STAGE_TRANSITIONS, select_next_stage

__all__ = [
    # Aggregation
    "DEFAULT_HISTORY_WINDOW",
    "build_snapshot",
    "calculate_metrics",
    "calculate_success_streak",
    "is_ready_for_challenge",
    # Stage / difficulty / hints
    "STAGE_TRANSITIONS",
    "select_next_stage",
    "adjust_difficulty",
    "get_hint_level",
    # Selection
    "ChallengeSelector",
    "RandomSource",
    "candidate_weight",
    "weighted_choice",
]
