"""
Core Module - Shared domain models and errors.

All engine packages (adaptive, study, cli) import their records from here
rather than redefining them.
"""

from drawlearn.core.errors import (
    CatalogError,
    DrawLearnError,
    InvalidOutcomeError,
    NoChallengePlannedError,
    StaleStateError,
)
from drawlearn.core.models import (
    AttemptRecord,
    ChallengeDefinition,
    ChallengeResult,
    DifficultyBand,
    HintLevel,
    Mechanic,
    Modality,
    PerformanceMetrics,
    PerformanceSnapshot,
    ReviewOutcome,
    ScoringPolicy,
    SpacedRepetitionState,
    Stage,
    VocabularyItem,
    utc_now,
)

__all__ = [
    # Enums
    "Stage",
    "DifficultyBand",
    "Modality",
    "Mechanic",
    "ChallengeResult",
    "HintLevel",
    # Records
    "VocabularyItem",
    "ScoringPolicy",
    "ChallengeDefinition",
    "AttemptRecord",
    "PerformanceSnapshot",
    "PerformanceMetrics",
    "SpacedRepetitionState",
    "ReviewOutcome",
    "utc_now",
    # Errors
    "DrawLearnError",
    "CatalogError",
    "InvalidOutcomeError",
    "StaleStateError",
    "NoChallengePlannedError",
]
