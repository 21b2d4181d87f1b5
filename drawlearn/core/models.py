"""
Core Models - Shared domain records for the adaptive learning engine.

Catalog entries (VocabularyItem, ChallengeDefinition) are immutable and
loaded once. AttemptRecord is an append-only fact. PerformanceSnapshot is
derived on demand and never persisted. SpacedRepetitionState is owned by
the scheduling store and replaced (never mutated) on every review.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class Stage(str, Enum):
    """Pedagogical stage governing which kind of exercise is shown next."""

    UNDERSTAND = "understand"
    TRY = "try"
    REVIEW = "review"
    RETRY = "retry"
    CHALLENGE = "challenge"

    @classmethod
    def parse(cls, value: str | Stage | None) -> Stage | None:
        """Parse a stored stage value, returning None for unknown values."""
        if value is None or isinstance(value, Stage):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class DifficultyBand(str, Enum):
    """Difficulty band shared by vocabulary items and challenges."""

    VERY_EASY = "very_easy"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Modality(str, Enum):
    """Sensory/skill channel an exercise practices."""

    DRAWING = "drawing"
    LISTENING = "listening"
    READING = "reading"
    WRITING = "writing"
    SPEAKING = "speaking"


class Mechanic(str, Enum):
    """How a challenge is presented and validated."""

    DRAW_TRACE = "draw_trace"
    DRAW_FREE = "draw_free"
    DRAW_PLUS_CAPTION = "draw_plus_caption"
    MCQ_3 = "mcq_3"
    MCQ_4 = "mcq_4"
    FILL_BLANK = "fill_blank"
    MATCH_PAIRS = "match_pairs"
    LISTEN_CHOOSE = "listen_choose"
    SENTENCE_BUILD = "sentence_build"
    TELUGU_TO_ENGLISH = "telugu_to_english"
    ENGLISH_TO_TELUGU = "english_to_telugu"


class ChallengeResult(str, Enum):
    """Outcome reported by the presentation layer."""

    PASS = "pass"
    RETRY = "retry"
    SKIP = "skip"


class HintLevel(str, Enum):
    """Verbosity of the help shown alongside a challenge."""

    FULL = "full"  # translation + example sentence
    PARTIAL = "partial"  # translation only
    MINIMAL = "minimal"  # encouragement only


def utc_now() -> datetime:
    """Timezone-aware current time used as the default clock."""
    return datetime.now(UTC)


# =============================================================================
# Catalog entries
# =============================================================================


@dataclass(frozen=True)
class VocabularyItem:
    """A word in the vocabulary catalog."""

    id: str
    english: str
    telugu: str
    difficulty: DifficultyBand
    category: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class ScoringPolicy:
    """Rewards granted for completing a challenge."""

    xp: int
    stars: int = 1
    badge: str | None = None


@dataclass(frozen=True)
class ChallengeDefinition:
    """A static exercise template from the challenge bank."""

    id: str
    stage: Stage
    modalities: frozenset[Modality]
    mechanic: Mechanic
    difficulty: DifficultyBand
    scoring: ScoringPolicy
    prompt: str | None = None
    tts_required: bool = False
    bloom: str | None = None


# =============================================================================
# History and derived performance
# =============================================================================


@dataclass(frozen=True)
class AttemptRecord:
    """One completed exercise. Append-only."""

    item_id: str
    challenge_id: str
    result: ChallengeResult
    time_taken_ms: float
    hints_used: int
    xp_earned: int
    timestamp: datetime = field(default_factory=utc_now)
    stage: Stage | None = None
    learner_id: str | None = None

    @property
    def passed(self) -> bool:
        return self.result == ChallengeResult.PASS


@dataclass(frozen=True)
class PerformanceSnapshot:
    """Aggregate over the recent attempts for one vocabulary item."""

    item_id: str
    recent_attempts: tuple[AttemptRecord, ...] = ()
    success_streak: int = 0
    failure_count: int = 0
    avg_hints: float = 0.0
    avg_time: float = 0.0
    last_stage: Stage | None = None

    @property
    def last_attempt(self) -> AttemptRecord | None:
        return self.recent_attempts[0] if self.recent_attempts else None


@dataclass(frozen=True)
class PerformanceMetrics:
    """Summary metrics; pass_rate and confidence_index are percentages."""

    pass_rate: float = 0.0
    avg_time: float = 0.0
    avg_hints: float = 0.0
    confidence_index: float = 0.0
    success_streak: int = 0


# =============================================================================
# Spaced repetition
# =============================================================================


@dataclass(frozen=True)
class SpacedRepetitionState:
    """Long-term scheduling state for one (learner, item) pair."""

    item_id: str
    next_due: datetime
    interval_days: int = 1
    mastery_score: float = 0.0
    review_count: int = 0
    learner_id: str | None = None


@dataclass(frozen=True)
class ReviewOutcome:
    """Input to a scheduler update."""

    quality: int  # 0-5
    was_hint_used: bool = False
    time_spent_ms: float = 0.0
