"""
Study Module.

Provides:
- Spaced repetition scheduling and review queues
- Challenge/word catalog loading
- History and scheduling store contracts (+ in-memory implementations)
- Learner progress (XP, badges)
- Telemetry sinks
- LearningEngine: per-turn orchestration
"""

from drawlearn.study.catalog import Catalog, load_catalog, load_challenges, load_words
from drawlearn.study.learning_engine import LearningEngine, TurnPlan, TurnResult
from drawlearn.study.progress import LearnerProgress, ProgressTracker, xp_for_result
from drawlearn.study.spaced_repetition import SpacedRepetitionScheduler, StudySchedule
from drawlearn.study.stores import (
    HistoryStore,
    InMemoryHistoryStore,
    InMemorySchedulingStore,
    SchedulingStore,
)
from drawlearn.study.telemetry import (
    EventType,
    LoggingTelemetrySink,
    NullTelemetrySink,
    RecordingTelemetrySink,
    TelemetryEvent,
    TelemetrySink,
)

__all__ = [
    "Catalog",
    "load_catalog",
    "load_challenges",
    "load_words",
    "LearningEngine",
    "TurnPlan",
    "TurnResult",
    "LearnerProgress",
    "ProgressTracker",
    "xp_for_result",
    "SpacedRepetitionScheduler",
    "StudySchedule",
    "HistoryStore",
    "SchedulingStore",
    "InMemoryHistoryStore",
    "InMemorySchedulingStore",
    "EventType",
    "TelemetryEvent",
    "TelemetrySink",
    "LoggingTelemetrySink",
    "NullTelemetrySink",
    "RecordingTelemetrySink",
]
