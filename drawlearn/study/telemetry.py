"""
Telemetry Sink.

Informational events derived from engine decisions. Nothing in the engine
depends on a sink succeeding; shipping events anywhere durable is the job
of an external collaborator implementing TelemetrySink.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from loguru import logger

from drawlearn.core.models import utc_now


class EventType(str, Enum):
    CHALLENGE_START = "challenge_start"
    CHALLENGE_END = "challenge_end"
    CHALLENGE_HINT_USED = "challenge_hint_used"
    BADGE_EARNED = "badge_earned"
    WORD_SELECTED = "word_selected"
    SESSION_START = "session_start"
    SESSION_END = "session_end"


@dataclass(frozen=True)
class TelemetryEvent:
    event_type: EventType
    learner_id: str
    item_id: str | None = None
    challenge_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)


class TelemetrySink(Protocol):
    def emit(self, event: TelemetryEvent) -> None: ...


class NullTelemetrySink:
    """Discards every event."""

    def emit(self, event: TelemetryEvent) -> None:
        return None


class RecordingTelemetrySink:
    """Keeps events in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[TelemetryEvent] = []

    def emit(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: EventType) -> list[TelemetryEvent]:
        return [e for e in self.events if e.event_type == event_type]


class LoggingTelemetrySink:
    """Writes events to the loguru logger."""

    def __init__(self, level: str = "INFO"):
        self.level = level

    def emit(self, event: TelemetryEvent) -> None:
        logger.bind(telemetry=True).log(
            self.level,
            f"[telemetry] {event.event_type.value} learner={event.learner_id} "
            f"item={event.item_id} challenge={event.challenge_id} {event.metadata}",
        )
