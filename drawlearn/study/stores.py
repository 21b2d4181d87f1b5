"""
History and Scheduling Stores.

The engine reads and writes learner data only through these two
protocols. Durable implementations live outside this package; the
in-memory versions here back the CLI and the test-suite.

Scheduling updates for one (learner, item) pair must be applied in review
order. ``upsert_state`` supports a compare-and-swap on ``review_count`` so
a writer that read a stale state fails instead of overwriting a newer one.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol

from loguru import logger

from drawlearn.core.errors import StaleStateError
from drawlearn.core.models import AttemptRecord, SpacedRepetitionState


class HistoryStore(Protocol):
    """Append-only attempt log."""

    def fetch_recent_attempts(
        self, learner_id: str, item_id: str | None, limit: int
    ) -> list[AttemptRecord]:
        """Most recent attempts first; ``item_id=None`` means all items."""
        ...

    def append_attempt(self, record: AttemptRecord) -> None: ...


class SchedulingStore(Protocol):
    """Spaced-repetition state keyed by (learner, item)."""

    def get_state(self, learner_id: str, item_id: str) -> SpacedRepetitionState | None: ...

    def upsert_state(
        self,
        state: SpacedRepetitionState,
        expected_review_count: int | None = None,
    ) -> None: ...

    def list_states(self, learner_id: str) -> list[SpacedRepetitionState]: ...


class InMemoryHistoryStore:
    """Thread-safe in-memory attempt log."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._attempts: dict[str, list[AttemptRecord]] = defaultdict(list)

    def fetch_recent_attempts(
        self, learner_id: str, item_id: str | None, limit: int
    ) -> list[AttemptRecord]:
        with self._lock:
            log = self._attempts.get(learner_id, [])
            matching = [a for a in reversed(log) if item_id is None or a.item_id == item_id]
        return matching[: max(limit, 0)]

    def append_attempt(self, record: AttemptRecord) -> None:
        if record.learner_id is None:
            raise ValueError("AttemptRecord.learner_id is required for storage")
        with self._lock:
            self._attempts[record.learner_id].append(record)

    def count(self, learner_id: str) -> int:
        with self._lock:
            return len(self._attempts.get(learner_id, []))


class InMemorySchedulingStore:
    """Thread-safe in-memory scheduling state with compare-and-swap upserts."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: dict[tuple[str, str], SpacedRepetitionState] = {}

    def get_state(self, learner_id: str, item_id: str) -> SpacedRepetitionState | None:
        with self._lock:
            return self._states.get((learner_id, item_id))

    def upsert_state(
        self,
        state: SpacedRepetitionState,
        expected_review_count: int | None = None,
    ) -> None:
        """
        Insert or replace a state.

        Args:
            state: New state (must carry learner_id)
            expected_review_count: If given, the stored review_count the
                caller based its update on (0 when no state existed)

        Raises:
            StaleStateError: If the stored review_count differs
        """
        if state.learner_id is None:
            raise ValueError("SpacedRepetitionState.learner_id is required for storage")

        key = (state.learner_id, state.item_id)
        with self._lock:
            current = self._states.get(key)
            if expected_review_count is not None:
                actual = current.review_count if current is not None else 0
                if actual != expected_review_count:
                    logger.warning(
                        f"Rejected stale upsert for {key}: "
                        f"expected {expected_review_count}, found {actual}"
                    )
                    raise StaleStateError(
                        state.learner_id, state.item_id, expected_review_count, actual
                    )
            self._states[key] = state

    def list_states(self, learner_id: str) -> list[SpacedRepetitionState]:
        with self._lock:
            return [s for (lid, _), s in self._states.items() if lid == learner_id]
