"""Exception hierarchy for the learning engine."""

from __future__ import annotations


class DrawLearnError(Exception):
    """Base class for engine errors."""


class CatalogError(DrawLearnError):
    """Raised when a catalog file is missing, malformed or inconsistent."""


class InvalidOutcomeError(DrawLearnError, ValueError):
    """Raised for outcomes outside their valid range (quality, hints, time)."""


class StaleStateError(DrawLearnError):
    """Raised when a scheduling upsert loses a compare-and-swap race."""

    def __init__(self, learner_id: str, item_id: str, expected: int, actual: int):
        self.learner_id = learner_id
        self.item_id = item_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Stale scheduling state for learner={learner_id} item={item_id}: "
            f"expected review_count={expected}, store has {actual}"
        )


class NoChallengePlannedError(DrawLearnError):
    """Raised when an outcome is recorded for a turn that had no challenge."""
