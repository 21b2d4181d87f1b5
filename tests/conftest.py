"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from drawlearn.core.models import (  # noqa: E402
    AttemptRecord,
    ChallengeDefinition,
    ChallengeResult,
    DifficultyBand,
    Mechanic,
    Modality,
    ScoringPolicy,
    Stage,
    VocabularyItem,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (engine + in-memory stores)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """A fixed review time."""
    return datetime(2024, 6, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def make_attempt(now):
    """Factory for AttemptRecords; pass results most recent first."""

    def _make(
        result: str = "pass",
        item_id: str = "w-cat",
        challenge_id: str = "u-trace-ve",
        hints: int = 0,
        time_ms: float = 10000,
        stage: Stage | None = Stage.UNDERSTAND,
        minutes_ago: int = 0,
        learner_id: str = "learner-1",
    ) -> AttemptRecord:
        return AttemptRecord(
            item_id=item_id,
            challenge_id=challenge_id,
            result=ChallengeResult(result),
            time_taken_ms=time_ms,
            hints_used=hints,
            xp_earned=10,
            timestamp=now - timedelta(minutes=minutes_ago),
            stage=stage,
            learner_id=learner_id,
        )

    return _make


def make_challenge(
    challenge_id: str,
    stage: Stage,
    difficulty: DifficultyBand,
    modalities: set[Modality],
    xp: int = 10,
    badge: str | None = None,
    mechanic: Mechanic = Mechanic.MCQ_4,
) -> ChallengeDefinition:
    return ChallengeDefinition(
        id=challenge_id,
        stage=stage,
        modalities=frozenset(modalities),
        mechanic=mechanic,
        difficulty=difficulty,
        scoring=ScoringPolicy(xp=xp, badge=badge),
    )


@pytest.fixture
def sample_challenges():
    """A small challenge bank covering every stage."""
    return (
        make_challenge("u-draw", Stage.UNDERSTAND, DifficultyBand.VERY_EASY, {Modality.DRAWING}),
        make_challenge("u-listen", Stage.UNDERSTAND, DifficultyBand.VERY_EASY, {Modality.LISTENING}),
        make_challenge("u-read-easy", Stage.UNDERSTAND, DifficultyBand.EASY, {Modality.READING}),
        make_challenge("t-read", Stage.TRY, DifficultyBand.EASY, {Modality.READING}),
        make_challenge("t-write", Stage.TRY, DifficultyBand.MEDIUM, {Modality.WRITING, Modality.READING}),
        make_challenge("r-listen", Stage.REVIEW, DifficultyBand.MEDIUM, {Modality.LISTENING}),
        make_challenge("x-draw", Stage.RETRY, DifficultyBand.EASY, {Modality.DRAWING}),
        make_challenge(
            "c-create",
            Stage.CHALLENGE,
            DifficultyBand.HARD,
            {Modality.DRAWING, Modality.WRITING},
            xp=30,
            badge="Story Artist",
        ),
    )


@pytest.fixture
def sample_words():
    return (
        VocabularyItem(id="w-cat", english="cat", telugu="పిల్లి", difficulty=DifficultyBand.VERY_EASY),
        VocabularyItem(id="w-dog", english="dog", telugu="కుక్క", difficulty=DifficultyBand.VERY_EASY),
        VocabularyItem(id="w-sun", english="sun", telugu="సూర్యుడు", difficulty=DifficultyBand.EASY),
    )


@pytest.fixture
def challenge_factory():
    """Factory for ad-hoc ChallengeDefinitions."""
    return make_challenge
