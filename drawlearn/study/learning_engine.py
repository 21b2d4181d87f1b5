"""
Learning Engine - one learning turn, end to end.

Flow per turn:
1. plan_turn: history -> PerformanceSnapshot -> (stage, difficulty) ->
   challenge + hint level
2. The presentation layer runs the exercise
3. record_outcome: quality -> scheduler -> compare-and-swap state upsert,
   then attempt log, XP, badges, telemetry

The adaptive components stay pure; this class is the only place that
talks to the history store, scheduling store, progress tracker and
telemetry sink.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from drawlearn.adaptive.challenge_selector import ChallengeSelector, RandomSource
from drawlearn.adaptive.difficulty import adjust_difficulty, get_hint_level
from drawlearn.adaptive.performance import DEFAULT_HISTORY_WINDOW, build_snapshot
from drawlearn.adaptive.stage_selector import select_next_stage
from drawlearn.core.errors import NoChallengePlannedError
from drawlearn.core.models import (
    AttemptRecord,
    ChallengeDefinition,
    ChallengeResult,
    DifficultyBand,
    HintLevel,
    PerformanceSnapshot,
    ReviewOutcome,
    SpacedRepetitionState,
    Stage,
    VocabularyItem,
    utc_now,
)
from drawlearn.study.catalog import Catalog
from drawlearn.study.progress import LearnerProgress, ProgressTracker, xp_for_result
from drawlearn.study.spaced_repetition import (
    DEFAULT_MASTERY_THRESHOLD,
    DEFAULT_REVIEW_LIMIT,
    SpacedRepetitionScheduler,
)
from drawlearn.study.stores import HistoryStore, SchedulingStore
from drawlearn.study.telemetry import (
    EventType,
    NullTelemetrySink,
    TelemetryEvent,
    TelemetrySink,
)


@dataclass(frozen=True)
class TurnPlan:
    """What the presentation layer should show next."""

    learner_id: str
    item_id: str
    stage: Stage
    difficulty: DifficultyBand
    challenge: ChallengeDefinition | None
    hint_level: HintLevel
    snapshot: PerformanceSnapshot

    @property
    def has_challenge(self) -> bool:
        return self.challenge is not None


@dataclass(frozen=True)
class TurnResult:
    """Everything recorded for a finished exercise."""

    attempt: AttemptRecord
    state: SpacedRepetitionState
    quality: int
    xp_earned: int
    badge_awarded: str | None = None


class LearningEngine:
    """
    Orchestrates planning and recording of learning turns.

    Scheduling updates for the same (learner, item) must arrive in review
    order; the scheduling store's compare-and-swap rejects a stale writer.
    """

    def __init__(
        self,
        catalog: Catalog,
        history: HistoryStore,
        scheduling: SchedulingStore,
        selector: ChallengeSelector | None = None,
        scheduler: SpacedRepetitionScheduler | None = None,
        telemetry: TelemetrySink | None = None,
        progress: ProgressTracker | None = None,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        review_limit: int = DEFAULT_REVIEW_LIMIT,
        mastery_threshold: float = DEFAULT_MASTERY_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.catalog = catalog
        self.history = history
        self.scheduling = scheduling
        self.selector = selector or ChallengeSelector(catalog.challenges)
        self.scheduler = scheduler or SpacedRepetitionScheduler()
        self.telemetry: TelemetrySink = telemetry or NullTelemetrySink()
        self.progress = progress or ProgressTracker()
        self.history_window = history_window
        self.review_limit = review_limit
        self.mastery_threshold = mastery_threshold
        self.clock = clock
        self._session_starts: dict[str, datetime] = {}

    @classmethod
    def build(
        cls,
        catalog: Catalog,
        history: HistoryStore,
        scheduling: SchedulingStore,
        seed: int | None = None,
        rng: RandomSource | None = None,
        **kwargs,
    ) -> LearningEngine:
        """Build an engine whose challenge draw uses ``rng`` or a seeded source."""
        source = rng if rng is not None else random.Random(seed)
        selector = ChallengeSelector(catalog.challenges, rng=source)
        return cls(catalog, history, scheduling, selector=selector, **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings=None,
        catalog: Catalog | None = None,
        history: HistoryStore | None = None,
        scheduling: SchedulingStore | None = None,
        telemetry: TelemetrySink | None = None,
        seed: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> LearningEngine:
        """
        Build an engine from application settings.

        Missing stores default to the in-memory implementations and a
        missing catalog is loaded from the configured (or packaged) files.
        An explicit ``seed`` overrides ``settings.random_seed``.
        """
        from config import get_settings
        from drawlearn.study.catalog import load_catalog
        from drawlearn.study.stores import InMemoryHistoryStore, InMemorySchedulingStore
        from drawlearn.study.telemetry import LoggingTelemetrySink

        settings = settings or get_settings()
        if telemetry is None and settings.telemetry_enabled:
            telemetry = LoggingTelemetrySink()

        return cls.build(
            catalog or load_catalog(settings.challenge_bank_path, settings.words_path),
            history or InMemoryHistoryStore(),
            scheduling or InMemorySchedulingStore(),
            seed=seed if seed is not None else settings.random_seed,
            scheduler=SpacedRepetitionScheduler(
                max_interval_days=settings.max_interval_days,
                expected_time_ms=settings.expected_time_ms,
            ),
            telemetry=telemetry,
            history_window=settings.history_window,
            review_limit=settings.review_limit,
            mastery_threshold=settings.mastery_threshold,
            clock=clock,
        )

    # =========================================================================
    # Sessions
    # =========================================================================

    def start_session(self, learner_id: str) -> None:
        now = self.clock()
        self._session_starts[learner_id] = now
        self._emit(EventType.SESSION_START, learner_id, timestamp=now)

    def end_session(self, learner_id: str) -> float | None:
        """
        Close the learner's session.

        Returns:
            Session duration in seconds, or None if no session was open
        """
        started = self._session_starts.pop(learner_id, None)
        if started is None:
            logger.warning(f"end_session for {learner_id} without a matching start")
            return None

        now = self.clock()
        duration = (now - started).total_seconds()
        self._emit(
            EventType.SESSION_END,
            learner_id,
            metadata={"duration_seconds": duration},
            timestamp=now,
        )
        return duration

    # =========================================================================
    # Planning
    # =========================================================================

    def plan_turn(self, learner_id: str, item_id: str) -> TurnPlan:
        """
        Decide stage, difficulty, challenge and hint level for one item.

        A plan with ``challenge=None`` means nothing in the catalog fits the
        chosen stage; the caller should ask the learner to come back later.
        """
        attempts = self.history.fetch_recent_attempts(learner_id, item_id, self.history_window)
        snapshot = build_snapshot(item_id, attempts, self.history_window)

        stage = select_next_stage(snapshot)
        difficulty = adjust_difficulty(snapshot)
        challenge = self.selector.select(stage, difficulty, snapshot.recent_attempts)
        hint_level = get_hint_level(snapshot)

        plan = TurnPlan(
            learner_id=learner_id,
            item_id=item_id,
            stage=stage,
            difficulty=difficulty,
            challenge=challenge,
            hint_level=hint_level,
            snapshot=snapshot,
        )

        if challenge is None:
            logger.info(f"No challenge for {learner_id}/{item_id} at stage {stage.value}")
        else:
            logger.info(
                f"Planned {challenge.id} for {learner_id}/{item_id} "
                f"({stage.value}, {difficulty.value}, hints={hint_level.value})"
            )
            self._emit(
                EventType.CHALLENGE_START,
                learner_id,
                item_id=item_id,
                challenge_id=challenge.id,
                metadata={"stage": stage.value, "difficulty": difficulty.value},
            )
        return plan

    def pick_next_item(
        self,
        learner_id: str,
        items: Sequence[VocabularyItem] | None = None,
        now: datetime | None = None,
    ) -> VocabularyItem | None:
        """
        Choose which word to practise next.

        Due words come first (highest review priority), then words the
        learner has never reviewed, in catalog order.
        """
        now = now or self.clock()
        items = list(items if items is not None else self.catalog.words)
        by_id = {item.id: item for item in items}

        states = [s for s in self.scheduling.list_states(learner_id) if s.item_id in by_id]
        due = self.scheduler.select_items_to_review(states, limit=1, now=now)
        if due:
            chosen = by_id[due[0].item_id]
        else:
            reviewed = {s.item_id for s in states}
            chosen = next((item for item in items if item.id not in reviewed), None)

        if chosen is not None:
            self._emit(EventType.WORD_SELECTED, learner_id, item_id=chosen.id)
        return chosen

    def review_queue(
        self,
        learner_id: str,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[SpacedRepetitionState]:
        return self.scheduler.select_items_to_review(
            self.scheduling.list_states(learner_id),
            limit=self.review_limit if limit is None else limit,
            now=now or self.clock(),
        )

    # =========================================================================
    # Recording
    # =========================================================================

    def record_outcome(
        self,
        plan: TurnPlan,
        result: ChallengeResult | str,
        hints_used: int,
        time_taken_ms: float,
        now: datetime | None = None,
    ) -> TurnResult:
        """
        Record a finished exercise and update long-term scheduling.

        Args:
            plan: The plan the learner just played
            result: pass / retry / skip
            hints_used: Number of hints shown
            time_taken_ms: Time taken in milliseconds
            now: Completion time (defaults to the engine clock)

        Returns:
            TurnResult with the stored attempt and the new scheduling state

        Raises:
            NoChallengePlannedError: If the plan had no challenge
            StaleStateError: If another writer updated the scheduling state first;
                nothing is recorded and the plan can be retried
        """
        challenge = plan.challenge
        if challenge is None:
            raise NoChallengePlannedError(
                f"Plan for {plan.learner_id}/{plan.item_id} has no challenge to record"
            )

        result = ChallengeResult(result)
        now = now or self.clock()
        quality = self.scheduler.result_to_quality(result, hints_used, time_taken_ms)
        xp = xp_for_result(challenge.scoring, result)

        previous = self.scheduling.get_state(plan.learner_id, plan.item_id)
        state = self.scheduler.calculate_next_review(
            previous,
            ReviewOutcome(
                quality=quality,
                was_hint_used=hints_used > 0,
                time_spent_ms=time_taken_ms,
            ),
            now=now,
            item_id=plan.item_id,
            learner_id=plan.learner_id,
        )
        self.scheduling.upsert_state(
            state,
            expected_review_count=previous.review_count if previous is not None else 0,
        )

        # Only turns whose scheduling update landed reach the history
        attempt = AttemptRecord(
            item_id=plan.item_id,
            challenge_id=challenge.id,
            result=result,
            time_taken_ms=time_taken_ms,
            hints_used=hints_used,
            xp_earned=xp,
            timestamp=now,
            stage=challenge.stage,
            learner_id=plan.learner_id,
        )
        self.history.append_attempt(attempt)

        progress = self.progress.get(plan.learner_id)
        progress.add_xp(xp)
        progress.challenges_completed += 1
        progress.refresh_mastery(
            self.scheduling.list_states(plan.learner_id), self.mastery_threshold
        )

        badge = None
        if result == ChallengeResult.PASS and challenge.scoring.badge:
            if progress.add_badge(challenge.scoring.badge):
                badge = challenge.scoring.badge
                self._emit(
                    EventType.BADGE_EARNED,
                    plan.learner_id,
                    item_id=plan.item_id,
                    challenge_id=challenge.id,
                    metadata={"badge": badge},
                )

        if hints_used > 0:
            self._emit(
                EventType.CHALLENGE_HINT_USED,
                plan.learner_id,
                item_id=plan.item_id,
                challenge_id=challenge.id,
                metadata={"hints_used": hints_used, "hint_level": plan.hint_level.value},
            )
        self._emit(
            EventType.CHALLENGE_END,
            plan.learner_id,
            item_id=plan.item_id,
            challenge_id=challenge.id,
            metadata={
                "result": result.value,
                "time_taken_ms": time_taken_ms,
                "hints_used": hints_used,
                "xp_earned": xp,
                "quality": quality,
            },
        )

        logger.info(
            f"{plan.learner_id}/{plan.item_id}: {result.value} on {challenge.id} "
            f"q={quality} xp={xp} -> interval {state.interval_days}d, "
            f"mastery {state.mastery_score:.2f}"
        )
        return TurnResult(
            attempt=attempt,
            state=state,
            quality=quality,
            xp_earned=xp,
            badge_awarded=badge,
        )

    def learner_progress(self, learner_id: str) -> LearnerProgress:
        return self.progress.get(learner_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _emit(
        self,
        event_type: EventType,
        learner_id: str,
        item_id: str | None = None,
        challenge_id: str | None = None,
        metadata: dict | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        self.telemetry.emit(
            TelemetryEvent(
                event_type=event_type,
                learner_id=learner_id,
                item_id=item_id,
                challenge_id=challenge_id,
                metadata=metadata or {},
                timestamp=timestamp or self.clock(),
            )
        )
