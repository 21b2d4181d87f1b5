"""
Challenge Selector.

Picks a concrete challenge for a target (stage, difficulty):

1. Filter the catalog to exact (stage, difficulty) matches
2. Relax to stage-only matches if that is empty
3. Return None if nothing matches the stage ("no challenge available")
4. Otherwise draw with cumulative-weight roulette, weighting candidates by
   how many modalities they add beyond the learner's recent practice

Every candidate keeps a weight of at least 1, so coverage only nudges the
draw and never excludes a valid challenge.

The draw is the only nondeterministic step. It reads from an injectable
random source so selections can be reproduced with a fixed seed.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from typing import Protocol

from loguru import logger

from drawlearn.core.models import (
    AttemptRecord,
    ChallengeDefinition,
    DifficultyBand,
    Modality,
    Stage,
)


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1); ``random.Random`` fits."""

    def random(self) -> float: ...


def candidate_weight(
    challenge: ChallengeDefinition,
    used_modalities: frozenset[Modality] | set[Modality],
) -> int:
    """
    Selection weight for one candidate.

    Returns (number of unused modalities + 1) when the challenge adds at
    least one new modality, otherwise 1.
    """
    unused = sum(1 for m in challenge.modalities if m not in used_modalities)
    return unused + 1 if unused > 0 else 1


def weighted_choice(
    candidates: Sequence[ChallengeDefinition],
    weights: Sequence[int],
    rng: RandomSource,
) -> ChallengeDefinition:
    """
    Cumulative-weight roulette over a non-empty candidate list.

    Returns the first candidate whose cumulative weight exceeds the draw,
    falling back to the last candidate if rounding leaves the draw unspent.
    """
    total = sum(weights)
    draw = rng.random() * total

    for challenge, weight in zip(candidates, weights):
        draw -= weight
        if draw < 0:
            return challenge

    return candidates[-1]


class ChallengeSelector:
    """
    Select challenges from a static catalog.

    The catalog is indexed once at construction and treated as read-only.
    """

    def __init__(
        self,
        challenges: Iterable[ChallengeDefinition],
        rng: RandomSource | None = None,
    ):
        """
        Initialize selector.

        Args:
            challenges: Challenge bank, in catalog order
            rng: Random source for the weighted draw (defaults to an
                unseeded ``random.Random``)
        """
        self.challenges: tuple[ChallengeDefinition, ...] = tuple(challenges)
        self._by_id = {c.id: c for c in self.challenges}
        self.rng: RandomSource = rng or random.Random()

    @classmethod
    def seeded(cls, challenges: Iterable[ChallengeDefinition], seed: int) -> ChallengeSelector:
        """Build a selector with a deterministic random source."""
        return cls(challenges, rng=random.Random(seed))

    def candidates_for(
        self, stage: Stage, difficulty: DifficultyBand
    ) -> list[ChallengeDefinition]:
        """Exact (stage, difficulty) matches, else stage-only matches."""
        exact = [
            c for c in self.challenges if c.stage == stage and c.difficulty == difficulty
        ]
        if exact:
            return exact

        relaxed = [c for c in self.challenges if c.stage == stage]
        if relaxed:
            logger.debug(
                f"No {stage.value}/{difficulty.value} challenges; "
                f"relaxed to {len(relaxed)} stage-only candidates"
            )
        return relaxed

    def used_modalities(self, recent_attempts: Iterable[AttemptRecord]) -> frozenset[Modality]:
        """
        Modalities already practiced in the given attempts.

        Attempts that reference a challenge missing from the catalog
        contribute nothing.
        """
        used: set[Modality] = set()
        for attempt in recent_attempts:
            challenge = self._by_id.get(attempt.challenge_id)
            if challenge is None:
                logger.warning(
                    f"Attempt references unknown challenge {attempt.challenge_id!r}; "
                    "ignoring for modality coverage"
                )
                continue
            used.update(challenge.modalities)
        return frozenset(used)

    def select(
        self,
        stage: Stage,
        difficulty: DifficultyBand,
        recent_attempts: Sequence[AttemptRecord] = (),
    ) -> ChallengeDefinition | None:
        """
        Select the next challenge.

        Args:
            stage: Target stage
            difficulty: Target difficulty band
            recent_attempts: Learner's recent attempts, most recent first

        Returns:
            ChallengeDefinition, or None when the catalog has nothing for
            the stage
        """
        candidates = self.candidates_for(stage, difficulty)
        if not candidates:
            logger.warning(f"No challenge available for stage {stage.value}")
            return None

        used = self.used_modalities(recent_attempts)
        weights = [candidate_weight(c, used) for c in candidates]
        chosen = weighted_choice(candidates, weights, self.rng)

        logger.debug(
            f"Selected {chosen.id} from {len(candidates)} candidates "
            f"(weights={weights}, used={sorted(m.value for m in used)})"
        )
        return chosen
