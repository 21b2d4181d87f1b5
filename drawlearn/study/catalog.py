"""
Catalog Loader.

Loads the static challenge bank and word list from JSON, validates each
entry with pydantic, and converts them to the immutable core dataclasses.

File format (challenge bank):

    [{"id": "u-trace-01", "stage": "understand",
      "framework": {"bloom": "remember"},
      "modality": ["drawing", "reading"], "mechanic": "draw_trace",
      "difficulty_band": "very_easy",
      "scoring": {"xp": 10, "stars": 1, "badge": null},
      "tts_required": false, "prompt": "Trace the word"}]
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from drawlearn.core.errors import CatalogError
from drawlearn.core.models import (
    ChallengeDefinition,
    DifficultyBand,
    Mechanic,
    Modality,
    ScoringPolicy,
    Stage,
    VocabularyItem,
)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_CHALLENGE_BANK = DATA_DIR / "challenge_bank.json"
DEFAULT_WORDS = DATA_DIR / "words.json"


# ========================================
# File schemas
# ========================================


class FrameworkEntry(BaseModel):
    bloom: str | None = None
    nation: str | None = None


class ScoringEntry(BaseModel):
    xp: int = Field(ge=0)
    stars: int = Field(default=1, ge=0)
    badge: str | None = None


class ChallengeEntry(BaseModel):
    """One challenge as stored in challenge_bank.json."""

    id: str = Field(min_length=1)
    stage: Stage
    framework: FrameworkEntry = Field(default_factory=FrameworkEntry)
    modality: list[Modality] = Field(min_length=1)
    mechanic: Mechanic
    difficulty_band: DifficultyBand
    scoring: ScoringEntry
    tts_required: bool = False
    prompt: str | None = None

    def to_definition(self) -> ChallengeDefinition:
        return ChallengeDefinition(
            id=self.id,
            stage=self.stage,
            modalities=frozenset(self.modality),
            mechanic=self.mechanic,
            difficulty=self.difficulty_band,
            scoring=ScoringPolicy(
                xp=self.scoring.xp,
                stars=self.scoring.stars,
                badge=self.scoring.badge,
            ),
            prompt=self.prompt,
            tts_required=self.tts_required,
            bloom=self.framework.bloom,
        )


class WordEntry(BaseModel):
    """One vocabulary item as stored in words.json."""

    id: str = Field(min_length=1)
    english: str
    telugu: str
    difficulty: DifficultyBand
    category: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")

    model_config = {"populate_by_name": True}

    def to_item(self) -> VocabularyItem:
        return VocabularyItem(
            id=self.id,
            english=self.english,
            telugu=self.telugu,
            difficulty=self.difficulty,
            category=self.category,
            image_url=self.image_url,
        )


# ========================================
# Catalog
# ========================================


@dataclass(frozen=True)
class Catalog:
    """Read-only view over the loaded challenges and words."""

    challenges: tuple[ChallengeDefinition, ...]
    words: tuple[VocabularyItem, ...] = ()
    _challenge_index: dict[str, ChallengeDefinition] = field(
        default_factory=dict, repr=False, compare=False
    )
    _word_index: dict[str, VocabularyItem] = field(
        default_factory=dict, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self._challenge_index.update({c.id: c for c in self.challenges})
        self._word_index.update({w.id: w for w in self.words})

    def challenge(self, challenge_id: str) -> ChallengeDefinition | None:
        return self._challenge_index.get(challenge_id)

    def word(self, word_id: str) -> VocabularyItem | None:
        return self._word_index.get(word_id)


def _read_json_list(path: Path) -> list:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise CatalogError(f"{path} must contain a JSON list, got {type(data).__name__}")
    return data


def _check_unique(ids: list[str], path: Path) -> None:
    seen: set[str] = set()
    for entry_id in ids:
        if entry_id in seen:
            raise CatalogError(f"Duplicate id {entry_id!r} in {path}")
        seen.add(entry_id)


def load_challenges(path: Path | str = DEFAULT_CHALLENGE_BANK) -> tuple[ChallengeDefinition, ...]:
    """
    Load and validate a challenge bank file.

    Raises:
        CatalogError: If the file is missing, malformed or has duplicate ids
    """
    path = Path(path)
    raw = _read_json_list(path)
    try:
        entries = [ChallengeEntry.model_validate(item) for item in raw]
    except ValidationError as e:
        raise CatalogError(f"Invalid challenge entry in {path}: {e}") from e

    _check_unique([e.id for e in entries], path)
    logger.debug(f"Loaded {len(entries)} challenges from {path.name}")
    return tuple(e.to_definition() for e in entries)


def load_words(path: Path | str = DEFAULT_WORDS) -> tuple[VocabularyItem, ...]:
    """
    Load and validate a word list file.

    Raises:
        CatalogError: If the file is missing, malformed or has duplicate ids
    """
    path = Path(path)
    raw = _read_json_list(path)
    try:
        entries = [WordEntry.model_validate(item) for item in raw]
    except ValidationError as e:
        raise CatalogError(f"Invalid word entry in {path}: {e}") from e

    _check_unique([e.id for e in entries], path)
    logger.debug(f"Loaded {len(entries)} words from {path.name}")
    return tuple(e.to_item() for e in entries)


def load_catalog(
    challenge_bank_path: Path | str | None = None,
    words_path: Path | str | None = None,
) -> Catalog:
    """
    Load both catalogs, falling back to the packaged data files.

    Raises:
        CatalogError: If either file is invalid or the word list is empty
    """
    words_path = words_path or DEFAULT_WORDS
    words = load_words(words_path)
    if not words:
        raise CatalogError(f"Word list {words_path} is empty")
    return Catalog(
        challenges=load_challenges(challenge_bank_path or DEFAULT_CHALLENGE_BANK),
        words=words,
    )
