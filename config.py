"""
Configuration settings for the drawlearn adaptive engine.

Uses Pydantic Settings for environment variable management with .env file support.
Every variable is prefixed with DRAWLEARN_ (e.g. DRAWLEARN_HISTORY_WINDOW=20).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DRAWLEARN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Adaptive selection
    # ========================================
    history_window: int = Field(
        default=10,
        ge=1,
        description="Number of recent attempts aggregated per word",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for the challenge draw (None for nondeterministic)",
    )

    # ========================================
    # Spaced repetition
    # ========================================
    expected_time_ms: int = Field(
        default=45000,
        gt=0,
        description="Baseline answer time; answers over twice this lose a quality point",
    )
    max_interval_days: int = Field(
        default=14,
        ge=1,
        le=14,
        description="Upper bound for review intervals (days)",
    )
    review_limit: int = Field(
        default=5,
        ge=0,
        description="Maximum words returned in a review queue",
    )
    mastery_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Mastery score at which a word counts as mastered",
    )

    # ========================================
    # Catalog
    # ========================================
    challenge_bank_path: str | None = Field(
        default=None,
        description="Challenge bank JSON (None for the packaged bank)",
    )
    words_path: str | None = Field(
        default=None,
        description="Word list JSON (None for the packaged list)",
    )

    # ========================================
    # Logging & Telemetry
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )
    telemetry_enabled: bool = Field(
        default=True,
        description="Send engine events to the logging telemetry sink",
    )

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
