"""
Configuration settings for the review engine.

Uses Pydantic Settings for environment variable management with .env file support.
Every engine class also takes explicit constructor arguments, so nothing below is
read implicitly by the scheduling or evaluation code.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REVIEW_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    db_path: Path = Field(
        default=Path.home() / ".review_engine" / "state.db",
        description="SQLite database holding one review record per item",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum level written to stderr by the CLI",
    )

    # ========================================
    # Study Sessions
    # ========================================
    default_session_minutes: float = Field(
        default=15.0,
        description="Time budget used when planning a session",
    )
    default_session_mode: Literal["review", "new_words", "mixed"] = Field(
        default="mixed",
        description="Session type used when none is given",
    )

    # ========================================
    # Pronunciation -> SM-2 Quality Policy
    # ========================================
    quality_excellent: int = Field(default=5, ge=0, le=5)
    quality_good: int = Field(default=4, ge=0, le=5)
    quality_fair: int = Field(default=3, ge=0, le=5)
    quality_poor: int = Field(default=1, ge=0, le=5)
    pass_threshold: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Minimum pronunciation accuracy (0-100) counted as a correct answer",
    )
    default_language: str = Field(
        default="zh-CN",
        description="Language tag assumed by the evaluator",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
