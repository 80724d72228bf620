"""
Configuration settings for coursetree.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with COURSETREE_ (e.g. COURSETREE_VALIDATION_MODE=fail_fast).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COURSETREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Content
    # ========================================
    content_root: Path = Field(
        default=Path("content/courses"),
        description="Directory holding one sub-directory per course",
    )
    lesson_extensions: list[str] = Field(
        default_factory=lambda: [".md"],
        description="File suffixes treated as lesson documents",
    )
    ignored_files: list[str] = Field(
        default_factory=lambda: ["README.md"],
        description="File names never treated as lessons",
    )

    # ========================================
    # Validation
    # ========================================
    validation_mode: Literal["fail_fast", "collect_all"] = Field(
        default="collect_all",
        description="Stop at the first violation per module, or report all of them",
    )
    strict_front_matter: bool = Field(
        default=False,
        description="Report front-matter keys other than title, order, estimatedMinutes",
    )
    allowed_extra_keys: list[str] = Field(
        default_factory=list,
        description="Extra front-matter keys tolerated in strict mode",
    )

    # ========================================
    # Output
    # ========================================
    json_indent: int | None = Field(
        default=2,
        description="Indentation of the serialized course tree (None for compact)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    @field_validator("lesson_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if ext and not ext.startswith("."):
                ext = f".{ext}"
            if ext:
                normalized.append(ext)
        return normalized

    @property
    def collect_all(self) -> bool:
        return self.validation_mode == "collect_all"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
