"""
Configuration settings for the LOB quiz engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum level written by the CLI log sink",
    )
    log_format: str = Field(
        default="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
        description="Loguru format string for the CLI log sink",
    )

    # ========================================
    # LOB Content
    # ========================================
    quiz_lob_types: str = Field(
        default="ASSESSMENT,EXERCISE",
        description="Comma-separated LOB types whose content is quiz JSON",
    )
    quiz_content_glob: str = Field(
        default="*.json",
        description="File pattern scanned by `lobquiz validate DIR`",
    )

    def get_quiz_lob_types(self) -> list[str]:
        """Get the quiz-carrying LOB types as an upper-case list."""
        return [t.strip().upper() for t in self.quiz_lob_types.split(",") if t.strip()]

    def get_quiz_config(self) -> dict[str, any]:
        """Get quiz engine configuration as a dictionary."""
        return {
            "lob_types": self.get_quiz_lob_types(),
            "content_glob": self.quiz_content_glob,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
