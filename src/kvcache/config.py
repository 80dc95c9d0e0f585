"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files. The library
API takes its options as constructor arguments; these settings feed the
command-line interface and any application that wants env-driven wiring.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kvcache.types import CachePolicy


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Optional:
        CACHE_DB_PATH: SQLite file used by the CLI backend
        CACHE_NAMESPACE: Namespace for cache operations
        CACHE_MAX_ENTRIES: Maximum number of entries per namespace
        CACHE_MAX_SIZE: Maximum bytes per namespace, metadata included
        LOG_LEVEL: Logging level
        LOG_FILE: JSON Lines log file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    CACHE_DB_PATH: Path = Field(
        default=Path(".cache/kvcache.db"), description="SQLite database file"
    )
    CACHE_NAMESPACE: str = Field(default="default", description="Cache namespace")

    CACHE_MAX_ENTRIES: int | None = Field(
        default=None, ge=1, description="Maximum entries per namespace"
    )
    CACHE_MAX_SIZE: int | None = Field(
        default=None, ge=1, description="Maximum bytes per namespace"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON Lines log file")

    @field_validator("CACHE_NAMESPACE")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Reject blank namespaces."""
        if not v.strip():
            raise ValueError("CACHE_NAMESPACE must not be empty")
        return v

    @property
    def policy(self) -> CachePolicy:
        """Cache policy built from the configured limits."""
        return CachePolicy(
            max_entries=self.CACHE_MAX_ENTRIES,
            max_size=self.CACHE_MAX_SIZE,
        )

    def display(self) -> dict[str, str | int | None]:
        """Return settings for display."""
        return {
            "CACHE_DB_PATH": str(self.CACHE_DB_PATH),
            "CACHE_NAMESPACE": self.CACHE_NAMESPACE,
            "CACHE_MAX_ENTRIES": self.CACHE_MAX_ENTRIES,
            "CACHE_MAX_SIZE": self.CACHE_MAX_SIZE,
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
