"""
Tests for configuration module.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from kvcache.config import Settings, clear_settings_cache, get_settings
from kvcache.types import CachePolicy


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_settings_loads_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test that settings correctly loads from environment variables."""
        settings = get_settings()

        assert settings.CACHE_DB_PATH == Path(mock_env_vars["CACHE_DB_PATH"])
        assert settings.CACHE_NAMESPACE == "envspace"
        assert settings.CACHE_MAX_ENTRIES == 10
        assert settings.CACHE_MAX_SIZE == 4096
        assert settings.LOG_LEVEL == "DEBUG"

    def test_defaults(self) -> None:
        """Test defaults when nothing is configured."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.CACHE_NAMESPACE == "default"
        assert settings.CACHE_MAX_ENTRIES is None
        assert settings.CACHE_MAX_SIZE is None
        assert settings.LOG_FILE is None
        assert settings.LOG_LEVEL == "WARNING"
        assert settings.policy == CachePolicy()

    @pytest.mark.parametrize("name", ["CACHE_MAX_ENTRIES", "CACHE_MAX_SIZE"])
    def test_limits_must_be_positive(self, name: str) -> None:
        """Test that zero limits are rejected."""
        with patch.dict(os.environ, {name: "0"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_blank_namespace_rejected(self) -> None:
        """Test that a blank namespace is rejected."""
        with patch.dict(os.environ, {"CACHE_NAMESPACE": "   "}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

        assert "CACHE_NAMESPACE" in str(exc_info.value)

    def test_invalid_log_level_rejected(self) -> None:
        """Test that unknown log levels are rejected."""
        with patch.dict(os.environ, {"LOG_LEVEL": "VERBOSE"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestSettingsHelpers:
    """Tests for derived settings."""

    def test_policy_property(self, mock_env_vars: dict[str, str]) -> None:
        """Test the policy is built from the configured limits."""
        assert get_settings().policy == CachePolicy(max_entries=10, max_size=4096)

    def test_display(self, mock_env_vars: dict[str, str]) -> None:
        """Test display output lists every setting."""
        display = get_settings().display()

        assert display["CACHE_NAMESPACE"] == "envspace"
        assert display["CACHE_MAX_SIZE"] == 4096
        assert display["LOG_FILE"] is None

    def test_settings_are_cached(self, mock_env_vars: dict[str, str]) -> None:
        """Test get_settings returns the same instance until cleared."""
        first = get_settings()
        assert get_settings() is first

        clear_settings_cache()
        assert get_settings() is not first
