"""
Pytest configuration and fixtures for kvcache tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Callable, Generator
from unittest.mock import patch

import pytest

from kvcache.backends.memory import MemoryBackend
from kvcache.backends.sqlite import SQLiteBackend
from kvcache.config import clear_settings_cache
from kvcache.utils.sizing import byte_length

# Mixed ASCII, CJK, control characters, emoji, and an empty key.
TEST_ENTRIES: list[tuple[str, str]] = [
    ("12 normal123", "12 321Launch"),
    ("51 渣打銀行提供一系列迎合你生活需要", "51 一系列迎合你生活需要渣打銀行提a"),
    ("27 symbols !@#$%^&*()_\t\"'<>", "27 testing !@#$%^&*()_\t\"'<>"),
    ("", "a"),
    (
        "140 bytes - 😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀aa",
        "116 bytes - 😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀aa",
    ),
]

LARGE_ENTRY: tuple[str, str] = (
    "116 bytes - 😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀😀aa",
    "91 bytes - 😀😀😀😀😀aa😀😀😀😀😀😀😀😀",
)


def stored_bytes(backend: MemoryBackend, namespace: str) -> int:
    """Entry keys and values stored under a namespace, plus its metadata value."""
    prefix = f"{namespace}:"
    reserved = f"{namespace}:_metadata"
    return sum(
        byte_length(v) if k == reserved else byte_length(k) + byte_length(v)
        for k, v in backend.snapshot().items()
        if k.startswith(prefix)
    )


@pytest.fixture
def backend_bytes() -> Callable[[MemoryBackend, str], int]:
    """Provide a function measuring a namespace's bytes in a MemoryBackend."""
    return stored_bytes


@pytest.fixture
def entries() -> list[tuple[str, str]]:
    """Provide varied (key, value) pairs."""
    return list(TEST_ENTRIES)


@pytest.fixture
def large_entry() -> tuple[str, str]:
    """Provide an entry too large for a 128-byte cache."""
    return LARGE_ENTRY


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def memory_backend() -> MemoryBackend:
    """Provide an empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
async def sqlite_backend(temp_dir: Path) -> AsyncGenerator[SQLiteBackend, None]:
    """Provide an initialized SQLite backend in a temp directory."""
    backend = SQLiteBackend(temp_dir / "cache" / "kv.db")
    await backend.init()
    yield backend
    await backend.close()


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "CACHE_DB_PATH": str(temp_dir / "env.db"),
        "CACHE_NAMESPACE": "envspace",
        "CACHE_MAX_ENTRIES": "10",
        "CACHE_MAX_SIZE": "4096",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
