"""In-memory backend, mainly for tests and ephemeral caches."""

from __future__ import annotations

from kvcache.backends.base import KVBackend


class MemoryBackend(KVBackend):
    """Dict-backed store.

    Each instance owns its own mapping; caches share storage only when they
    are handed the same instance.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get_all_keys(self) -> list[str]:
        return list(self._data)

    async def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def multi_get(self, keys: list[str]) -> list[tuple[str, str | None]]:
        return [(key, self._data.get(key)) for key in keys]

    async def multi_remove(self, keys: list[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the stored mapping."""
        return dict(self._data)

    def __len__(self) -> int:
        return len(self._data)
