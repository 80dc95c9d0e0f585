"""
Base class for key-value backends.

The cache layers LRU eviction and namespacing over any store implementing
KVBackend. Backends hold plain string keys and string values; durability and
atomicity are whatever the concrete store offers. Errors raised by a backend
propagate to cache callers unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class KVBackend(ABC):
    """Abstract asynchronous string key-value store."""

    @abstractmethod
    async def get_all_keys(self) -> list[str]:
        """List every key in the store."""
        ...

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Get the value for key, or None if absent."""
        ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Delete key. Deleting an absent key is not an error."""
        ...

    @abstractmethod
    async def multi_get(self, keys: list[str]) -> list[tuple[str, str | None]]:
        """Get several keys at once.

        Returns:
            (key, value) pairs in the order of keys; value is None when absent.
        """
        ...

    @abstractmethod
    async def multi_remove(self, keys: list[str]) -> None:
        """Delete several keys at once."""
        ...
