"""
Namespaced LRU cache over a key-value backend.

Cache adds two things to a plain backend:
- a namespace, so several caches can share one backend
- least-recently-used eviction bounded by entry count and/or bytes

Every operation re-reads the namespace's LRU record from the backend and
writes it back at most once. Nothing about the cache's state is kept in
process memory between calls, and there is no locking: concurrent writers on
the same namespace race on the record and the last save wins. Callers that
need writer isolation must serialize access per namespace themselves.

A failure between saving the record and writing or deleting a value leaves
the two out of step. A value the record does not track is unreachable until
overwritten or removed; a tracked key with no value reads as missing and is
dropped on its next removal.
"""

from __future__ import annotations

from kvcache import keys as keycodec
from kvcache.backends.base import KVBackend
from kvcache.eviction import enforce, fits
from kvcache.exceptions import ConfigurationError, IllegalKeyError
from kvcache.logging import get_logger
from kvcache.metadata import LRURecord, MetadataStore
from kvcache.types import CachePolicy, KeyValuePair
from kvcache.utils.sizing import byte_length

logger = get_logger(__name__)


class Cache:
    """LRU cache scoped to one namespace of a shared backend.

    Example:
        cache = Cache(MemoryBackend(), "images", CachePolicy(max_size=4096))
        await cache.set_item("logo", data)
        value = await cache.get_item("logo")
    """

    def __init__(
        self,
        backend: KVBackend,
        namespace: str,
        policy: CachePolicy | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            backend: Store holding values and metadata.
            namespace: Non-empty string scoping every key of this cache.
            policy: Capacity limits. None means unbounded.

        Raises:
            ConfigurationError: If namespace is empty.
        """
        if not isinstance(namespace, str) or not namespace:
            raise ConfigurationError(
                "namespace must be a non-empty string",
                context={"namespace": namespace},
            )
        self.backend = backend
        self.namespace = namespace
        self.policy = policy or CachePolicy()
        self._metadata = MetadataStore(backend, namespace)

    def __repr__(self) -> str:
        return f"Cache(namespace={self.namespace!r}, policy={self.policy!r})"

    def _compose(self, key: str) -> str:
        return keycodec.compose(self.namespace, key)

    def _is_reserved(self, key: str) -> bool:
        return keycodec.is_reserved(self.namespace, key)

    def entry_size(self, key: str, value: str) -> int:
        """Bytes an entry occupies in the backend: composite key plus value."""
        return byte_length(self._compose(key)) + byte_length(value)

    async def set_item(self, key: str, value: str) -> None:
        """Store value under key, evicting older entries as needed.

        An entry larger than max_size on its own is silently not stored.

        Raises:
            IllegalKeyError: If key is the reserved metadata key.
        """
        if self._is_reserved(key):
            raise IllegalKeyError(
                "Key is reserved for cache metadata",
                context={"namespace": self.namespace, "key": key},
            )

        size = self.entry_size(key, value)
        if not fits(size, self.policy):
            logger.debug(
                "Entry larger than max_size, not cached",
                namespace=self.namespace,
                key=key,
                size=size,
                max_size=self.policy.max_size,
            )
            return

        record = await self._metadata.load()
        record.insert(key, size)
        evicted = self._evict(record)
        await self._metadata.save(record)

        if evicted:
            await self.backend.multi_remove([self._compose(k) for k in evicted])
        if key not in evicted:
            await self.backend.set_item(self._compose(key), value)

    async def get_item(self, key: str) -> str | None:
        """Read key and mark it most recently used.

        Returns:
            The value, or None if not cached.
        """
        value = await self.peek(key)
        if value is None:
            return None

        record = await self._metadata.load()
        if record.touch(key):
            await self._metadata.save(record)
        return value

    async def peek(self, key: str) -> str | None:
        """Read key without changing its recency."""
        if self._is_reserved(key):
            return None
        return await self.backend.get_item(self._compose(key))

    async def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key does nothing."""
        if self._is_reserved(key):
            return

        record = await self._metadata.load()
        if record.discard(key):
            await self._metadata.save(record)
        await self.backend.remove_item(self._compose(key))

    async def multi_get(self, keys: list[str]) -> list[KeyValuePair]:
        """Read several keys, marking the tracked ones most recently used.

        Returns:
            (key, value) pairs in the order of keys; value is None when the
            key is not cached.
        """
        wanted = [k for k in keys if not self._is_reserved(k)]

        record = await self._metadata.load()
        changed = False
        for key in wanted:
            changed = record.touch(key) or changed
        if changed:
            await self._metadata.save(record)

        results = await self.backend.multi_get([self._compose(k) for k in wanted])
        found = {
            keycodec.decompose(self.namespace, composite): value
            for composite, value in results
        }
        return [(key, found.get(key)) for key in keys]

    async def multi_remove(self, keys: list[str]) -> None:
        """Remove several keys."""
        await self._remove_many(await self._metadata.load(), keys)

    async def get_all_keys(self) -> list[str]:
        """List the logical keys stored in this namespace."""
        prefix = keycodec.namespace_prefix(self.namespace)
        reserved = keycodec.metadata_key(self.namespace)
        return [
            keycodec.decompose(self.namespace, k)
            for k in await self.backend.get_all_keys()
            if k.startswith(prefix) and k != reserved
        ]

    async def get_all(self) -> list[KeyValuePair]:
        """Read every entry in this namespace."""
        return await self.multi_get(await self.get_all_keys())

    async def clear_all(self) -> None:
        """Remove every entry in this namespace.

        Keys still tracked by the record but missing from the backend are
        dropped too. The emptied record is always written, so afterwards
        the namespace holds exactly the empty metadata entry.
        """
        stored = await self.get_all_keys()
        record = await self._metadata.load()
        stored_set = set(stored)
        stale = [k for k in record if k not in stored_set]
        await self._remove_many(record, stored + stale, always_save=True)
        logger.debug("Cleared namespace", namespace=self.namespace, entries=len(stored))

    async def get_size(self) -> int:
        """Content sizes plus the byte length of the stored LRU record."""
        record = await self._metadata.load()
        return record.footprint

    async def _remove_many(
        self, record: LRURecord, keys: list[str], always_save: bool = False
    ) -> None:
        wanted = [k for k in keys if not self._is_reserved(k)]

        changed = always_save
        for key in wanted:
            changed = record.discard(key) or changed
        if changed:
            await self._metadata.save(record)

        if wanted:
            await self.backend.multi_remove([self._compose(k) for k in wanted])

    def _evict(self, record: LRURecord) -> list[str]:
        if not self.policy.is_bounded:
            return []

        evicted = enforce(record, self.policy)
        if evicted:
            logger.debug(
                "Evicted entries",
                namespace=self.namespace,
                keys=evicted,
                footprint=record.footprint,
            )
        if self.policy.max_size is not None and record.footprint > self.policy.max_size:
            logger.warning(
                "max_size is smaller than the empty metadata record",
                namespace=self.namespace,
                max_size=self.policy.max_size,
                footprint=record.footprint,
            )
        return evicted
