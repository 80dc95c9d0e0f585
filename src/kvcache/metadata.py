"""
Per-namespace LRU bookkeeping.

The LRU record is stored in the same backend as the cached values, under the
namespace's reserved metadata key, so its own size counts against the size
budget. This module provides:
- LRURecord: access order plus cumulative content size, with the byte length
  of the record's canonical encoding maintained incrementally
- encode_record() / decode_record(): the canonical, versioned JSON encoding
- MetadataStore: load/save of the record through a backend

Canonical encoding (orjson, no whitespace, non-ASCII written as UTF-8), a
fixed-layout array of format version, total content size and pairs:

    [1,<totalSize>,[["<key>",<size>],...]]

Because the layout is fixed, every structural change to the record alters
the encoded length by an amount computable from the changed pair alone:
the pair's own encoding, one separating comma when other pairs remain, and
the change in digit count of the total.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Iterable, Iterator

import orjson

from kvcache.exceptions import MetadataFormatError
from kvcache.keys import metadata_key
from kvcache.logging import get_logger
from kvcache.utils.sizing import digit_count

if TYPE_CHECKING:
    from kvcache.backends.base import KVBackend

logger = get_logger(__name__)

FORMAT_VERSION = 1


def _encode(total_size: int, pairs: Iterable[tuple[str, int]]) -> bytes:
    return orjson.dumps(
        [FORMAT_VERSION, total_size, [[key, size] for key, size in pairs]]
    )


def pair_encoded_size(key: str, size: int) -> int:
    """Byte length of one ``[key, size]`` pair inside the encoded record."""
    return len(orjson.dumps([key, size]))


EMPTY_ENCODED_SIZE = len(_encode(0, ()))


class LRURecord:
    """Access order and size bookkeeping for one namespace.

    Pairs are kept oldest first. All mutation goes through the methods below
    so that ``total_size`` and ``encoded_size`` always match the pairs held.
    """

    def __init__(self) -> None:
        self._order: OrderedDict[str, int] = OrderedDict()
        self._total_size = 0
        self._encoded_size = EMPTY_ENCODED_SIZE

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, int]]) -> LRURecord:
        """Build a record from (key, size) pairs, oldest first."""
        record = cls()
        for key, size in pairs:
            record.insert(key, size)
        return record

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, key: object) -> bool:
        return key in self._order

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __repr__(self) -> str:
        return (
            f"LRURecord(entries={len(self._order)}, total_size={self._total_size}, "
            f"encoded_size={self._encoded_size})"
        )

    @property
    def total_size(self) -> int:
        """Sum of the content sizes of all tracked entries."""
        return self._total_size

    @property
    def encoded_size(self) -> int:
        """Exact byte length of ``encode_record(self)``."""
        return self._encoded_size

    @property
    def footprint(self) -> int:
        """Content sizes plus the encoded record, the quantity bounded by max_size."""
        return self._total_size + self._encoded_size

    def items(self) -> list[tuple[str, int]]:
        """(key, size) pairs, oldest first."""
        return list(self._order.items())

    def size_of(self, key: str) -> int | None:
        """Content size recorded for key, or None if untracked."""
        return self._order.get(key)

    def insert(self, key: str, size: int) -> None:
        """Add or refresh key at the most recent end.

        An existing pair for key is dropped first, so the old size no longer
        counts.
        """
        if key in self._order:
            self._remove(key)
        self._append(key, size)

    def touch(self, key: str) -> bool:
        """Move a tracked key to the most recent end.

        Returns:
            True if the order changed.
        """
        if key not in self._order or next(reversed(self._order)) == key:
            return False
        # Reordering leaves the encoded length unchanged.
        self._order.move_to_end(key)
        return True

    def discard(self, key: str) -> bool:
        """Drop key if tracked.

        Returns:
            True if the record changed.
        """
        if key not in self._order:
            return False
        self._remove(key)
        return True

    def pop_oldest(self) -> tuple[str, int]:
        """Remove and return the least recently used pair.

        Raises:
            KeyError: If the record is empty.
        """
        if not self._order:
            raise KeyError("pop_oldest(): LRU record is empty")
        key = next(iter(self._order))
        size = self._order[key]
        self._remove(key)
        return key, size

    def _append(self, key: str, size: int) -> None:
        separator = 1 if self._order else 0
        self._order[key] = size
        self._encoded_size += pair_encoded_size(key, size) + separator
        self._set_total(self._total_size + size)

    def _remove(self, key: str) -> None:
        size = self._order.pop(key)
        separator = 1 if self._order else 0
        self._encoded_size -= pair_encoded_size(key, size) + separator
        self._set_total(self._total_size - size)

    def _set_total(self, total_size: int) -> None:
        self._encoded_size += digit_count(total_size) - digit_count(self._total_size)
        self._total_size = total_size


def encode_record(record: LRURecord) -> str:
    """Serialize a record to its canonical text form."""
    return _encode(record.total_size, record.items()).decode("utf-8")


def decode_record(raw: str, namespace: str = "") -> LRURecord:
    """Parse a stored record.

    Args:
        raw: Text previously produced by encode_record().
        namespace: Namespace the record belongs to, for error context.

    Returns:
        The decoded record.

    Raises:
        orjson.JSONDecodeError: If raw is not valid JSON.
        MetadataFormatError: If the document is not a version 1 LRU record.
    """
    data: Any = orjson.loads(raw)

    def invalid(reason: str) -> MetadataFormatError:
        return MetadataFormatError(
            "Stored LRU metadata is invalid",
            context={"namespace": namespace, "reason": reason},
        )

    if not isinstance(data, list) or len(data) != 3:
        raise invalid("record is not a 3-element array")
    version, total_size, order = data
    if version != FORMAT_VERSION or isinstance(version, bool):
        raise invalid(f"unsupported version {version!r}")
    if not isinstance(total_size, int) or isinstance(total_size, bool):
        raise invalid("total size is not an integer")
    if not isinstance(order, list):
        raise invalid("order is not a list")

    record = LRURecord()
    for pair in order:
        if (
            not isinstance(pair, list)
            or len(pair) != 2
            or not isinstance(pair[0], str)
            or not isinstance(pair[1], int)
            or isinstance(pair[1], bool)
            or pair[1] < 0
        ):
            raise invalid(f"malformed entry {pair!r}")
        if pair[0] in record:
            raise invalid(f"duplicate key {pair[0]!r}")
        record.insert(pair[0], pair[1])

    if record.total_size != total_size:
        raise invalid(
            f"total size {total_size} does not match entry sizes ({record.total_size})"
        )
    return record


class MetadataStore:
    """Loads and saves a namespace's LRU record through a backend."""

    def __init__(self, backend: KVBackend, namespace: str) -> None:
        """Initialize the store.

        Args:
            backend: Backend holding both values and metadata.
            namespace: Namespace whose record this store manages.
        """
        self.backend = backend
        self.namespace = namespace
        self.key = metadata_key(namespace)

    async def load(self) -> LRURecord:
        """Fetch the current record.

        A namespace without stored metadata yields an empty record, whose
        encoded_size is still the non-zero length of the empty encoding.
        """
        raw = await self.backend.get_item(self.key)
        if raw is None:
            return LRURecord()
        return decode_record(raw, self.namespace)

    async def save(self, record: LRURecord) -> None:
        """Write the record, overwriting whatever is stored."""
        await self.backend.set_item(self.key, encode_record(record))
        logger.debug(
            "Saved LRU metadata",
            namespace=self.namespace,
            entries=len(record),
            total_size=record.total_size,
            encoded_size=record.encoded_size,
        )
