"""
LRU eviction.

enforce() decides which entries have to go for a record to satisfy a policy
and removes them from the record. It never touches the backend; the caller
deletes the returned keys.
"""

from __future__ import annotations

from kvcache.metadata import LRURecord
from kvcache.types import CachePolicy


def enforce(record: LRURecord, policy: CachePolicy) -> list[str]:
    """Evict least recently used entries until the record fits the policy.

    Entry-count eviction runs first; size eviction continues from its result.
    The size check is content sizes plus the encoded record, which shrinks
    as entries leave it. An entry is kept when that sum equals max_size. If
    the record is emptied and still exceeds max_size (the empty encoding
    alone is larger than the budget), eviction stops there rather than
    failing.

    Args:
        record: Record to trim in place.
        policy: Limits to satisfy.

    Returns:
        Evicted logical keys, oldest first.
    """
    evicted: list[str] = []

    if policy.max_entries is not None:
        for _ in range(max(0, len(record) - policy.max_entries)):
            key, _size = record.pop_oldest()
            evicted.append(key)

    if policy.max_size is not None:
        while len(record) and record.footprint > policy.max_size:
            key, _size = record.pop_oldest()
            evicted.append(key)

    return evicted


def fits(size: int, policy: CachePolicy) -> bool:
    """Whether a single entry of the given size may be cached at all."""
    return policy.max_size is None or size <= policy.max_size
