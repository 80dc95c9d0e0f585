"""
Core types for kvcache.

- CachePolicy: frozen capacity limits for a cache instance
- KeyValuePair alias for batched read results
"""

from __future__ import annotations

from dataclasses import dataclass

from kvcache.exceptions import ConfigurationError

# (logical key, value or None) pairs returned by batched reads
KeyValuePair = tuple[str, str | None]


@dataclass(frozen=True)
class CachePolicy:
    """Capacity limits for one cache.

    Either limit, both, or neither may be set. With neither set the cache
    never evicts.

    Attributes:
        max_entries: Maximum number of entries kept in the namespace.
        max_size: Byte budget for the namespace: composite keys and values of
            all entries plus the encoded metadata record.
    """

    max_entries: int | None = None
    max_size: int | None = None

    def __post_init__(self) -> None:
        for name in ("max_entries", "max_size"):
            value = getattr(self, name)
            if value is None:
                continue
            # bool is an int subclass; True is not a meaningful limit
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive integer",
                    context={name: value},
                )

    @property
    def is_bounded(self) -> bool:
        """Whether any limit is configured."""
        return self.max_entries is not None or self.max_size is not None

    def to_dict(self) -> dict[str, int | None]:
        """Convert to dictionary for logging and display."""
        return {
            "max_entries": self.max_entries,
            "max_size": self.max_size,
        }
