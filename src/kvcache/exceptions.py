"""
Exception hierarchy for kvcache.

All exceptions raised by the cache itself inherit from KVCacheError, which
provides optional context for structured error handling and logging.

Backend failures are never wrapped: whatever the backend raises reaches the
caller unchanged.
"""

from __future__ import annotations

from typing import Any


class KVCacheError(Exception):
    """Base exception for all kvcache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(KVCacheError):
    """Raised when cache configuration is invalid.

    Examples:
        - Empty namespace
        - Non-positive max_entries or max_size
    """

    pass


class IllegalKeyError(KVCacheError):
    """Raised when a key collides with the reserved metadata key.

    Context should include:
        - namespace: The cache namespace
        - key: The rejected logical key
    """

    pass


class MetadataFormatError(KVCacheError):
    """Raised when the stored metadata record is well-formed JSON of the wrong shape.

    Context should include:
        - namespace: The cache namespace
        - reason: What was wrong with the record
    """

    pass
