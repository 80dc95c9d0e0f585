"""Composite key codec.

A logical key lives in the shared backend under "{namespace}:{key}". Each
namespace also owns one reserved key, "{namespace}:_metadata", holding its
LRU record.
"""

from __future__ import annotations

SEPARATOR = ":"
METADATA_KEY = "_metadata"


def compose(namespace: str, key: str) -> str:
    """Build the backend key for a logical key in namespace."""
    return f"{namespace}{SEPARATOR}{key}"


def namespace_prefix(namespace: str) -> str:
    """Prefix shared by every backend key of namespace."""
    return f"{namespace}{SEPARATOR}"


def decompose(namespace: str, composite_key: str) -> str:
    """Strip the namespace prefix from a backend key.

    The composite key must start with ``namespace_prefix(namespace)``;
    callers filter before decoding.
    """
    return composite_key[len(namespace) + len(SEPARATOR):]


def metadata_key(namespace: str) -> str:
    """Reserved backend key holding the namespace's LRU record."""
    return compose(namespace, METADATA_KEY)


def is_reserved(namespace: str, key: str) -> bool:
    """Whether a logical key maps onto the reserved metadata key."""
    return compose(namespace, key) == metadata_key(namespace)
