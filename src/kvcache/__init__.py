"""
kvcache: namespaced LRU cache over asynchronous key-value backends.

Modules:
- cache.py: Cache, the public cache API
- metadata.py: per-namespace LRU record and its storage
- eviction.py: LRU eviction against a CachePolicy
- keys.py: composite key codec
- backends/: KVBackend interface, MemoryBackend, SQLiteBackend
"""

from kvcache.backends import KVBackend, MemoryBackend, SQLiteBackend
from kvcache.cache import Cache
from kvcache.exceptions import (
    ConfigurationError,
    IllegalKeyError,
    KVCacheError,
    MetadataFormatError,
)
from kvcache.types import CachePolicy

__version__ = "0.1.0"

__all__ = [
    "Cache",
    "CachePolicy",
    "KVBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "KVCacheError",
    "ConfigurationError",
    "IllegalKeyError",
    "MetadataFormatError",
    "__version__",
]
