"""
Key-value backends.

- KVBackend (base.py): the asynchronous interface the cache consumes
- MemoryBackend (memory.py): dict-backed store for tests and ephemeral use
- SQLiteBackend (sqlite.py): durable store on aiosqlite
"""

from kvcache.backends.base import KVBackend
from kvcache.backends.memory import MemoryBackend
from kvcache.backends.sqlite import SQLiteBackend

__all__ = [
    "KVBackend",
    "MemoryBackend",
    "SQLiteBackend",
]
