"""
SQLite key-value backend.

Persists keys and values in a single table using aiosqlite, so a cache can
outlive the process that filled it. Shared by every namespace pointed at the
same database file.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType
from typing import Iterator

import aiosqlite

from kvcache.backends.base import KVBackend
from kvcache.logging import get_logger

logger = get_logger(__name__)

# Stay below SQLITE_MAX_VARIABLE_NUMBER on older builds (999).
_BATCH_SIZE = 500


def _chunks(keys: list[str], size: int = _BATCH_SIZE) -> Iterator[list[str]]:
    for start in range(0, len(keys), size):
        yield keys[start:start + size]


class SQLiteBackend(KVBackend):
    """aiosqlite-backed string store.

    Call init() (or use ``async with``) before any other operation.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the backend.

        Args:
            db_path: Path to the SQLite file, or ":memory:".
        """
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open the connection and create the table.

        Safe to call more than once.
        """
        if self._db is not None:
            return

        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._db = await aiosqlite.connect(self.db_path)
        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        await self._db.commit()

        logger.debug("SQLite backend initialized", db_path=str(self.db_path))

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> SQLiteBackend:
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("SQLiteBackend not initialized. Call init() first.")
        return self._db

    async def get_all_keys(self) -> list[str]:
        async with self._conn().execute("SELECT key FROM kv") as cursor:
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def get_item(self, key: str) -> str | None:
        async with self._conn().execute(
            "SELECT value FROM kv WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        db = self._conn()
        await db.execute(
            """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        await db.commit()

    async def remove_item(self, key: str) -> None:
        db = self._conn()
        await db.execute("DELETE FROM kv WHERE key = ?", (key,))
        await db.commit()

    async def multi_get(self, keys: list[str]) -> list[tuple[str, str | None]]:
        db = self._conn()
        found: dict[str, str] = {}
        for chunk in _chunks(keys):
            placeholders = ",".join("?" * len(chunk))
            async with db.execute(
                f"SELECT key, value FROM kv WHERE key IN ({placeholders})", chunk
            ) as cursor:
                for row in await cursor.fetchall():
                    found[row[0]] = row[1]
        return [(key, found.get(key)) for key in keys]

    async def multi_remove(self, keys: list[str]) -> None:
        if not keys:
            return
        db = self._conn()
        for chunk in _chunks(keys):
            placeholders = ",".join("?" * len(chunk))
            await db.execute(f"DELETE FROM kv WHERE key IN ({placeholders})", chunk)
        await db.commit()
