"""Base repository and shared query helpers.

Repositories never hold a connection themselves: every public operation
opens either a write transaction or a reader on the shared Database, and the
private helpers take that connection explicitly so multi-step operations run
entirely inside one unit of work.
"""
from typing import Iterable, Iterator, Optional, Sequence, Sized

import aiosqlite

from ... import config
from ..database import Database
from ..identifiers import IdFactory, new_id


def chunked(values: Sequence, size: int = config.SQLITE_MAX_PARAMS) -> Iterator[Sequence]:
    """Split values so each ``IN (...)`` stays under SQLite's parameter cap."""
    for start in range(0, len(values), size):
        yield values[start:start + size]


def placeholders(values: Sized) -> str:
    return ",".join("?" * len(values))


class AsyncRepository:
    """Async base repository class.

    Provides async database operations using aiosqlite.

    Example:
        class AsyncAlbumNameRepository(AsyncRepository):
            async def get_name(self, album_id: str) -> str | None:
                async with self._db.reader() as conn:
                    row = await self._fetchone(
                        conn, "SELECT name FROM album WHERE id = ?", (album_id,)
                    )
                    return row["name"] if row else None
    """

    def __init__(self, database: Database, id_factory: IdFactory = new_id):
        """Initialize repository.

        Args:
            database: Shared album store database
            id_factory: Identifier source for new rows
        """
        self._db = database
        self._new_id = id_factory

    def _row_to_dict(self, row: Optional[aiosqlite.Row]) -> Optional[dict]:
        return dict(row) if row else None

    async def _fetchone(
        self,
        conn: aiosqlite.Connection,
        sql: str,
        parameters: Iterable = ()
    ) -> Optional[dict]:
        """Fetch single row and return as dict."""
        cursor = await conn.execute(sql, tuple(parameters))
        row = await cursor.fetchone()
        await cursor.close()
        return self._row_to_dict(row)

    async def _fetchall(
        self,
        conn: aiosqlite.Connection,
        sql: str,
        parameters: Iterable = ()
    ) -> list[dict]:
        """Fetch all rows and return as list of dicts."""
        cursor = await conn.execute(sql, tuple(parameters))
        rows = await cursor.fetchall()
        await cursor.close()
        return [dict(row) for row in rows]

    async def _exists(self, conn: aiosqlite.Connection, table: str, row_id: str) -> bool:
        row = await self._fetchone(conn, f"SELECT 1 AS found FROM {table} WHERE id = ?", (row_id,))
        return row is not None
