"""Async database connection management.

Provides async database connectivity using aiosqlite:

- one writer connection, serialized by an asyncio.Lock, used through
  ``Database.transaction()`` (BEGIN IMMEDIATE ... COMMIT/ROLLBACK)
- a small pool of reader connections used through ``Database.reader()``

The database runs in WAL mode, so readers only ever see committed state.
"""
import asyncio
import logging
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite

from ... import config
from ...errors import StorageError
from .schema import clear_tables, create_schema, drop_tables

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current UTC time as a fixed-width ISO 8601 string.

    Fixed width keeps lexicographic order equal to chronological order,
    which ``MAX(?, created_at)`` in the repositories relies on.
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


async def open_connection(db_path: Path, busy_timeout: float) -> aiosqlite.Connection:
    """Open an autocommit connection; transactions are begun explicitly."""
    conn = await aiosqlite.connect(db_path, timeout=busy_timeout, isolation_level=None)
    conn.row_factory = aiosqlite.Row
    return conn


class AsyncConnectionPool:
    """Simple async connection pool for aiosqlite readers.

    Connections are created lazily up to ``max_connections``; further
    callers wait on the semaphore until one is released.
    """

    def __init__(self, db_path: Path, max_connections: int = 4, busy_timeout: float = 5.0):
        self.db_path = db_path
        self.max_connections = max_connections
        self.busy_timeout = busy_timeout
        self._connections: list[aiosqlite.Connection] = []
        self._semaphore = asyncio.Semaphore(max_connections)
        self._lock = asyncio.Lock()

    async def acquire(self) -> aiosqlite.Connection:
        """Acquire a connection from the pool."""
        await self._semaphore.acquire()
        try:
            async with self._lock:
                # Return existing connection if available
                if self._connections:
                    return self._connections.pop()
            return await open_connection(self.db_path, self.busy_timeout)
        except BaseException:
            self._semaphore.release()
            raise

    async def release(self, conn: aiosqlite.Connection) -> None:
        """Release a connection back to the pool."""
        try:
            async with self._lock:
                if len(self._connections) < self.max_connections:
                    self._connections.append(conn)
                    return
            await conn.close()
        finally:
            self._semaphore.release()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = await self.acquire()
        try:
            yield conn
        finally:
            await self.release(conn)

    async def close_all(self) -> None:
        """Close all idle connections in the pool."""
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()


class Database:
    """Embedded album store database.

    Examples:
        >>> db = Database(tmp_path / "tidbum.db")
        >>> async with db.transaction() as conn:
        ...     await conn.execute("DELETE FROM asset WHERE id = ?", (asset_id,))
        >>> async with db.reader() as conn:
        ...     cursor = await conn.execute("SELECT COUNT(*) FROM album")
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        reader_pool_size: Optional[int] = None,
        busy_timeout: Optional[float] = None
    ):
        self.db_path = Path(db_path) if db_path is not None else config.DATABASE_PATH
        self.busy_timeout = busy_timeout if busy_timeout is not None else config.BUSY_TIMEOUT
        self._readers = AsyncConnectionPool(
            self.db_path,
            max_connections=reader_pool_size or config.READER_POOL_SIZE,
            busy_timeout=self.busy_timeout
        )
        self._writer: Optional[aiosqlite.Connection] = None
        self._write_lock = asyncio.Lock()
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def _get_writer(self) -> aiosqlite.Connection:
        if self._writer is None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._writer = await open_connection(self.db_path, self.busy_timeout)
            except (OSError, sqlite3.Error) as e:
                raise StorageError(f"Cannot open database at {self.db_path}: {e}") from e
        return self._writer

    # =========================================================================
    # Schema
    # =========================================================================

    async def ensure_initialized(self) -> None:
        """Create the schema if needed.

        Safe to call repeatedly and from overlapping coroutines; only the
        first successful call does any work. A failed attempt leaves the
        flag unset, so the next call retries.
        """
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            async with self._write_lock:
                conn = await self._get_writer()
                await create_schema(conn)
            self._initialized = True

    async def clear_all(self) -> None:
        """Delete all albums, assets and settings."""
        async with self.transaction() as conn:
            await clear_tables(conn)
        logger.info("All tables cleared")

    async def drop_all(self) -> None:
        """Drop all tables; the next access re-creates them."""
        async with self.transaction() as conn:
            await drop_tables(conn)
        self._initialized = False
        logger.info("All tables dropped")

    # =========================================================================
    # Unit of work
    # =========================================================================

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Run a block as one atomic write.

        Commits on normal exit; rolls back on any exception, including
        cancellation. Raw sqlite3 errors and OS-level I/O errors surface as
        StorageError, domain errors propagate unchanged.
        """
        await self.ensure_initialized()
        async with self._write_lock:
            conn = await self._get_writer()
            try:
                await conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StorageError(f"Cannot begin transaction: {e}") from e

            try:
                yield conn
            except BaseException as exc:
                await self._rollback(conn, exc)
                if isinstance(exc, (sqlite3.Error, OSError)):
                    raise StorageError(str(exc)) from exc
                raise

            try:
                await conn.commit()
            except sqlite3.Error as e:
                await self._rollback(conn, e)
                raise StorageError(f"Commit failed: {e}") from e

    async def _rollback(self, conn: aiosqlite.Connection, cause: BaseException) -> None:
        logger.warning("Rolling back transaction after %s", type(cause).__name__)
        try:
            await conn.rollback()
        except sqlite3.Error as e:
            # The original error is what the caller needs to see.
            logger.error("Rollback failed: %s", e)

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a read connection that sees only committed data.

        The block runs inside one deferred transaction, so every statement
        in it reads the same WAL snapshot; a write committing midway is
        either wholly visible or not at all.
        """
        await self.ensure_initialized()
        try:
            async with self._readers.connection() as conn:
                await conn.execute("BEGIN")
                try:
                    yield conn
                except BaseException:
                    await conn.rollback()
                    raise
                await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    async def close(self) -> None:
        """Close writer and pooled reader connections."""
        async with self._write_lock:
            if self._writer is not None:
                await self._writer.close()
                self._writer = None
        await self._readers.close_all()
