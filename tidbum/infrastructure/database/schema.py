"""Schema manager: table definitions and idempotent creation.

All objects are created inside one IMMEDIATE transaction, so a failed
initialization leaves no partial schema behind and can simply be retried.
Referential integrity (cascading deletes, dangling covers) is enforced by the
repositories, not by ON DELETE clauses.
"""
import logging
import sqlite3

import aiosqlite

from ...errors import StorageError

logger = logging.getLogger(__name__)

TABLES = ("album", "asset", "settings")

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS album (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        parent_album_id TEXT REFERENCES album(id),
        cover_asset_id TEXT REFERENCES asset(id),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS asset (
        id TEXT PRIMARY KEY,
        asset_id TEXT NOT NULL,
        album_id TEXT NOT NULL REFERENCES album(id),
        media_type TEXT NOT NULL CHECK(media_type IN ('photo', 'video')),
        uri TEXT NOT NULL,
        filename TEXT,
        width INTEGER NOT NULL DEFAULT 0,
        height INTEGER NOT NULL DEFAULT 0,
        duration REAL,
        caption TEXT,
        order_index INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS settings (
        id INTEGER PRIMARY KEY CHECK(id = 1),
        caption_open INTEGER NOT NULL DEFAULT 0,
        lang TEXT,
        theme TEXT NOT NULL DEFAULT 'light'
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_album_parent ON album(parent_album_id)",
    "CREATE INDEX IF NOT EXISTS idx_asset_album_order ON asset(album_id, order_index)",
    "CREATE INDEX IF NOT EXISTS idx_asset_media ON asset(asset_id)",
)


async def create_schema(conn: aiosqlite.Connection) -> None:
    """Create all tables and indexes if absent.

    Args:
        conn: Writer connection in autocommit mode

    Raises:
        StorageError: If the database cannot be written
    """
    try:
        # WAL lets pooled readers see only committed state; persisted in the file.
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("BEGIN IMMEDIATE")
        try:
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)
        except sqlite3.Error:
            await conn.rollback()
            raise
        await conn.commit()
    except sqlite3.Error as e:
        raise StorageError(f"Schema initialization failed: {e}") from e
    logger.info("Schema ready (%s)", ", ".join(TABLES))


async def clear_tables(conn: aiosqlite.Connection) -> None:
    """Delete every row; runs inside the caller's transaction."""
    for table in TABLES:
        await conn.execute(f"DELETE FROM {table}")


async def drop_tables(conn: aiosqlite.Connection) -> None:
    """Drop every table; runs inside the caller's transaction."""
    for table in TABLES:
        await conn.execute(f"DROP TABLE IF EXISTS {table}")
