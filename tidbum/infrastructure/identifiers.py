"""Identifier generation with retry-on-collision inserts.

A duplicate primary key is retried with a fresh id a bounded number of
times; an existing row is never overwritten.
"""
import logging
import sqlite3
import uuid
from typing import Callable, Optional

import aiosqlite

from .. import config
from ..errors import Collision

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]


def new_id() -> str:
    """Return a new globally unique identifier."""
    return str(uuid.uuid4())


def is_id_collision(error: sqlite3.IntegrityError, table: str) -> bool:
    """True if the integrity error is a duplicate ``<table>.id``."""
    return str(error).endswith(f"{table}.id")


async def insert_with_new_id(
    conn: aiosqlite.Connection,
    table: str,
    values: dict,
    id_factory: IdFactory = new_id,
    retries: Optional[int] = None
) -> str:
    """Insert a row under a freshly generated id.

    Args:
        conn: Connection inside an open transaction
        table: Target table (trusted, never user input)
        values: Column values excluding ``id``
        id_factory: Identifier source
        retries: Attempts before giving up (default from config)

    Returns:
        The id the row was stored under

    Raises:
        Collision: If every generated id already existed
    """
    attempts = retries if retries is not None else config.ID_RETRY_LIMIT
    columns = ["id", *values.keys()]
    sql = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join('?' * len(columns))})"
    )

    for attempt in range(1, attempts + 1):
        row_id = id_factory()
        try:
            await conn.execute(sql, (row_id, *values.values()))
            return row_id
        except sqlite3.IntegrityError as e:
            if not is_id_collision(e, table):
                raise
            logger.warning(
                "Identifier collision on %s (attempt %d/%d): %s",
                table, attempt, attempts, row_id
            )

    raise Collision(table, attempts)
