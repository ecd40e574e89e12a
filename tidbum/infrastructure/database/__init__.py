"""Async database infrastructure.

This module provides async database connectivity using aiosqlite.
"""
from .connection import AsyncConnectionPool, Database, open_connection, utc_timestamp
from .schema import SCHEMA_STATEMENTS, TABLES, create_schema

__all__ = [
    'Database',
    'AsyncConnectionPool',
    'open_connection',
    'utc_timestamp',
    'create_schema',
    'SCHEMA_STATEMENTS',
    'TABLES',
]
