"""Test configuration and fixtures for TidBum.

This module provides isolated test environments:
- Temporary database file per test
- Repositories bound to that database
- An HTTP test client around a fresh application
"""
from pathlib import Path
from typing import Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from tidbum.infrastructure.database import Database
from tidbum.infrastructure.repositories import (
    AggregateQueryEngine,
    AlbumRepository,
    AssetRepository,
    SettingsRepository,
)


@pytest.fixture(scope="function")
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db(db_path: Path):
    """Fresh database, schema created on first access."""
    database = Database(db_path, reader_pool_size=2)
    yield database
    await database.close()


@pytest_asyncio.fixture
async def album_repo(db):
    return AlbumRepository(db)


@pytest_asyncio.fixture
async def asset_repo(db):
    return AssetRepository(db)


@pytest_asyncio.fixture
async def aggregates(db):
    return AggregateQueryEngine(db)


@pytest_asyncio.fixture
async def settings_repo(db):
    return SettingsRepository(db)


@pytest.fixture(scope="function")
def client(tmp_path: Path) -> Generator[TestClient, None, None]:
    """Create test client with a fresh isolated database.

    Usage:
        def test_something(client):
            response = client.get("/api/albums")
            assert response.status_code == 200
    """
    from tidbum.main import create_app

    app = create_app(tmp_path / "api.db")
    with TestClient(app) as test_client:
        yield test_client
