# Repository Pattern Implementation
"""
Repositories abstract database operations.
Each entity has its own repository; all share one Database.

Usage:
    db = Database(path)
    albums = AlbumRepository(db)
    album_id = await albums.create_album("Trip")
"""
from .aggregate_queries import AggregateQueryEngine
from .album_repository import AlbumRepository
from .asset_repository import AssetRepository
from .base import AsyncRepository
from .settings_repository import SettingsRepository

__all__ = [
    "AsyncRepository",
    "AggregateQueryEngine",
    "AlbumRepository",
    "AssetRepository",
    "SettingsRepository",
]
