"""TidBum - local hierarchical album store."""
from .infrastructure.database import Database
from .infrastructure.repositories import (
    AggregateQueryEngine,
    AlbumRepository,
    AssetRepository,
    SettingsRepository,
)

__version__ = "0.1.0"

__all__ = [
    "Database",
    "AlbumRepository",
    "AssetRepository",
    "AggregateQueryEngine",
    "SettingsRepository",
]
