"""Shared FastAPI dependencies.

Factory functions handing repositories and services to the routers. The
Database and SettingsService live on ``app.state`` for the app's lifetime.
"""
from fastapi import Depends, Request

from .application.services import SettingsService
from .infrastructure.database import Database
from .infrastructure.repositories import (
    AggregateQueryEngine,
    AlbumRepository,
    AssetRepository,
)


def get_database(request: Request) -> Database:
    """Get the database opened by the application lifespan."""
    return request.app.state.database


def get_album_repository(db: Database = Depends(get_database)) -> AlbumRepository:
    return AlbumRepository(db)


def get_asset_repository(db: Database = Depends(get_database)) -> AssetRepository:
    return AssetRepository(db)


def get_aggregate_engine(db: Database = Depends(get_database)) -> AggregateQueryEngine:
    return AggregateQueryEngine(db)


def get_settings_service(request: Request) -> SettingsService:
    return request.app.state.settings_service
