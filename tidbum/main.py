"""TidBum - FastAPI entry point for UI collaborators."""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .application.services import SettingsService
from .errors import Collision, InvalidReference, NotFound, StorageError
from .infrastructure.database import Database
from .infrastructure.repositories import SettingsRepository
from .log import get_logger
from .routes import router

logger = get_logger()


def create_app(db_path: Optional[Path] = None) -> FastAPI:
    """Build the application around a database at ``db_path``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        database = Database(db_path)
        await database.ensure_initialized()
        app.state.database = database
        app.state.settings_service = SettingsService(SettingsRepository(database))
        logger.info("Album store opened at %s", database.db_path)
        yield
        await database.close()

    app = FastAPI(title="TidBum", lifespan=lifespan)

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    # InvalidArgument is a subclass and lands here too
    @app.exception_handler(InvalidReference)
    async def invalid_reference_handler(request: Request, exc: InvalidReference):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(Collision)
    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: Exception):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Storage failure"})

    app.include_router(router)
    return app


app = create_app()
