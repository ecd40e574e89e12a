"""HTTP routes package.

- albums: album tree CRUD, breadcrumbs, counts, covers
- assets: insertion, ordering, captions, moves, removal
- settings: user preferences
"""
from fastapi import APIRouter

from . import albums, assets, settings

router = APIRouter()

router.include_router(albums.router)
router.include_router(assets.router)
router.include_router(settings.router)

__all__ = ["router"]
