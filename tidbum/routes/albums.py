"""Album routes - tree CRUD, breadcrumbs, counts and covers."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, StringConstraints

from ..config import ALBUM_DESCRIPTION_MAX_LENGTH, ALBUM_NAME_MAX_LENGTH
from ..dependencies import get_aggregate_engine, get_album_repository, get_asset_repository
from ..infrastructure.repositories import AggregateQueryEngine, AlbumRepository, AssetRepository
from ..models import AlbumUpdate

router = APIRouter(prefix="/api/albums", tags=["albums"])

AlbumName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=ALBUM_NAME_MAX_LENGTH)
]
AlbumDescription = Annotated[
    str, StringConstraints(strip_whitespace=True, max_length=ALBUM_DESCRIPTION_MAX_LENGTH)
]


class AlbumCreate(BaseModel):
    name: AlbumName
    description: AlbumDescription = ""
    parent_album_id: Optional[str] = None


class AlbumPatch(BaseModel):
    name: Optional[AlbumName] = None
    description: Optional[AlbumDescription] = None
    cover_asset_id: Optional[str] = None
    parent_album_id: Optional[str] = None


class AlbumCoverInput(BaseModel):
    asset_id: Optional[str] = None


@router.post("", status_code=201)
async def create_album_endpoint(
    data: AlbumCreate,
    repo: AlbumRepository = Depends(get_album_repository)
):
    """Create a top-level album or a sub-album."""
    album_id = await repo.create_album(data.name, data.description, data.parent_album_id)
    return {"status": "ok", "id": album_id}


@router.get("")
async def list_top_level_albums(repo: AlbumRepository = Depends(get_album_repository)):
    """Top-level albums with recursive asset counts."""
    return {"albums": await repo.get_top_level_albums()}


@router.get("/{album_id}")
async def get_album(album_id: str, repo: AlbumRepository = Depends(get_album_repository)):
    """Get album data with asset list and sub-album IDs."""
    album = await repo.get_album_by_id(album_id)
    if not album:
        raise HTTPException(status_code=404, detail="Album not found")
    return album


@router.patch("/{album_id}")
async def update_album_endpoint(
    album_id: str,
    data: AlbumPatch,
    repo: AlbumRepository = Depends(get_album_repository)
):
    """Rename, describe, re-cover or move an album."""
    fields = AlbumUpdate(**data.model_dump(exclude_unset=True))
    await repo.update_album(album_id, fields)
    return {"status": "ok"}


@router.delete("/{album_id}")
async def delete_album_endpoint(album_id: str, repo: AlbumRepository = Depends(get_album_repository)):
    """Delete album with all sub-albums and assets."""
    await repo.delete_album(album_id)
    return {"status": "ok"}


@router.get("/{album_id}/sub-albums")
async def list_sub_albums(album_id: str, repo: AlbumRepository = Depends(get_album_repository)):
    return {"albums": await repo.get_sub_albums(album_id)}


@router.get("/{album_id}/parent")
async def get_parent(album_id: str, repo: AlbumRepository = Depends(get_album_repository)):
    """Parent album, or null for a top-level album."""
    return {"parent": await repo.get_parent_album(album_id)}


@router.get("/{album_id}/path")
async def get_path(album_id: str, repo: AlbumRepository = Depends(get_album_repository)):
    """Breadcrumbs from the top-level album down to this one."""
    return {"path": await repo.get_album_path(album_id)}


@router.get("/{album_id}/counts")
async def get_counts(album_id: str, engine: AggregateQueryEngine = Depends(get_aggregate_engine)):
    count = await engine.get_album_total_asset_count(album_id)
    return {"photo": count.photo, "video": count.video, "total": count.total}


@router.put("/{album_id}/cover")
async def set_album_cover_endpoint(
    album_id: str,
    data: AlbumCoverInput,
    repo: AssetRepository = Depends(get_asset_repository)
):
    """Set album cover asset. Pass null asset_id to clear it."""
    await repo.set_album_cover(album_id, data.asset_id)
    return {"status": "ok"}
