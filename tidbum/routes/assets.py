"""Asset routes - insertion, ordering, captions, moves and removal."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, NonNegativeInt

from ..dependencies import get_asset_repository
from ..infrastructure.repositories import AssetRepository
from ..models import AssetUpdate, MediaType, NewAsset

router = APIRouter(tags=["assets"])


class NewAssetInput(BaseModel):
    asset_id: str
    media_type: MediaType
    uri: str
    filename: Optional[str] = None
    width: NonNegativeInt = 0
    height: NonNegativeInt = 0
    duration: Optional[float] = None
    caption: Optional[str] = None


class AssetsInsertInput(BaseModel):
    assets: list[NewAssetInput]


class AssetIdsInput(BaseModel):
    asset_ids: list[str]


class AssetMoveInput(BaseModel):
    asset_ids: list[str]
    target_album_id: str


class AssetPatch(BaseModel):
    caption: Optional[str] = None
    uri: Optional[str] = None
    filename: Optional[str] = None
    width: Optional[NonNegativeInt] = None
    height: Optional[NonNegativeInt] = None
    duration: Optional[float] = None


@router.post("/api/albums/{album_id}/assets", status_code=201)
async def insert_assets_endpoint(
    album_id: str,
    data: AssetsInsertInput,
    repo: AssetRepository = Depends(get_asset_repository)
):
    """Append media items to an album (all or nothing)."""
    ids = await repo.insert_assets(
        album_id, [NewAsset(**asset.model_dump()) for asset in data.assets]
    )
    return {"status": "ok", "ids": ids}


@router.get("/api/albums/{album_id}/assets")
async def list_assets(album_id: str, repo: AssetRepository = Depends(get_asset_repository)):
    return {"assets": await repo.get_assets_by_album(album_id)}


@router.put("/api/albums/{album_id}/assets/order")
async def reorder_assets_endpoint(
    album_id: str,
    data: AssetIdsInput,
    repo: AssetRepository = Depends(get_asset_repository)
):
    """Reorder assets; the list must contain exactly the album's assets."""
    await repo.update_asset_order(album_id, data.asset_ids)
    return {"status": "ok"}


@router.get("/api/assets/media-ids")
async def list_media_ids(repo: AssetRepository = Depends(get_asset_repository)):
    """Device media IDs already imported, for the media picker."""
    return {"media_ids": sorted(await repo.get_existing_media_ids())}


@router.patch("/api/assets/{asset_id}")
async def update_asset_endpoint(
    asset_id: str,
    data: AssetPatch,
    repo: AssetRepository = Depends(get_asset_repository)
):
    await repo.update_asset(asset_id, AssetUpdate(**data.model_dump(exclude_unset=True)))
    return {"status": "ok"}


@router.delete("/api/assets/{asset_id}")
async def delete_asset_endpoint(asset_id: str, repo: AssetRepository = Depends(get_asset_repository)):
    await repo.delete_asset(asset_id)
    return {"status": "ok"}


@router.post("/api/assets/delete")
async def delete_assets_endpoint(data: AssetIdsInput, repo: AssetRepository = Depends(get_asset_repository)):
    """Delete selected assets; unknown IDs are ignored."""
    deleted = await repo.delete_assets(data.asset_ids)
    return {"status": "ok", "deleted": deleted}


@router.post("/api/assets/move")
async def move_assets_endpoint(data: AssetMoveInput, repo: AssetRepository = Depends(get_asset_repository)):
    """Move selected assets to another album."""
    await repo.move_assets_to_album(data.asset_ids, data.target_album_id)
    return {"status": "ok", "moved": len(data.asset_ids)}
