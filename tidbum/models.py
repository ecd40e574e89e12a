"""Domain models for albums, assets and settings.

Rows come out of SQLite as dicts and are validated into these models;
partial-update payloads rely on pydantic's ``model_fields_set`` so that an
explicit ``None`` (clear the field) is distinguishable from "not given".
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MediaType(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"


class Language(str, Enum):
    EN = "en"
    ZH_TW = "zh-TW"
    ZH_CN = "zh-CN"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class AssetCount(BaseModel):
    """Recursive asset count split by media type."""

    photo: int = 0
    video: int = 0

    @property
    def total(self) -> int:
        return self.photo + self.video


# =============================================================================
# Assets
# =============================================================================

class NewAsset(BaseModel):
    """Device media item being inserted into an album."""

    asset_id: str
    media_type: MediaType
    uri: str
    filename: Optional[str] = None
    width: int = 0
    height: int = 0
    duration: Optional[float] = None
    caption: Optional[str] = None


class Asset(BaseModel):
    id: str
    asset_id: str
    album_id: str
    media_type: MediaType
    uri: str
    filename: Optional[str] = None
    width: int = 0
    height: int = 0
    duration: Optional[float] = None
    caption: Optional[str] = None
    order_index: int
    created_at: datetime
    updated_at: datetime


class AssetUpdate(BaseModel):
    """Partial asset update; only fields explicitly set are written."""

    caption: Optional[str] = None
    uri: Optional[str] = None
    filename: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None


# =============================================================================
# Albums
# =============================================================================

class AlbumRef(BaseModel):
    """Breadcrumb entry."""

    id: str
    name: str


class Album(BaseModel):
    id: str
    name: str
    description: str = ""
    parent_album_id: Optional[str] = None
    cover_asset_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    assets: list[Asset] = Field(default_factory=list)
    sub_album_ids: list[str] = Field(default_factory=list)


class AlbumSummary(BaseModel):
    """Album list entry annotated with its recursive asset count."""

    id: str
    name: str
    description: str = ""
    parent_album_id: Optional[str] = None
    cover_asset_id: Optional[str] = None
    cover_uri: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    total_assets: AssetCount = Field(default_factory=AssetCount)


class AlbumUpdate(BaseModel):
    """Partial album update; only fields explicitly set are written."""

    name: Optional[str] = None
    description: Optional[str] = None
    cover_asset_id: Optional[str] = None
    parent_album_id: Optional[str] = None


# =============================================================================
# Settings
# =============================================================================

class Settings(BaseModel):
    caption_open: bool = False
    lang: Optional[Language] = None  # None: follow the system locale
    theme: Theme = Theme.LIGHT


class SettingsUpdate(BaseModel):
    caption_open: Optional[bool] = None
    lang: Optional[Language] = None
    theme: Optional[Theme] = None
