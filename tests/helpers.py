"""Shared builders for tests."""
from tidbum.models import MediaType, NewAsset


def make_asset(n: int, media_type: MediaType = MediaType.PHOTO) -> NewAsset:
    """Build a device media item with predictable fields."""
    extension = "jpg" if media_type == MediaType.PHOTO else "mp4"
    return NewAsset(
        asset_id=f"media-{n}",
        media_type=media_type,
        uri=f"file:///device/DCIM/{n}.{extension}",
        filename=f"IMG_{n:04d}.{extension}",
        width=4032,
        height=3024,
        duration=12.5 if media_type == MediaType.VIDEO else None,
    )


def photos(*numbers: int) -> list[NewAsset]:
    return [make_asset(n) for n in numbers]
