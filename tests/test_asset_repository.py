"""Tests for AssetRepository: ordering, covers, moves and removal."""
import asyncio

import pytest

from tidbum.errors import InvalidArgument, InvalidReference, NotFound
from tidbum.models import AssetUpdate, MediaType
from tests.helpers import make_asset, photos


async def order_of(asset_repo, album_id) -> list[str]:
    return [asset.id for asset in await asset_repo.get_assets_by_album(album_id)]


async def indexes_of(asset_repo, album_id) -> list[int]:
    return [asset.order_index for asset in await asset_repo.get_assets_by_album(album_id)]


# =============================================================================
# Insertion
# =============================================================================

@pytest.mark.asyncio
async def test_insert_preserves_input_order_and_appends(album_repo, asset_repo):
    album_id = await album_repo.create_album("Trip")

    first = await asset_repo.insert_assets(album_id, photos(1, 2))
    second = await asset_repo.insert_assets(album_id, [make_asset(3, MediaType.VIDEO)])

    assets = await asset_repo.get_assets_by_album(album_id)
    assert [asset.id for asset in assets] == first + second
    assert [asset.order_index for asset in assets] == [0, 1, 2]
    assert [asset.asset_id for asset in assets] == ["media-1", "media-2", "media-3"]
    assert assets[2].media_type == MediaType.VIDEO
    assert assets[2].duration == 12.5
    assert assets[0].width == 4032


@pytest.mark.asyncio
async def test_insert_into_missing_album_fails(asset_repo):
    with pytest.raises(NotFound):
        await asset_repo.insert_assets("nope", photos(1))


@pytest.mark.asyncio
async def test_insert_empty_batch(album_repo, asset_repo):
    album_id = await album_repo.create_album("Trip")

    assert await asset_repo.insert_assets(album_id, []) == []


@pytest.mark.asyncio
async def test_same_media_item_in_two_albums(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    family = await album_repo.create_album("Family")

    [a] = await asset_repo.insert_assets(trip, photos(1))
    [b] = await asset_repo.insert_assets(family, photos(1))

    assert a != b
    assert await asset_repo.get_existing_media_ids() == {"media-1"}


@pytest.mark.asyncio
async def test_insert_refreshes_album_updated_at(album_repo, asset_repo):
    album_id = await album_repo.create_album("Trip")
    before = (await album_repo.get_album_by_id(album_id)).updated_at
    await asyncio.sleep(0.001)

    await asset_repo.insert_assets(album_id, photos(1))

    assert (await album_repo.get_album_by_id(album_id)).updated_at > before


@pytest.mark.asyncio
async def test_concurrent_batches_stay_dense(album_repo, asset_repo):
    album_id = await album_repo.create_album("Trip")

    await asyncio.gather(
        *(asset_repo.insert_assets(album_id, photos(n * 10, n * 10 + 1)) for n in range(5)),
        *(album_repo.get_top_level_albums() for _ in range(5))
    )

    assert await indexes_of(asset_repo, album_id) == list(range(10))


# =============================================================================
# Update
# =============================================================================

@pytest.mark.asyncio
async def test_update_caption(album_repo, asset_repo):
    album_id = await album_repo.create_album("Trip")
    [asset_id] = await asset_repo.insert_assets(album_id, photos(1))

    await asset_repo.update_asset(asset_id, AssetUpdate(caption="Sunset at the temple"))

    asset = await asset_repo.get_asset_by_id(asset_id)
    assert asset.caption == "Sunset at the temple"
    assert asset.uri == "file:///device/DCIM/1.jpg"
    assert asset.updated_at >= asset.created_at


@pytest.mark.asyncio
async def test_update_missing_asset_fails(asset_repo):
    with pytest.raises(NotFound):
        await asset_repo.update_asset("nope", AssetUpdate(caption="x"))


# =============================================================================
# Reorder
# =============================================================================

@pytest.mark.asyncio
async def test_reorder_swaps_two_assets(album_repo, asset_repo):
    album_id = await album_repo.create_album("X")
    a, b = await asset_repo.insert_assets(album_id, photos(1, 2))

    await asset_repo.update_asset_order(album_id, [b, a])

    assert await order_of(asset_repo, album_id) == [b, a]
    assert await indexes_of(asset_repo, album_id) == [0, 1]


@pytest.mark.asyncio
@pytest.mark.parametrize("mutate", [
    lambda ids: ids[:-1],              # subset
    lambda ids: ids + ["stranger"],    # superset
    lambda ids: ids[:-1] + ids[:1],    # duplicate replaces one
    lambda ids: ids + ids[:1],         # duplicate on top
])
async def test_reorder_with_mismatched_set_fails(album_repo, asset_repo, mutate):
    album_id = await album_repo.create_album("X")
    ids = await asset_repo.insert_assets(album_id, photos(1, 2, 3))

    with pytest.raises(InvalidArgument):
        await asset_repo.update_asset_order(album_id, mutate(list(reversed(ids))))

    assert await order_of(asset_repo, album_id) == ids


@pytest.mark.asyncio
async def test_reorder_mismatch_is_also_an_invalid_reference(album_repo, asset_repo):
    album_id = await album_repo.create_album("X")
    await asset_repo.insert_assets(album_id, photos(1))

    with pytest.raises(InvalidReference):
        await asset_repo.update_asset_order(album_id, [])


@pytest.mark.asyncio
async def test_reorder_missing_album_fails(asset_repo):
    with pytest.raises(NotFound):
        await asset_repo.update_asset_order("nope", [])


# =============================================================================
# Covers
# =============================================================================

@pytest.mark.asyncio
async def test_set_cover_to_asset_of_other_album_fails(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    family = await album_repo.create_album("Family")
    [own] = await asset_repo.insert_assets(trip, photos(1))
    [foreign] = await asset_repo.insert_assets(family, photos(2))
    await asset_repo.set_album_cover(trip, own)

    with pytest.raises(InvalidReference):
        await asset_repo.set_album_cover(trip, foreign)

    assert (await album_repo.get_album_by_id(trip)).cover_asset_id == own


@pytest.mark.asyncio
async def test_set_cover_unknown_asset_or_album(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")

    with pytest.raises(InvalidReference):
        await asset_repo.set_album_cover(trip, "nope")
    with pytest.raises(NotFound):
        await asset_repo.set_album_cover("nope", None)


@pytest.mark.asyncio
async def test_clear_cover(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    [own] = await asset_repo.insert_assets(trip, photos(1))
    await asset_repo.set_album_cover(trip, own)

    await asset_repo.set_album_cover(trip, None)

    assert (await album_repo.get_album_by_id(trip)).cover_asset_id is None


# =============================================================================
# Removal
# =============================================================================

@pytest.mark.asyncio
async def test_delete_cover_asset_clears_cover(album_repo, asset_repo):
    album_id = await album_repo.create_album("Trip")
    cover, other = await asset_repo.insert_assets(album_id, photos(1, 2))
    await asset_repo.set_album_cover(album_id, cover)

    await asset_repo.delete_asset(cover)

    album = await album_repo.get_album_by_id(album_id)
    assert album.cover_asset_id is None
    assert [asset.id for asset in album.assets] == [other]


@pytest.mark.asyncio
async def test_delete_keeps_order_dense(album_repo, asset_repo):
    album_id = await album_repo.create_album("Trip")
    a, b, c, d = await asset_repo.insert_assets(album_id, photos(1, 2, 3, 4))

    await asset_repo.delete_asset(b)

    assert await order_of(asset_repo, album_id) == [a, c, d]
    assert await indexes_of(asset_repo, album_id) == [0, 1, 2]

    [e] = await asset_repo.insert_assets(album_id, photos(5))
    assert (await asset_repo.get_asset_by_id(e)).order_index == 3


@pytest.mark.asyncio
async def test_delete_missing_asset_fails(asset_repo):
    with pytest.raises(NotFound):
        await asset_repo.delete_asset("nope")


@pytest.mark.asyncio
async def test_delete_selected_assets(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    family = await album_repo.create_album("Family")
    a, b, c = await asset_repo.insert_assets(trip, photos(1, 2, 3))
    [d] = await asset_repo.insert_assets(family, photos(4))
    await asset_repo.set_album_cover(family, d)

    deleted = await asset_repo.delete_assets([a, c, d, "unknown"])

    assert deleted == 3
    assert await order_of(asset_repo, trip) == [b]
    assert await indexes_of(asset_repo, trip) == [0]
    assert (await album_repo.get_album_by_id(family)).cover_asset_id is None


@pytest.mark.asyncio
async def test_delete_by_media_id_hits_every_album(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    family = await album_repo.create_album("Family")
    await asset_repo.insert_assets(trip, photos(1, 2))
    await asset_repo.insert_assets(family, photos(1))

    removed = await asset_repo.delete_assets_by_media_id("media-1")

    assert removed == 2
    assert await asset_repo.get_existing_media_ids() == {"media-2"}
    assert await indexes_of(asset_repo, trip) == [0]


# =============================================================================
# Move
# =============================================================================

@pytest.mark.asyncio
async def test_move_assets_appends_and_clears_stale_cover(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    family = await album_repo.create_album("Family")
    a, b, c = await asset_repo.insert_assets(trip, photos(1, 2, 3))
    [d] = await asset_repo.insert_assets(family, photos(4))
    await asset_repo.set_album_cover(trip, b)

    await asset_repo.move_assets_to_album([c, b], family)

    assert await order_of(asset_repo, family) == [d, c, b]
    assert await indexes_of(asset_repo, family) == [0, 1, 2]
    assert await order_of(asset_repo, trip) == [a]
    assert await indexes_of(asset_repo, trip) == [0]
    assert (await album_repo.get_album_by_id(trip)).cover_asset_id is None


@pytest.mark.asyncio
async def test_move_with_unknown_asset_moves_nothing(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    family = await album_repo.create_album("Family")
    [a] = await asset_repo.insert_assets(trip, photos(1))

    with pytest.raises(NotFound):
        await asset_repo.move_assets_to_album([a, "nope"], family)
    with pytest.raises(NotFound):
        await asset_repo.move_assets_to_album([a], "nope")

    assert await order_of(asset_repo, trip) == [a]


@pytest.mark.asyncio
async def test_move_within_same_album_is_noop(album_repo, asset_repo):
    trip = await album_repo.create_album("Trip")
    ids = await asset_repo.insert_assets(trip, photos(1, 2))

    await asset_repo.move_assets_to_album([ids[0]], trip)

    assert await order_of(asset_repo, trip) == ids
