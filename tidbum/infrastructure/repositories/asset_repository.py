"""Asset repository - ordered asset lists scoped to an album.

Every write keeps two invariants inside its own transaction:
- order_index within an album is the dense sequence 0..n-1
- an album's cover_asset_id only ever points at an asset it owns
"""
import logging
from typing import Iterable, Optional

import aiosqlite

from ... import config
from ...errors import InvalidArgument, InvalidReference, NotFound
from ...models import Asset, AssetUpdate, NewAsset
from ..database import utc_timestamp
from ..identifiers import insert_with_new_id
from .album_repository import touch_album
from .base import AsyncRepository

logger = logging.getLogger(__name__)

NOT_NULL_COLUMNS = ("uri", "width", "height")


class AssetRepository(AsyncRepository):
    """Repository for asset entity operations.

    Examples:
        >>> repo = AssetRepository(db)
        >>> ids = await repo.insert_assets(album_id, [NewAsset(...), NewAsset(...)])
        >>> await repo.update_asset_order(album_id, list(reversed(ids)))
        >>> await repo.set_album_cover(album_id, ids[0])
    """

    async def insert_assets(self, album_id: str, assets: list[NewAsset]) -> list[str]:
        """Append assets to an album, all or nothing.

        Args:
            album_id: Owning album
            assets: New assets in display order

        Returns:
            New asset IDs in input order

        Raises:
            NotFound: If the album does not exist
        """
        async with self._db.transaction() as conn:
            await self._require_album(conn, album_id)
            if not assets:
                return []

            position = await self._next_order_index(conn, album_id)
            now = utc_timestamp()
            asset_ids = []
            for asset in assets:
                asset_ids.append(await insert_with_new_id(
                    conn,
                    "asset",
                    {
                        "asset_id": asset.asset_id,
                        "album_id": album_id,
                        "media_type": asset.media_type.value,
                        "uri": asset.uri,
                        "filename": asset.filename,
                        "width": asset.width,
                        "height": asset.height,
                        "duration": asset.duration,
                        "caption": asset.caption,
                        "order_index": position,
                        "created_at": now,
                        "updated_at": now,
                    },
                    id_factory=self._new_id
                ))
                position += 1
            await touch_album(conn, album_id)

        logger.debug("Inserted %d assets into album %s", len(asset_ids), album_id)
        return asset_ids

    async def get_assets_by_album(self, album_id: str) -> list[Asset]:
        """Get album assets ordered by order_index.

        Raises:
            NotFound: If the album does not exist
        """
        async with self._db.reader() as conn:
            await self._require_album(conn, album_id)
            rows = await self._fetchall(
                conn,
                "SELECT * FROM asset WHERE album_id = ? ORDER BY order_index",
                (album_id,)
            )
        return [Asset(**row) for row in rows]

    async def get_asset_by_id(self, asset_id: str) -> Optional[Asset]:
        async with self._db.reader() as conn:
            row = await self._fetchone(conn, "SELECT * FROM asset WHERE id = ?", (asset_id,))
        return Asset(**row) if row else None

    async def get_existing_media_ids(self) -> set[str]:
        """Device media IDs already imported into any album."""
        async with self._db.reader() as conn:
            rows = await self._fetchall(conn, "SELECT DISTINCT asset_id FROM asset")
        return {row["asset_id"] for row in rows}

    async def update_asset(self, asset_id: str, fields: AssetUpdate) -> None:
        """Partially update caption/metadata.

        Raises:
            NotFound: If the asset does not exist
        """
        updates = fields.model_dump(exclude_unset=True)
        # NOT NULL columns: None means "leave as is"
        for column in NOT_NULL_COLUMNS:
            if column in updates and updates[column] is None:
                del updates[column]

        async with self._db.transaction() as conn:
            album_id = await self._owning_album(conn, asset_id)
            set_clause = "".join(f"{column} = ?, " for column in updates)
            await conn.execute(
                f"UPDATE asset SET {set_clause}updated_at = MAX(?, created_at) WHERE id = ?",
                (*updates.values(), utc_timestamp(), asset_id)
            )
            await touch_album(conn, album_id)

    async def delete_asset(self, asset_id: str) -> None:
        """Delete an asset, clearing the album cover if it pointed at it.

        Raises:
            NotFound: If the asset does not exist
        """
        async with self._db.transaction() as conn:
            album_id = await self._owning_album(conn, asset_id)
            await self._remove(conn, [asset_id], {album_id})

    async def delete_assets(self, asset_ids: Iterable[str]) -> int:
        """Delete several assets in one transaction; unknown IDs are skipped.

        Returns:
            Number of assets deleted
        """
        async with self._db.transaction() as conn:
            found, albums = await self._locate(conn, asset_ids)
            await self._remove(conn, found, albums)
        return len(found)

    async def delete_assets_by_media_id(self, media_id: str) -> int:
        """Delete every row referring to a device media item.

        Used when the item disappears from the device library.

        Returns:
            Number of assets deleted
        """
        async with self._db.transaction() as conn:
            rows = await self._fetchall(
                conn, "SELECT id, album_id FROM asset WHERE asset_id = ?", (media_id,)
            )
            found = [row["id"] for row in rows]
            await self._remove(conn, found, {row["album_id"] for row in rows})
        if found:
            logger.info("Removed %d assets for vanished media %s", len(found), media_id)
        return len(found)

    async def move_assets_to_album(self, asset_ids: list[str], target_album_id: str) -> None:
        """Move assets to another album, appended in the given order.

        Covers in the source albums that pointed at moved assets are cleared
        and the source albums are re-densified.

        Raises:
            NotFound: If the target album or any asset does not exist
        """
        ordered = list(dict.fromkeys(asset_ids))

        async with self._db.transaction() as conn:
            await self._require_album(conn, target_album_id)
            sources: dict[str, str] = {}
            for asset_id in ordered:
                sources[asset_id] = await self._owning_album(conn, asset_id)

            moving = [asset_id for asset_id in ordered if sources[asset_id] != target_album_id]
            if not moving:
                return

            position = await self._next_order_index(conn, target_album_id)
            now = utc_timestamp()
            for asset_id in moving:
                await conn.execute(
                    """UPDATE asset SET album_id = ?, order_index = ?,
                              updated_at = MAX(?, created_at)
                       WHERE id = ?""",
                    (target_album_id, position, now, asset_id)
                )
                await conn.execute(
                    "UPDATE album SET cover_asset_id = NULL WHERE cover_asset_id = ? AND id != ?",
                    (asset_id, target_album_id)
                )
                position += 1

            for album_id in {sources[asset_id] for asset_id in moving}:
                await self._compact(conn, album_id)
                await touch_album(conn, album_id)
            await touch_album(conn, target_album_id)

    async def update_asset_order(self, album_id: str, ordered_asset_ids: list[str]) -> None:
        """Reassign order_index to match the given sequence.

        Raises:
            NotFound: If the album does not exist
            InvalidArgument: If the IDs are not exactly the album's asset set
        """
        async with self._db.transaction() as conn:
            await self._require_album(conn, album_id)
            rows = await self._fetchall(conn, "SELECT id FROM asset WHERE album_id = ?", (album_id,))
            current = {row["id"] for row in rows}

            if len(ordered_asset_ids) != len(set(ordered_asset_ids)):
                raise InvalidArgument("Reorder list contains duplicate asset IDs")
            if set(ordered_asset_ids) != current:
                raise InvalidArgument(
                    f"Reorder list does not match the assets of album {album_id}"
                )

            await conn.executemany(
                "UPDATE asset SET order_index = ? WHERE id = ?",
                [
                    (config.ORDER_INDEX_BASE + position, asset_id)
                    for position, asset_id in enumerate(ordered_asset_ids)
                ]
            )
            await touch_album(conn, album_id)

    async def set_album_cover(self, album_id: str, asset_id: Optional[str]) -> None:
        """Set album cover asset. Pass None to clear it.

        Raises:
            NotFound: If the album does not exist
            InvalidReference: If the asset is not owned by the album
        """
        async with self._db.transaction() as conn:
            await self._require_album(conn, album_id)
            if asset_id is not None:
                row = await self._fetchone(conn, "SELECT album_id FROM asset WHERE id = ?", (asset_id,))
                if not row or row["album_id"] != album_id:
                    raise InvalidReference(f"Asset {asset_id} is not owned by album {album_id}")
            await touch_album(conn, album_id, cover_asset_id=asset_id)

    # =========================================================================
    # Private helpers
    # =========================================================================

    async def _require_album(self, conn: aiosqlite.Connection, album_id: str) -> None:
        if not await self._exists(conn, "album", album_id):
            raise NotFound("album", album_id)

    async def _owning_album(self, conn: aiosqlite.Connection, asset_id: str) -> str:
        row = await self._fetchone(conn, "SELECT album_id FROM asset WHERE id = ?", (asset_id,))
        if not row:
            raise NotFound("asset", asset_id)
        return row["album_id"]

    async def _locate(
        self,
        conn: aiosqlite.Connection,
        asset_ids: Iterable[str]
    ) -> tuple[list[str], set[str]]:
        """Existing IDs among asset_ids, plus the albums owning them."""
        found, albums = [], set()
        for asset_id in dict.fromkeys(asset_ids):
            row = await self._fetchone(conn, "SELECT album_id FROM asset WHERE id = ?", (asset_id,))
            if row:
                found.append(asset_id)
                albums.add(row["album_id"])
        return found, albums

    async def _remove(self, conn: aiosqlite.Connection, asset_ids: list[str], album_ids: set[str]) -> None:
        for asset_id in asset_ids:
            await conn.execute("DELETE FROM asset WHERE id = ?", (asset_id,))
            await conn.execute(
                "UPDATE album SET cover_asset_id = NULL WHERE cover_asset_id = ?",
                (asset_id,)
            )
        for album_id in album_ids:
            await self._compact(conn, album_id)
            await touch_album(conn, album_id)

    async def _next_order_index(self, conn: aiosqlite.Connection, album_id: str) -> int:
        row = await self._fetchone(
            conn,
            "SELECT MAX(order_index) AS max_pos FROM asset WHERE album_id = ?",
            (album_id,)
        )
        if row is None or row["max_pos"] is None:
            return config.ORDER_INDEX_BASE
        return row["max_pos"] + 1

    async def _compact(self, conn: aiosqlite.Connection, album_id: str) -> None:
        """Renumber an album's assets to the dense sequence, keeping order."""
        rows = await self._fetchall(
            conn,
            "SELECT id, order_index FROM asset WHERE album_id = ? ORDER BY order_index, rowid",
            (album_id,)
        )
        changes = [
            (config.ORDER_INDEX_BASE + position, row["id"])
            for position, row in enumerate(rows)
            if row["order_index"] != config.ORDER_INDEX_BASE + position
        ]
        if changes:
            await conn.executemany("UPDATE asset SET order_index = ? WHERE id = ?", changes)
