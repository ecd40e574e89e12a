"""Aggregate query engine - recursive statistics over the album tree.

No denormalized counters are stored; counts are computed on read. The tree
is loaded with a single scan into a parent -> children index and walked with
an explicit worklist, so deep hierarchies cost neither stack depth nor one
query per level.
"""
import logging
from collections import defaultdict, deque
from typing import Iterable

import aiosqlite

from ...errors import NotFound
from ...models import AssetCount, MediaType
from .base import AsyncRepository, chunked, placeholders

logger = logging.getLogger(__name__)

ChildIndex = dict[str, list[str]]


def descendants(children: ChildIndex, album_id: str) -> set[str]:
    """All albums below ``album_id`` (excluding itself).

    The ``seen`` check keeps the walk finite even if corrupt data ever
    linked an album into its own subtree.
    """
    found: set[str] = set()
    queue = deque(children.get(album_id, ()))
    while queue:
        current = queue.popleft()
        if current in found or current == album_id:
            continue
        found.add(current)
        queue.extend(children.get(current, ()))
    return found


class AggregateQueryEngine(AsyncRepository):
    """Recursive sub-album lookup, rollup counts and subtree deletion.

    Examples:
        >>> engine = AggregateQueryEngine(db)
        >>> await engine.get_all_sub_album_ids(trip_id)
        {'day1-uuid', 'day2-uuid'}
        >>> await engine.get_album_total_asset_count(trip_id)
        AssetCount(photo=3, video=0)
    """

    async def get_all_sub_album_ids(self, album_id: str) -> set[str]:
        """Get every descendant album ID.

        Raises:
            NotFound: If the album does not exist
        """
        async with self._db.reader() as conn:
            await self._require_album(conn, album_id)
            return await self.collect_sub_album_ids(conn, album_id)

    async def get_album_total_asset_count(self, album_id: str) -> AssetCount:
        """Count assets owned by the album and all its descendants.

        Raises:
            NotFound: If the album does not exist
        """
        async with self._db.reader() as conn:
            await self._require_album(conn, album_id)
            return await self.count_assets_recursive(conn, album_id)

    # =========================================================================
    # Connection-scoped helpers (used inside other repositories' units of work)
    # =========================================================================

    async def build_child_index(self, conn: aiosqlite.Connection) -> ChildIndex:
        """Load the whole parent -> children adjacency in one scan."""
        rows = await self._fetchall(
            conn,
            """SELECT id, parent_album_id FROM album
               WHERE parent_album_id IS NOT NULL
               ORDER BY created_at, rowid"""
        )
        children: ChildIndex = defaultdict(list)
        for row in rows:
            children[row["parent_album_id"]].append(row["id"])
        return children

    async def collect_sub_album_ids(self, conn: aiosqlite.Connection, album_id: str) -> set[str]:
        children = await self.build_child_index(conn)
        return descendants(children, album_id)

    async def count_assets(
        self,
        conn: aiosqlite.Connection,
        album_ids: Iterable[str]
    ) -> AssetCount:
        """Count assets directly owned by any of the given albums."""
        ids = list(album_ids)
        count = AssetCount()
        for chunk in chunked(ids):
            rows = await self._fetchall(
                conn,
                f"""SELECT media_type, COUNT(*) AS total FROM asset
                    WHERE album_id IN ({placeholders(chunk)})
                    GROUP BY media_type""",
                chunk
            )
            for row in rows:
                if row["media_type"] == MediaType.PHOTO.value:
                    count.photo += row["total"]
                elif row["media_type"] == MediaType.VIDEO.value:
                    count.video += row["total"]
        return count

    async def count_assets_recursive(self, conn: aiosqlite.Connection, album_id: str) -> AssetCount:
        sub_ids = await self.collect_sub_album_ids(conn, album_id)
        return await self.count_assets(conn, [album_id, *sub_ids])

    async def count_assets_for_trees(
        self,
        conn: aiosqlite.Connection,
        album_ids: list[str]
    ) -> dict[str, AssetCount]:
        """Recursive counts for several albums with two queries total.

        Used by album listings, where one query per album would
        multiply round trips.
        """
        children = await self.build_child_index(conn)
        rows = await self._fetchall(
            conn,
            "SELECT album_id, media_type, COUNT(*) AS total FROM asset GROUP BY album_id, media_type"
        )
        direct: dict[str, AssetCount] = defaultdict(AssetCount)
        for row in rows:
            if row["media_type"] == MediaType.PHOTO.value:
                direct[row["album_id"]].photo += row["total"]
            elif row["media_type"] == MediaType.VIDEO.value:
                direct[row["album_id"]].video += row["total"]

        totals = {}
        for album_id in album_ids:
            total = AssetCount()
            for member in {album_id} | descendants(children, album_id):
                if member in direct:
                    total.photo += direct[member].photo
                    total.video += direct[member].video
            totals[album_id] = total
        return totals

    async def delete_subtree(self, conn: aiosqlite.Connection, album_id: str) -> tuple[int, int]:
        """Delete an album, its descendants and all their assets.

        Must run inside the caller's transaction; assets go first so no
        asset row ever points at a deleted album.

        Returns:
            (albums deleted, assets deleted)
        """
        album_ids = [album_id, *await self.collect_sub_album_ids(conn, album_id)]

        assets_deleted = 0
        for chunk in chunked(album_ids):
            cursor = await conn.execute(
                f"DELETE FROM asset WHERE album_id IN ({placeholders(chunk)})",
                chunk
            )
            assets_deleted += cursor.rowcount

        albums_deleted = 0
        for chunk in chunked(album_ids):
            cursor = await conn.execute(
                f"DELETE FROM album WHERE id IN ({placeholders(chunk)})",
                chunk
            )
            albums_deleted += cursor.rowcount

        logger.info(
            "Deleted album subtree %s: %d albums, %d assets",
            album_id, albums_deleted, assets_deleted
        )
        return albums_deleted, assets_deleted

    async def _require_album(self, conn: aiosqlite.Connection, album_id: str) -> None:
        if not await self._exists(conn, "album", album_id):
            raise NotFound("album", album_id)
