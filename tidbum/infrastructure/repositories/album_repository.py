"""Album repository - CRUD over the album tree.

Albums form a hierarchy through ``parent_album_id``. This repository enforces
parent existence on create, the cover-ownership rule on update, the no-cycle
rule on re-parenting, and owns the cascading delete.
"""
import logging
from typing import Optional

import aiosqlite

from ...errors import InvalidReference, NotFound
from ...models import Album, AlbumRef, AlbumSummary, AlbumUpdate, Asset
from ..database import Database, utc_timestamp
from ..identifiers import IdFactory, insert_with_new_id, new_id
from .aggregate_queries import AggregateQueryEngine
from .base import AsyncRepository

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = """a.id, a.name, a.description, a.parent_album_id, a.cover_asset_id,
                     a.created_at, a.updated_at, cover.uri AS cover_uri"""


async def touch_album(conn: aiosqlite.Connection, album_id: str, **columns) -> None:
    """Write columns (if any) and refresh updated_at, never below created_at."""
    set_clause = "".join(f"{column} = ?, " for column in columns)
    await conn.execute(
        f"UPDATE album SET {set_clause}updated_at = MAX(?, created_at) WHERE id = ?",
        (*columns.values(), utc_timestamp(), album_id)
    )


class AlbumRepository(AsyncRepository):
    """Repository for album entity operations.

    Albums form a tree structure where each album can have:
    - One parent (optional, None for top-level albums)
    - Multiple children (sub-albums)
    - An ordered list of directly owned assets

    Examples:
        >>> repo = AlbumRepository(db)
        >>> trip = await repo.create_album("Trip")
        >>> day1 = await repo.create_album("Day1", parent_album_id=trip)
        >>> albums = await repo.get_top_level_albums()  # with recursive counts
    """

    def __init__(
        self,
        database: Database,
        id_factory: IdFactory = new_id,
        aggregates: Optional[AggregateQueryEngine] = None
    ):
        super().__init__(database, id_factory)
        self.aggregates = aggregates or AggregateQueryEngine(database, id_factory)

    async def create_album(
        self,
        name: str,
        description: str = "",
        parent_album_id: Optional[str] = None
    ) -> str:
        """Create a new album.

        Args:
            name: Album name (validated by the caller)
            description: Optional description
            parent_album_id: Parent album ID (None for top level)

        Returns:
            New album ID

        Raises:
            NotFound: If the parent album does not exist
        """
        async with self._db.transaction() as conn:
            if parent_album_id is not None and not await self._exists(conn, "album", parent_album_id):
                raise NotFound("album", parent_album_id)

            now = utc_timestamp()
            album_id = await insert_with_new_id(
                conn,
                "album",
                {
                    "name": name,
                    "description": description or "",
                    "parent_album_id": parent_album_id,
                    "cover_asset_id": None,
                    "created_at": now,
                    "updated_at": now,
                },
                id_factory=self._new_id
            )

        logger.debug("Created album %s (parent=%s)", album_id, parent_album_id)
        return album_id

    async def get_album_by_id(self, album_id: str) -> Optional[Album]:
        """Get album with its assets (ordered) and direct sub-album IDs.

        Returns:
            Album or None if it does not exist
        """
        async with self._db.reader() as conn:
            return await self._load_album(conn, album_id)

    async def get_top_level_albums(self) -> list[AlbumSummary]:
        """Get albums without a parent, in creation order, with recursive counts."""
        async with self._db.reader() as conn:
            rows = await self._fetchall(
                conn,
                f"""SELECT {SUMMARY_COLUMNS}
                    FROM album a
                    LEFT JOIN asset cover ON cover.id = a.cover_asset_id
                    WHERE a.parent_album_id IS NULL
                    ORDER BY a.created_at, a.rowid"""
            )
            return await self._summarize(conn, rows)

    async def get_sub_albums(self, album_id: str) -> list[AlbumSummary]:
        """Get direct children of an album, with recursive counts.

        Raises:
            NotFound: If the album does not exist
        """
        async with self._db.reader() as conn:
            if not await self._exists(conn, "album", album_id):
                raise NotFound("album", album_id)
            rows = await self._fetchall(
                conn,
                f"""SELECT {SUMMARY_COLUMNS}
                    FROM album a
                    LEFT JOIN asset cover ON cover.id = a.cover_asset_id
                    WHERE a.parent_album_id = ?
                    ORDER BY a.created_at, a.rowid""",
                (album_id,)
            )
            return await self._summarize(conn, rows)

    async def get_parent_album(self, album_id: str) -> Optional[Album]:
        """Get the parent of an album.

        Returns:
            Parent album, or None for a top-level album

        Raises:
            NotFound: If the album does not exist
        """
        async with self._db.reader() as conn:
            row = await self._fetchone(
                conn, "SELECT parent_album_id FROM album WHERE id = ?", (album_id,)
            )
            if not row:
                raise NotFound("album", album_id)
            if row["parent_album_id"] is None:
                return None
            return await self._load_album(conn, row["parent_album_id"])

    async def get_album_path(self, album_id: str) -> list[AlbumRef]:
        """Get breadcrumb path from the top-level album down to this one.

        Raises:
            NotFound: If the album does not exist
        """
        path: list[AlbumRef] = []
        seen: set[str] = set()
        current_id = album_id

        async with self._db.reader() as conn:
            while current_id and current_id not in seen:
                seen.add(current_id)
                row = await self._fetchone(
                    conn,
                    "SELECT id, name, parent_album_id FROM album WHERE id = ?",
                    (current_id,)
                )
                if not row:
                    break
                path.insert(0, AlbumRef(id=row["id"], name=row["name"]))
                current_id = row["parent_album_id"]

        if not path:
            raise NotFound("album", album_id)
        return path

    async def update_album(self, album_id: str, fields: AlbumUpdate) -> None:
        """Partially update an album.

        Only fields explicitly set on ``fields`` are written; setting
        ``cover_asset_id`` or ``parent_album_id`` to None clears it.

        Raises:
            NotFound: If the album (or a new parent) does not exist
            InvalidReference: If the cover asset belongs to another album,
                or the new parent is the album itself or a descendant
        """
        updates = fields.model_dump(exclude_unset=True)

        async with self._db.transaction() as conn:
            if not await self._exists(conn, "album", album_id):
                raise NotFound("album", album_id)
            if not updates:
                return

            if updates.get("cover_asset_id") is not None:
                await self._check_cover(conn, album_id, updates["cover_asset_id"])
            if "parent_album_id" in updates:
                await self._check_new_parent(conn, album_id, updates["parent_album_id"])
            if "name" in updates and updates["name"] is None:
                del updates["name"]
            if "description" in updates and updates["description"] is None:
                updates["description"] = ""

            await touch_album(conn, album_id, **updates)

    async def delete_album(self, album_id: str) -> None:
        """Delete album with all sub-albums and their assets, atomically.

        Raises:
            NotFound: If the album does not exist
        """
        async with self._db.transaction() as conn:
            if not await self._exists(conn, "album", album_id):
                raise NotFound("album", album_id)
            await self.aggregates.delete_subtree(conn, album_id)

    # =========================================================================
    # Connection-scoped helpers
    # =========================================================================

    async def _load_album(self, conn: aiosqlite.Connection, album_id: str) -> Optional[Album]:
        row = await self._fetchone(conn, "SELECT * FROM album WHERE id = ?", (album_id,))
        if not row:
            return None

        assets = await self._fetchall(
            conn,
            "SELECT * FROM asset WHERE album_id = ? ORDER BY order_index",
            (album_id,)
        )
        children = await self._fetchall(
            conn,
            "SELECT id FROM album WHERE parent_album_id = ? ORDER BY created_at, rowid",
            (album_id,)
        )
        return Album(
            **row,
            assets=[Asset(**asset) for asset in assets],
            sub_album_ids=[child["id"] for child in children]
        )

    async def _check_cover(self, conn: aiosqlite.Connection, album_id: str, asset_id: str) -> None:
        row = await self._fetchone(conn, "SELECT album_id FROM asset WHERE id = ?", (asset_id,))
        if not row or row["album_id"] != album_id:
            raise InvalidReference(f"Asset {asset_id} is not owned by album {album_id}")

    async def _check_new_parent(
        self,
        conn: aiosqlite.Connection,
        album_id: str,
        parent_id: Optional[str]
    ) -> None:
        if parent_id is None:
            return
        if parent_id == album_id:
            raise InvalidReference(f"Album {album_id} cannot be its own parent")
        if not await self._exists(conn, "album", parent_id):
            raise NotFound("album", parent_id)
        if parent_id in await self.aggregates.collect_sub_album_ids(conn, album_id):
            raise InvalidReference(f"Cannot move album {album_id} into its own sub-album {parent_id}")

    async def _summarize(self, conn: aiosqlite.Connection, rows: list[dict]) -> list[AlbumSummary]:
        if not rows:
            return []
        totals = await self.aggregates.count_assets_for_trees(conn, [row["id"] for row in rows])
        return [AlbumSummary(**row, total_assets=totals[row["id"]]) for row in rows]
