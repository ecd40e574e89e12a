"""Settings repository - the single user preferences row."""
from ...models import Settings, SettingsUpdate
from .base import AsyncRepository

SETTINGS_ROW_ID = 1


class SettingsRepository(AsyncRepository):
    """Repository for the singleton settings row.

    The row is created lazily on first write; until then reads return
    defaults (first-run case).
    """

    async def get_settings(self) -> Settings:
        async with self._db.reader() as conn:
            row = await self._fetchone(
                conn,
                "SELECT caption_open, lang, theme FROM settings WHERE id = ?",
                (SETTINGS_ROW_ID,)
            )
        if not row:
            return Settings()
        return Settings(caption_open=bool(row["caption_open"]), lang=row["lang"], theme=row["theme"])

    async def update_settings(self, fields: SettingsUpdate) -> Settings:
        """Merge the given fields into the settings row, creating it if absent.

        Returns:
            Settings after the merge
        """
        updates = fields.model_dump(exclude_unset=True, mode="json")
        # theme is NOT NULL; lang may be cleared to follow the system locale
        if "theme" in updates and updates["theme"] is None:
            del updates["theme"]
        if "caption_open" in updates:
            if updates["caption_open"] is None:
                del updates["caption_open"]
            else:
                updates["caption_open"] = int(updates["caption_open"])

        async with self._db.transaction() as conn:
            await conn.execute(
                "INSERT INTO settings (id) VALUES (?) ON CONFLICT(id) DO NOTHING",
                (SETTINGS_ROW_ID,)
            )
            if updates:
                set_clause = ", ".join(f"{column} = ?" for column in updates)
                await conn.execute(
                    f"UPDATE settings SET {set_clause} WHERE id = ?",
                    (*updates.values(), SETTINGS_ROW_ID)
                )
            row = await self._fetchone(
                conn,
                "SELECT caption_open, lang, theme FROM settings WHERE id = ?",
                (SETTINGS_ROW_ID,)
            )

        return Settings(caption_open=bool(row["caption_open"]), lang=row["lang"], theme=row["theme"])
