"""Settings service - cached access to user preferences.

This service encapsulates:
- Caption visibility in the media viewer
- Interface language
- Theme

The settings row stays the single source of truth; the in-memory copy is a
read-through cache dropped on every update.
"""
import asyncio
from typing import Optional

from ...infrastructure.repositories import SettingsRepository
from ...models import Language, Settings, SettingsUpdate, Theme


class SettingsService:
    """Service for user settings and preferences."""

    def __init__(self, settings_repository: SettingsRepository):
        self.settings_repo = settings_repository
        self._cache: Optional[Settings] = None
        self._lock = asyncio.Lock()

    async def get_settings(self) -> Settings:
        """Get settings, loading them from the store on a cache miss."""
        async with self._lock:
            if self._cache is None:
                self._cache = await self.settings_repo.get_settings()
            return self._cache.model_copy()

    async def update_settings(self, fields: SettingsUpdate) -> Settings:
        """Write settings and invalidate the cache."""
        async with self._lock:
            self._cache = None
            updated = await self.settings_repo.update_settings(fields)
        return updated

    def invalidate(self) -> None:
        self._cache = None

    # =========================================================================
    # Shortcuts used by the viewer and settings screens
    # =========================================================================

    async def toggle_caption(self) -> bool:
        """Flip caption visibility.

        Returns:
            True if captions are now shown
        """
        current = await self.get_settings()
        updated = await self.update_settings(SettingsUpdate(caption_open=not current.caption_open))
        return updated.caption_open

    async def set_language(self, lang: Optional[Language]) -> Settings:
        return await self.update_settings(SettingsUpdate(lang=lang))

    async def set_theme(self, theme: Theme) -> Settings:
        return await self.update_settings(SettingsUpdate(theme=theme))
