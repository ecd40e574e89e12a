"""Application services - business logic layer."""

from .settings_service import SettingsService

__all__ = [
    "SettingsService",
]
