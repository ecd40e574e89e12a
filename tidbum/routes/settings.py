"""Settings routes - caption visibility, language and theme."""
from fastapi import APIRouter, Depends

from ..application.services import SettingsService
from ..dependencies import get_settings_service
from ..models import Settings, SettingsUpdate

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=Settings)
async def get_settings(service: SettingsService = Depends(get_settings_service)):
    return await service.get_settings()


@router.patch("", response_model=Settings)
async def update_settings(data: SettingsUpdate, service: SettingsService = Depends(get_settings_service)):
    """Merge the given fields into the settings row."""
    return await service.update_settings(data)
