"""Site settings API endpoints."""

from fastapi import APIRouter, Depends, Request

from activitycalendar.api.deps import default_rate_limit, get_settings_service, limiter
from activitycalendar.schemas.calendar import SiteSettings, SuccessResponse
from activitycalendar.services.calendar_service import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SiteSettings)
async def get_site_settings(service: SettingsService = Depends(get_settings_service)):
    return await service.get()


@router.post("", response_model=SuccessResponse)
@limiter.limit(default_rate_limit)
async def replace_site_settings(
    request: Request,
    data: SiteSettings,
    service: SettingsService = Depends(get_settings_service),
):
    await service.replace(data)
    return SuccessResponse()
