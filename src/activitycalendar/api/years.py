"""Year API endpoints."""

from fastapi import APIRouter, Depends, Request

from activitycalendar.api.deps import default_rate_limit, get_year_service, limiter
from activitycalendar.schemas.calendar import SuccessResponse, Year
from activitycalendar.services.calendar_service import YearService

router = APIRouter(prefix="/years", tags=["years"])


@router.get("", response_model=list[Year])
async def list_years(service: YearService = Depends(get_year_service)):
    return await service.get_all()


@router.post("", response_model=SuccessResponse)
@limiter.limit(default_rate_limit)
async def replace_years(
    request: Request,
    years: list[Year],
    service: YearService = Depends(get_year_service),
):
    await service.replace_all(years)
    return SuccessResponse()
