"""Month API endpoints."""

from fastapi import APIRouter, Depends, Request

from activitycalendar.api.deps import default_rate_limit, get_month_service, limiter
from activitycalendar.schemas.calendar import Month, SuccessResponse
from activitycalendar.services.calendar_service import MonthService

router = APIRouter(prefix="/months", tags=["months"])


@router.get("", response_model=list[Month])
async def list_months(service: MonthService = Depends(get_month_service)):
    """List months sorted by date, naming any that have no name."""
    return await service.get_all()


@router.post("", response_model=SuccessResponse)
@limiter.limit(default_rate_limit)
async def replace_months(
    request: Request,
    months: list[Month],
    service: MonthService = Depends(get_month_service),
):
    await service.replace_all(months)
    return SuccessResponse()
