"""Holiday preset endpoint."""

from fastapi import APIRouter

from activitycalendar.schemas.bulk_import import HolidayResponse
from activitycalendar.services.holidays import holidays_for_year

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("", response_model=list[HolidayResponse])
async def list_holidays(year: int | None = None):
    """Bundled public holidays, optionally for one Gregorian year."""
    return [HolidayResponse(**h._asdict()) for h in holidays_for_year(year)]
