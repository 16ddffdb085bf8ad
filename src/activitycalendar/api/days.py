"""Day record API endpoints."""

from fastapi import APIRouter, Depends, Request

from activitycalendar.api.deps import (
    default_rate_limit,
    get_bulk_import_service,
    get_day_service,
    limiter,
)
from activitycalendar.schemas.bulk_import import (
    BulkImportRequest,
    BulkImportResult,
    ImportPreviewItem,
)
from activitycalendar.schemas.calendar import Day, SuccessResponse
from activitycalendar.services.bulk_import import BulkImportService
from activitycalendar.services.calendar_service import DayService

router = APIRouter(prefix="/days", tags=["days"])


@router.get("", response_model=list[Day], response_model_exclude_none=True)
async def list_days(service: DayService = Depends(get_day_service)):
    """List every day record."""
    return await service.get_all()


@router.post("", response_model=SuccessResponse)
@limiter.limit(default_rate_limit)
async def replace_days(
    request: Request,
    days: list[Day],
    service: DayService = Depends(get_day_service),
):
    """Replace all day records."""
    await service.replace_all(days)
    return SuccessResponse()


@router.put("", response_model=SuccessResponse)
@limiter.limit(default_rate_limit)
async def upsert_day(
    request: Request,
    day: Day,
    service: DayService = Depends(get_day_service),
):
    """Update one day record, appending it if its id is new."""
    await service.upsert(day)
    return SuccessResponse()


@router.post("/bulk-import/preview", response_model=list[ImportPreviewItem])
async def preview_bulk_import(
    data: BulkImportRequest,
    service: BulkImportService = Depends(get_bulk_import_service),
):
    """Show which holiday / weekend days an import would create."""
    return await service.preview(data)


@router.post("/bulk-import", response_model=BulkImportResult)
@limiter.limit(default_rate_limit)
async def run_bulk_import(
    request: Request,
    data: BulkImportRequest,
    service: BulkImportService = Depends(get_bulk_import_service),
):
    """Create holiday / weekend days that do not exist yet."""
    return await service.run(data)
