"""Generate day records for holidays and weekends in bulk."""

import calendar
import logging
import uuid
from collections.abc import Iterator
from datetime import date, timedelta

from activitycalendar.schemas.bulk_import import (
    BulkImportRequest,
    BulkImportResult,
    ImportPreviewItem,
)
from activitycalendar.schemas.calendar import Day, DayEntry, Month
from activitycalendar.services.calendar_service import DayService, MonthService
from activitycalendar.services.holidays import holiday_on
from activitycalendar.services.sheets import SheetsError, SheetsNotConfiguredError

logger = logging.getLogger(__name__)

SATURDAY_LABEL = "วันเสาร์"
SUNDAY_LABEL = "วันอาทิตย์"


def _parse_month(value: str) -> tuple[int, int] | None:
    try:
        year, month = (int(part) for part in value.split("-")[:2])
    except ValueError:
        return None
    if not 1 <= month <= 12:
        return None
    return year, month


class BulkImportService:
    """Plans and creates holiday / weekend day records.

    A date gets a record when it is a holiday (if holidays are included) or
    a Saturday/Sunday (if weekends are included) and no day already exists
    for the same month and date.
    """

    def __init__(self, months: MonthService, days: DayService):
        self.months = months
        self.days = days

    def _dates(self, request: BulkImportRequest, months: list[Month]) -> Iterator[tuple[Month, date]]:
        if request.mode == "months":
            by_id = {m.id: m for m in months}
            for month_id in request.month_ids:
                month = by_id.get(month_id)
                parsed = _parse_month(month.month) if month else None
                if parsed is None:
                    continue
                year, month_number = parsed
                days_in_month = calendar.monthrange(year, month_number)[1]
                for day in range(1, days_in_month + 1):
                    yield month, date(year, month_number, day)
        else:
            by_value = {m.month: m for m in months}
            current = request.start_date
            while current <= request.end_date:
                month = by_value.get(current.strftime("%Y-%m"))
                if month is not None:
                    yield month, current
                current += timedelta(days=1)

    @staticmethod
    def _describe(request: BulkImportRequest, day: date) -> tuple[str, str]:
        """Return (detail, source) for a date; empty detail means skip."""
        if request.include_holidays:
            holiday = holiday_on(day)
            if holiday is not None:
                return holiday.name, holiday.source
        if request.include_weekends:
            weekday = day.weekday()
            if weekday == calendar.SATURDAY:
                return SATURDAY_LABEL, ""
            if weekday == calendar.SUNDAY:
                return SUNDAY_LABEL, ""
        return "", ""

    async def _plan(self, request: BulkImportRequest) -> tuple[list[ImportPreviewItem], int, list[Day]]:
        months = await self.months.get_all()
        existing_days = await self.days.get_all()
        existing = {(d.month_id, d.date) for d in existing_days}

        planned = []
        skipped = 0
        for month, day in self._dates(request, months):
            date_str = day.isoformat()
            if (month.id, date_str) in existing:
                skipped += 1
                continue
            detail, source = self._describe(request, day)
            if detail:
                planned.append(
                    ImportPreviewItem(date=date_str, month_id=month.id, detail=detail, source=source)
                )
        return planned, skipped, existing_days

    async def preview(self, request: BulkImportRequest) -> list[ImportPreviewItem]:
        planned, _, _ = await self._plan(request)
        return planned

    async def run(self, request: BulkImportRequest) -> BulkImportResult:
        """Create the planned days with a single write of the Days sheet."""
        planned, skipped, existing_days = await self._plan(request)
        new_days = [
            Day(
                id=str(uuid.uuid4()),
                month_id=item.month_id,
                date=item.date,
                entries=[
                    DayEntry(
                        id=str(uuid.uuid4()),
                        detail=f"{item.detail} ({item.source})" if item.source else item.detail,
                    )
                ],
            )
            for item in planned
        ]
        if not new_days:
            return BulkImportResult(success=0, failed=0, skipped=skipped)

        try:
            await self.days.replace_all(existing_days + new_days)
        except SheetsNotConfiguredError:
            raise
        except SheetsError:
            logger.exception("Bulk import could not write %d days", len(new_days))
            return BulkImportResult(success=0, failed=len(new_days), skipped=skipped)

        logger.info("Bulk import created %d days (%d skipped)", len(new_days), skipped)
        return BulkImportResult(success=len(new_days), failed=0, skipped=skipped)
