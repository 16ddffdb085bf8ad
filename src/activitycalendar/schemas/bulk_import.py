"""Bulk day import schemas."""

from datetime import date
from typing import Literal

from pydantic import Field, model_validator

from activitycalendar.schemas.base import BaseSchema


class BulkImportRequest(BaseSchema):
    """Which dates to generate day records for."""

    mode: Literal["months", "range"] = "months"
    month_ids: list[str] = Field(default_factory=list)
    start_date: date | None = None
    end_date: date | None = None
    include_weekends: bool = True
    include_holidays: bool = True

    @model_validator(mode="after")
    def check_range(self) -> "BulkImportRequest":
        if self.mode == "range":
            if self.start_date is None or self.end_date is None:
                raise ValueError("startDate and endDate are required for range imports")
            if self.end_date < self.start_date:
                raise ValueError("endDate must not be before startDate")
        return self


class ImportPreviewItem(BaseSchema):
    date: str
    month_id: str
    detail: str
    source: str = ""


class BulkImportResult(BaseSchema):
    success: int = 0
    failed: int = 0
    skipped: int = 0


class HolidayResponse(BaseSchema):
    date: str
    name: str
    source: str
    source_url: str | None = None
