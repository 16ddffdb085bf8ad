"""Business logic services for ActivityCalendar."""

from activitycalendar.services.upload_service import UploadService
from activitycalendar.services.calendar_service import (
    UserService,
    YearService,
    MonthService,
    DayService,
    SettingsService,
)
from activitycalendar.services.bulk_import import BulkImportService

__all__ = [
    "UploadService",
    "UserService",
    "YearService",
    "MonthService",
    "DayService",
    "SettingsService",
    "BulkImportService",
]
