"""Pydantic schemas for the ActivityCalendar API."""

from activitycalendar.schemas.attachment import (
    Attachment,
    UploadResponse,
    UploadErrorResponse,
    DeleteFileRequest,
    DeleteFileResponse,
)
from activitycalendar.schemas.calendar import (
    User,
    UserPublic,
    LoginRequest,
    LoginResponse,
    Year,
    Month,
    DayEntry,
    Day,
    SiteSettings,
    SuccessResponse,
)
from activitycalendar.schemas.bulk_import import (
    BulkImportRequest,
    BulkImportResult,
    ImportPreviewItem,
    HolidayResponse,
)

__all__ = [
    "Attachment",
    "UploadResponse",
    "UploadErrorResponse",
    "DeleteFileRequest",
    "DeleteFileResponse",
    "User",
    "UserPublic",
    "LoginRequest",
    "LoginResponse",
    "Year",
    "Month",
    "DayEntry",
    "Day",
    "SiteSettings",
    "SuccessResponse",
    "BulkImportRequest",
    "BulkImportResult",
    "ImportPreviewItem",
    "HolidayResponse",
]
