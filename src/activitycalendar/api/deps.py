"""Shared dependencies and rate limiting for API routes."""

from fastapi import Depends
from slowapi import Limiter
from slowapi.util import get_remote_address

from activitycalendar.config import get_settings
from activitycalendar.services.bulk_import import BulkImportService
from activitycalendar.services.calendar_service import (
    DayService,
    MonthService,
    SettingsService,
    UserService,
    YearService,
)
from activitycalendar.services.sheets import SheetStore, get_sheet_store

limiter = Limiter(key_func=get_remote_address)

# Effectively unlimited when rate limiting is disabled
UNLIMITED = "1000000/minute"


def default_rate_limit() -> str:
    settings = get_settings()
    return settings.rate_limit_default if settings.rate_limit_enabled else UNLIMITED


def upload_rate_limit() -> str:
    settings = get_settings()
    return settings.rate_limit_uploads if settings.rate_limit_enabled else UNLIMITED


def auth_rate_limit() -> str:
    settings = get_settings()
    return settings.rate_limit_auth if settings.rate_limit_enabled else UNLIMITED


def get_user_service(store: SheetStore | None = Depends(get_sheet_store)) -> UserService:
    return UserService(store)


def get_year_service(store: SheetStore | None = Depends(get_sheet_store)) -> YearService:
    return YearService(store)


def get_month_service(store: SheetStore | None = Depends(get_sheet_store)) -> MonthService:
    return MonthService(store)


def get_day_service(store: SheetStore | None = Depends(get_sheet_store)) -> DayService:
    return DayService(store)


def get_settings_service(store: SheetStore | None = Depends(get_sheet_store)) -> SettingsService:
    return SettingsService(store)


def get_bulk_import_service(
    months: MonthService = Depends(get_month_service),
    days: DayService = Depends(get_day_service),
) -> BulkImportService:
    return BulkImportService(months, days)
