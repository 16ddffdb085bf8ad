"""Range-level access to the calendar spreadsheet."""

import logging
from typing import Protocol

import gspread
from starlette.concurrency import run_in_threadpool

from activitycalendar.config import Settings, get_settings
from activitycalendar.services.google_auth import GoogleCredentialsError, get_credentials

logger = logging.getLogger(__name__)

RAW = {"valueInputOption": "RAW"}


class SheetsError(Exception):
    """The spreadsheet could not be read or written."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class SheetsNotConfiguredError(SheetsError):
    """No spreadsheet id is configured."""


class SheetStore(Protocol):
    """A spreadsheet addressed by A1 ranges such as ``Days!A2:E9999``."""

    async def get_values(self, range_name: str) -> list[list]: ...

    async def clear(self, range_name: str) -> None: ...

    async def update(self, range_name: str, values: list[list]) -> None: ...

    async def append(self, range_name: str, values: list[list]) -> None: ...


class GoogleSheetStore:
    """SheetStore backed by gspread."""

    def __init__(self, client: gspread.Client, spreadsheet_id: str):
        self.client = client
        self.spreadsheet_id = spreadsheet_id
        self._spreadsheet: gspread.Spreadsheet | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleSheetStore":
        if not settings.google_spreadsheet_id:
            raise SheetsNotConfiguredError("Google spreadsheet id is not configured")
        try:
            credentials = get_credentials(settings)
        except GoogleCredentialsError as e:
            raise SheetsError("Google Sheets authentication failed", e.message) from e
        return cls(gspread.authorize(credentials), settings.google_spreadsheet_id)

    def _open(self) -> gspread.Spreadsheet:
        if self._spreadsheet is None:
            self._spreadsheet = self.client.open_by_key(self.spreadsheet_id)
        return self._spreadsheet

    async def _call(self, action: str, range_name: str, func):
        def _run():
            return func(self._open())

        try:
            return await run_in_threadpool(_run)
        except gspread.exceptions.GSpreadException as e:
            logger.error("Sheets %s failed for %s: %s", action, range_name, e)
            raise SheetsError(f"Failed to {action} {range_name}", str(e)) from e

    async def get_values(self, range_name: str) -> list[list]:
        response = await self._call(
            "read", range_name, lambda sh: sh.values_get(range_name)
        )
        return response.get("values", [])

    async def clear(self, range_name: str) -> None:
        await self._call("clear", range_name, lambda sh: sh.values_clear(range_name))

    async def update(self, range_name: str, values: list[list]) -> None:
        await self._call(
            "update",
            range_name,
            lambda sh: sh.values_update(range_name, params=RAW, body={"values": values}),
        )

    async def append(self, range_name: str, values: list[list]) -> None:
        await self._call(
            "append",
            range_name,
            lambda sh: sh.values_append(range_name, params=RAW, body={"values": values}),
        )


def get_sheet_store() -> SheetStore | None:
    """Sheet store for one request, or None when no spreadsheet is configured."""
    settings = get_settings()
    if not settings.sheets_configured:
        return None
    return GoogleSheetStore.from_settings(settings)
