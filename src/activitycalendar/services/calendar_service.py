"""Business logic for the sheet-backed calendar entities."""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from activitycalendar.config import get_settings
from activitycalendar.schemas.attachment import Attachment
from activitycalendar.schemas.calendar import (
    Day,
    DayEntry,
    Month,
    SiteSettings,
    User,
    UserPublic,
    Year,
)
from activitycalendar.services.sheets import SheetStore, SheetsNotConfiguredError

logger = logging.getLogger(__name__)

THAI_MONTHS = [
    "มกราคม", "กุมภาพันธ์", "มีนาคม", "เมษายน", "พฤษภาคม", "มิถุนายน",
    "กรกฎาคม", "สิงหาคม", "กันยายน", "ตุลาคม", "พฤศจิกายน", "ธันวาคม",
]
BUDDHIST_ERA_OFFSET = 543

DEV_ADMIN = UserPublic(id="local-admin", username="admin", fullname="Local Admin (Dev Mode)")

_entries_adapter = TypeAdapter(list[DayEntry])
_attachments_adapter = TypeAdapter(list[Attachment])


def _cell(row: list, index: int) -> str:
    """Cell value as a string; missing trailing cells read as empty."""
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def _is_true(value) -> bool:
    return value is True or value in ("TRUE", "true")


def thai_month_name(month: str) -> str:
    """``2025-01`` -> ``มกราคม 2568``; empty string if unparsable."""
    try:
        year, month_number = (int(part) for part in month.split("-")[:2])
        return f"{THAI_MONTHS[month_number - 1]} {year + BUDDHIST_ERA_OFFSET}"
    except (ValueError, IndexError):
        return ""


class _SheetService:
    """Shared plumbing for services over one sheet."""

    def __init__(self, store: SheetStore | None):
        self.store = store

    def _require_store(self) -> SheetStore:
        if self.store is None:
            raise SheetsNotConfiguredError("Google spreadsheet is not configured")
        return self.store

    async def _replace(self, clear_range: str, start_cell: str, values: list[list]) -> None:
        """Clear the data range and write ``values`` from ``start_cell`` down."""
        store = self._require_store()
        await store.clear(clear_range)
        if values:
            await store.update(start_cell, values)


class UserService(_SheetService):
    """Users sheet and the plaintext login check."""

    async def get_all(self) -> list[User]:
        if self.store is None:
            return []
        rows = await self.store.get_values("Users!A2:D100")
        return [
            User(
                id=_cell(row, 0),
                username=_cell(row, 1),
                password=_cell(row, 2),
                fullname=_cell(row, 3),
            )
            for row in rows
        ]

    async def replace_all(self, users: list[User]) -> None:
        values = [[u.id, u.username, u.password, u.fullname] for u in users]
        await self._replace("Users!A2:D1000", "Users!A2", values)

    async def authenticate(self, username: str, password: str) -> UserPublic | None:
        """Match username and password exactly against the Users sheet.

        Without a spreadsheet, admin/admin logs in as a local dev user when
        dev login is enabled.
        """
        if self.store is None:
            settings = get_settings()
            if settings.dev_login_enabled and username == "admin" and password == "admin":
                logger.info("No spreadsheet configured, using dev login")
                return DEV_ADMIN
            return None

        for user in await self.get_all():
            if user.username == username and user.password == password:
                return UserPublic(id=user.id, username=user.username, fullname=user.fullname)
        return None


class YearService(_SheetService):
    async def get_all(self) -> list[Year]:
        if self.store is None:
            return []
        rows = await self.store.get_values("Years!A2:E100")
        return [
            Year(
                id=_cell(row, 0),
                name=_cell(row, 1),
                start_date=_cell(row, 2),
                end_date=_cell(row, 3),
                is_current=_is_true(row[4]) if len(row) > 4 else False,
            )
            for row in rows
        ]

    async def replace_all(self, years: list[Year]) -> None:
        values = [[y.id, y.name, y.start_date, y.end_date, y.is_current] for y in years]
        await self._replace("Years!A2:E1000", "Years!A2", values)


class MonthService(_SheetService):
    async def get_all(self) -> list[Month]:
        """Months sorted by ``yyyy-MM``, with missing names generated."""
        if self.store is None:
            return []
        rows = await self.store.get_values("Months!A2:D1000")
        months = []
        for row in rows:
            month_value = _cell(row, 2)
            name = _cell(row, 3)
            if not name and month_value:
                name = thai_month_name(month_value)
            months.append(
                Month(id=_cell(row, 0), year_id=_cell(row, 1), month=month_value, name=name)
            )
        months.sort(key=lambda m: m.month)
        return months

    async def replace_all(self, months: list[Month]) -> None:
        values = [[m.id, m.year_id, m.month, m.name] for m in months]
        await self._replace("Months!A2:D10000", "Months!A2", values)


class DayService(_SheetService):
    """Days sheet; entries and attachments are JSON-encoded cells."""

    @staticmethod
    def _parse_json_cell(raw: str, adapter: TypeAdapter, day_id: str) -> list:
        if not raw:
            return []
        try:
            return adapter.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("Error parsing JSON for day %s: %s", day_id, e)
            return []

    def _from_row(self, row: list) -> Day:
        day_id = _cell(row, 0)
        return Day(
            id=day_id,
            month_id=_cell(row, 1),
            date=_cell(row, 2),
            entries=self._parse_json_cell(_cell(row, 3), _entries_adapter, day_id),
            attachments=self._parse_json_cell(_cell(row, 4), _attachments_adapter, day_id),
        )

    @staticmethod
    def _to_row(day: Day) -> list:
        return [
            day.id,
            day.month_id,
            day.date,
            json.dumps([e.to_json() for e in day.entries], ensure_ascii=False),
            json.dumps([a.to_json() for a in day.attachments], ensure_ascii=False),
        ]

    async def get_all(self) -> list[Day]:
        if self.store is None:
            return []
        rows = await self.store.get_values("Days!A2:E9999")
        return [self._from_row(row) for row in rows]

    async def replace_all(self, days: list[Day]) -> None:
        await self._replace("Days!A2:E99999", "Days!A2", [self._to_row(d) for d in days])

    async def upsert(self, day: Day) -> None:
        """Update the row with the same id, or append a new row."""
        store = self._require_store()
        ids = await store.get_values("Days!A2:A9999")
        row_index = next(
            (i for i, row in enumerate(ids) if _cell(row, 0) == day.id),
            None,
        )
        if row_index is None:
            await store.append("Days!A2", [self._to_row(day)])
            return
        # Data starts at row 2
        sheet_row = row_index + 2
        await store.update(f"Days!A{sheet_row}:E{sheet_row}", [self._to_row(day)])


class SettingsService(_SheetService):
    async def get(self) -> SiteSettings:
        settings = SiteSettings()
        if self.store is None:
            return settings
        rows = await self.store.get_values("Settings!A2:B100")
        known = {field.alias: name for name, field in SiteSettings.model_fields.items()}
        for row in rows:
            key, value = _cell(row, 0), _cell(row, 1)
            if key in known and value:
                setattr(settings, known[key], value)
        return settings

    async def replace(self, settings: SiteSettings) -> None:
        values = [[key, value] for key, value in settings.to_json().items()]
        await self._replace("Settings!A2:B100", "Settings!A2", values)
