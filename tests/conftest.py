"""Pytest configuration and fixtures."""

import io
import os
import re

import pytest
from httpx import AsyncClient, ASGITransport
from PIL import Image

os.environ.setdefault("CALENDAR_RATE_LIMIT_ENABLED", "false")

from activitycalendar.api.deps import limiter  # noqa: E402
from activitycalendar.config import Settings, get_settings  # noqa: E402
from activitycalendar.main import create_app  # noqa: E402
from activitycalendar.services.compressor import PillowCompressor, get_compressor  # noqa: E402
from activitycalendar.services.sheets import get_sheet_store  # noqa: E402
from activitycalendar.services.storage import (  # noqa: E402
    LocalStorage,
    StoredObject,
    StorageNotConfiguredError,
    StorageUploadError,
)
from activitycalendar.services.storage.drive import drive_thumbnail_url, drive_view_url  # noqa: E402
from activitycalendar.services.upload_service import UploadService, get_upload_service  # noqa: E402

GOOGLE_ENV_NAMES = [
    "GOOGLE_SPREADSHEET_ID",
    "GOOGLE_DRIVE_FOLDER_ID",
    "GOOGLE_SERVICE_ACCOUNT_JSON",
    "GOOGLE_SERVICE_ACCOUNT_FILE",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
]

_RANGE = re.compile(r"^(?P<sheet>[^!]+)!(?P<start_col>[A-Z]+)(?P<start_row>\d+)(?::(?P<end_col>[A-Z]+)(?P<end_row>\d+)?)?$")


def make_image(width: int, height: int, fmt: str = "PNG", noise: bool = False) -> bytes:
    """Encode a test image; noisy images do not compress well."""
    if noise:
        img = Image.effect_noise((width, height), 64).convert("RGB")
    else:
        img = Image.new("RGB", (width, height), color=(200, 80, 40))
    out = io.BytesIO()
    img.save(out, format=fmt)
    return out.getvalue()


class InMemorySheetStore:
    """SheetStore over plain lists; row 2 of a sheet is index 0."""

    def __init__(self, sheets: dict[str, list[list]] | None = None):
        self.sheets: dict[str, list[list]] = {
            name: [list(row) for row in rows] for name, rows in (sheets or {}).items()
        }

    @staticmethod
    def _parse(range_name: str):
        match = _RANGE.match(range_name)
        assert match, f"unsupported range {range_name}"
        start_row = int(match["start_row"])
        end_row = int(match["end_row"]) if match["end_row"] else None
        end_col = match["end_col"] or None
        return match["sheet"], start_row - 2, end_row - 1 if end_row else None, end_col

    def rows(self, sheet: str) -> list[list]:
        return self.sheets.setdefault(sheet, [])

    async def get_values(self, range_name: str) -> list[list]:
        sheet, start, end, end_col = self._parse(range_name)
        rows = self.rows(sheet)[start:end]
        if end_col is not None:
            width = ord(end_col) - ord("A") + 1
            rows = [row[:width] for row in rows]
        return [list(row) for row in rows]

    async def clear(self, range_name: str) -> None:
        sheet, start, _, _ = self._parse(range_name)
        del self.rows(sheet)[start:]

    async def update(self, range_name: str, values: list[list]) -> None:
        sheet, start, _, _ = self._parse(range_name)
        rows = self.rows(sheet)
        for offset, row in enumerate(values):
            index = start + offset
            while len(rows) <= index:
                rows.append([])
            rows[index] = list(row)

    async def append(self, range_name: str, values: list[list]) -> None:
        sheet, _, _, _ = self._parse(range_name)
        self.rows(sheet).extend(list(row) for row in values)


class FakeRemoteStorage:
    """Stands in for Drive; ids are opaque handles without underscores."""

    kind = "drive"

    def __init__(self, fail_store: bool = False, fail_delete: bool = False):
        self.fail_store = fail_store
        self.fail_delete = fail_delete
        self.stored: list[tuple[str, bytes, str]] = []
        self.deleted: list[str] = []

    async def store(self, data: bytes, filename: str, mime_type: str) -> StoredObject:
        if self.fail_store:
            raise StorageUploadError("Failed to upload to Google Drive: quota exceeded")
        file_id = f"drive{len(self.stored) + 1}"
        self.stored.append((filename, data, mime_type))
        return StoredObject(
            id=file_id,
            url=drive_view_url(file_id),
            thumbnail_url=drive_thumbnail_url(file_id),
            storage="drive",
        )

    async def delete(self, object_id: str) -> None:
        if self.fail_delete:
            raise StorageUploadError("network down")
        self.deleted.append(object_id)


class FailingLocalStorage:
    kind = "local"

    def __init__(self):
        self.deleted: list[str] = []

    async def store(self, data: bytes, filename: str, mime_type: str) -> StoredObject:
        raise OSError("disk full")

    async def delete(self, object_id: str) -> None:
        self.deleted.append(object_id)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temporary upload dir with Google unconfigured."""
    for name in GOOGLE_ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"CALENDAR_{name}", raising=False)
    monkeypatch.setenv("CALENDAR_UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("CALENDAR_RATE_LIMIT_ENABLED", "false")
    get_settings.cache_clear()
    get_compressor.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
    get_compressor.cache_clear()


@pytest.fixture
def settings(isolated_settings) -> Settings:
    return isolated_settings


@pytest.fixture
def compressor() -> PillowCompressor:
    return PillowCompressor()


@pytest.fixture
def local_storage(settings, compressor) -> LocalStorage:
    return LocalStorage(settings.upload_dir, url_prefix="/uploads", compressor=compressor)


@pytest.fixture
def remote_storage() -> FakeRemoteStorage:
    return FakeRemoteStorage()


@pytest.fixture
def sheet_store() -> InMemorySheetStore:
    return InMemorySheetStore()


@pytest.fixture
def make_upload_service(settings, compressor, local_storage):
    """Build an UploadService; pass a remote backend or an exception to raise."""

    def _make(remote=None, local=None) -> UploadService:
        def remote_factory():
            if isinstance(remote, Exception):
                raise remote
            if remote is None:
                raise StorageNotConfiguredError("Google Drive folder id is not configured")
            return remote

        return UploadService(
            local or local_storage,
            remote_factory,
            compressor,
            settings=settings,
        )

    return _make


@pytest.fixture
def upload_service(make_upload_service) -> UploadService:
    """Local-only upload service used by the API tests."""
    return make_upload_service()


@pytest.fixture
def app(settings, sheet_store, upload_service):
    """Application with the spreadsheet and storage overridden."""
    app = create_app()
    app.dependency_overrides[get_sheet_store] = lambda: sheet_store
    app.dependency_overrides[get_upload_service] = lambda: upload_service
    limiter.enabled = False
    return app


@pytest.fixture
async def client(app):
    """Create a test client for the application."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
