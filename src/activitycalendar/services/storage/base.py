"""Storage backend contract and errors."""

import re
import time
from dataclasses import dataclass
from typing import Protocol

from activitycalendar.schemas.attachment import StorageKind


class StorageError(Exception):
    """Base error for storage backends."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StorageNotConfiguredError(StorageError):
    """The backend has no target container configured."""


class StorageAuthError(StorageError):
    """The backend's credentials are missing or invalid."""


class StorageUploadError(StorageError):
    """A single store call failed (network, quota, API error)."""


@dataclass(frozen=True)
class StoredObject:
    """What a backend reports back after storing a payload."""

    id: str
    url: str
    thumbnail_url: str
    storage: StorageKind


class StorageBackend(Protocol):
    kind: StorageKind

    async def store(self, data: bytes, filename: str, mime_type: str) -> StoredObject: ...

    async def delete(self, object_id: str) -> None: ...


_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Replace everything outside ``[A-Za-z0-9._-]`` with underscores."""
    return _UNSAFE_CHARS.sub("_", filename) or "file"


def timestamp_ms() -> int:
    return int(time.time() * 1000)
