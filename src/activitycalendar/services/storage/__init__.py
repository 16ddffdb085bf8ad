"""Attachment storage backends."""

from activitycalendar.services.storage.base import (
    StorageBackend,
    StorageError,
    StorageNotConfiguredError,
    StorageAuthError,
    StorageUploadError,
    StoredObject,
)
from activitycalendar.services.storage.local import LocalStorage
from activitycalendar.services.storage.drive import DriveStorage

__all__ = [
    "StorageBackend",
    "StorageError",
    "StorageNotConfiguredError",
    "StorageAuthError",
    "StorageUploadError",
    "StoredObject",
    "LocalStorage",
    "DriveStorage",
]
