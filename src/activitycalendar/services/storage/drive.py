"""Google Drive storage backend."""

import io
import logging

from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload
from starlette.concurrency import run_in_threadpool

from activitycalendar.config import Settings
from activitycalendar.services.compressor import Compressor, NoopCompressor
from activitycalendar.services.google_auth import GoogleCredentialsError, get_credentials
from activitycalendar.services.storage.base import (
    StorageAuthError,
    StorageError,
    StorageNotConfiguredError,
    StoredObject,
    StorageUploadError,
    timestamp_ms,
)

logger = logging.getLogger(__name__)

PUBLIC_READ = {"role": "reader", "type": "anyone"}


def drive_view_url(file_id: str) -> str:
    return f"https://drive.google.com/uc?export=view&id={file_id}"


def drive_thumbnail_url(file_id: str) -> str:
    return f"https://lh3.googleusercontent.com/d/{file_id}"


def build_drive_service(settings: Settings):
    """Authenticate and build a Drive v3 client.

    Raises StorageAuthError when credentials are missing or unusable.
    """
    try:
        credentials = get_credentials(settings)
    except GoogleCredentialsError as e:
        raise StorageAuthError(f"Google Drive authentication failed: {e.message}") from e
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


class DriveStorage:
    """Stores files in one Drive folder and makes them publicly readable."""

    kind = "drive"

    def __init__(self, service, folder_id: str, compressor: Compressor | None = None):
        self.service = service
        self.folder_id = folder_id
        self.compressor = compressor or NoopCompressor()

    @classmethod
    def from_settings(cls, settings: Settings, compressor: Compressor | None = None) -> "DriveStorage":
        """Build a client from configuration.

        Raises:
            StorageNotConfiguredError: no folder id is configured.
            StorageAuthError: credentials are missing or invalid.
        """
        if not settings.google_drive_folder_id:
            raise StorageNotConfiguredError("Google Drive folder id is not configured")
        service = build_drive_service(settings)
        return cls(service, settings.google_drive_folder_id, compressor=compressor)

    def _create(self, data: bytes, name: str, mime_type: str) -> dict:
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type, resumable=False)
        return (
            self.service.files()
            .create(
                body={"name": name, "parents": [self.folder_id]},
                media_body=media,
                fields="id, name, mimeType, size",
                supportsAllDrives=True,
            )
            .execute()
        )

    def _grant_public_read(self, file_id: str) -> None:
        self.service.permissions().create(
            fileId=file_id,
            body=PUBLIC_READ,
            supportsAllDrives=True,
        ).execute()

    def _store_sync(self, data: bytes, filename: str, mime_type: str) -> StoredObject:
        """Upload one file.

        Raises StorageAuthError when the credentials are rejected and
        StorageUploadError for any other failure of the main upload.
        """
        stamp = timestamp_ms()
        logger.info("Uploading to Google Drive: %s (%d bytes)", filename, len(data))

        try:
            created = self._create(data, f"{stamp}_{filename}", mime_type)
        except HttpError as e:
            raise StorageUploadError(f"Failed to upload to Google Drive: {e.reason}") from e
        except GoogleAuthError as e:
            # Bad or revoked keys only surface on the first token refresh
            raise StorageAuthError(f"Google Drive authentication failed: {e}") from e
        except OSError as e:
            raise StorageUploadError(f"Failed to upload to Google Drive: {e}") from e

        file_id = created.get("id")
        if not file_id:
            raise StorageUploadError("No file ID returned from Google Drive")

        try:
            self._grant_public_read(file_id)
        except (HttpError, GoogleAuthError, OSError):
            # The file exists but may not be viewable without signing in
            logger.warning("Failed to set public permissions on %s", file_id, exc_info=True)

        thumbnail_url = drive_thumbnail_url(file_id)
        thumbnail = self.compressor.thumbnail(data, mime_type)
        if thumbnail:
            try:
                thumb = self._create(thumbnail, f"thumb_{stamp}_{filename}", "image/jpeg")
                if thumb.get("id"):
                    self._grant_public_read(thumb["id"])
                    thumbnail_url = drive_thumbnail_url(thumb["id"])
            except (HttpError, GoogleAuthError, OSError):
                logger.warning("Thumbnail upload failed for %s", file_id, exc_info=True)

        return StoredObject(
            id=file_id,
            url=drive_view_url(file_id),
            thumbnail_url=thumbnail_url,
            storage="drive",
        )

    async def store(self, data: bytes, filename: str, mime_type: str) -> StoredObject:
        return await run_in_threadpool(self._store_sync, data, filename, mime_type)

    def _delete_sync(self, object_id: str) -> None:
        try:
            self.service.files().delete(fileId=object_id, supportsAllDrives=True).execute()
        except HttpError as e:
            if e.resp.status == 404:
                logger.info("Drive file %s already gone", object_id)
                return
            raise StorageError(f"Failed to delete from Google Drive: {e.reason}") from e
        logger.info("Deleted Drive file %s", object_id)

    async def delete(self, object_id: str) -> None:
        await run_in_threadpool(self._delete_sync, object_id)
