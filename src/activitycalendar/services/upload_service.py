"""Upload orchestration: validation, compression, storage with fallback."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from starlette.concurrency import run_in_threadpool

from activitycalendar.config import Settings, get_settings
from activitycalendar.schemas.attachment import Attachment, StorageKind
from activitycalendar.services.compressor import Compressor, get_compressor, is_image
from activitycalendar.services.storage import (
    DriveStorage,
    LocalStorage,
    StorageAuthError,
    StorageBackend,
    StorageError,
    StoredObject,
)

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class UploadState(str, Enum):
    PENDING = "pending"
    COMPRESSING = "compressing"
    STORING_REMOTE = "storing_remote"
    STORING_LOCAL = "storing_local"
    STORED = "stored"
    FAILED = "failed"


@dataclass
class UploadItem:
    """One file of an incoming batch."""

    filename: str
    data: bytes
    content_type: str | None = None
    size: int | None = None

    def __post_init__(self):
        if self.size is None:
            self.size = len(self.data)

    @property
    def mime_type(self) -> str:
        return self.content_type or DEFAULT_MIME_TYPE


@dataclass
class UploadResult:
    files: list[Attachment] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.files) > 0

    @property
    def error_detail(self) -> str:
        return "; ".join(self.errors) if self.errors else "All uploads failed"


def classify_attachment_id(file_id: str) -> StorageKind:
    """Guess the backend of an untagged attachment from the shape of its id.

    Local ids are ``<timestamp>_<random>_<name>`` and never URLs; anything else is
    treated as a Drive file id.
    """
    if "_" in file_id and not file_id.startswith("http"):
        return "local"
    return "drive"


def _megabytes(size: int) -> str:
    return f"{size / (1024 * 1024):g}MB"


def jpeg_filename(filename: str) -> str:
    """``scan.bmp`` -> ``scan.jpg``, so the stored name matches re-encoded bytes."""
    stem = os.path.splitext(filename)[0]
    return f"{stem or 'image'}.jpg"


class UploadService:
    """Stores batches of files and deletes stored files.

    The remote backend is resolved once per batch through ``remote_factory``;
    a factory that raises StorageError puts the batch in local-only mode.
    """

    def __init__(
        self,
        local: StorageBackend,
        remote_factory: Callable[[], StorageBackend],
        compressor: Compressor,
        settings: Settings | None = None,
    ):
        self.local = local
        self.remote_factory = remote_factory
        self.compressor = compressor
        self.settings = settings or get_settings()

    def _resolve_remote(self) -> StorageBackend | None:
        try:
            remote = self.remote_factory()
        except StorageError as e:
            logger.info("Upload mode: local storage (%s)", e.message)
            return None
        logger.info("Upload mode: Google Drive")
        return remote

    async def _compress(self, item: UploadItem) -> tuple[bytes, str]:
        """Return the payload to store and its MIME type."""
        data = item.data
        mime_type = item.mime_type
        if not is_image(mime_type):
            return data, mime_type

        try:
            compressed = await run_in_threadpool(self.compressor.compress, data, mime_type)
            target = self.settings.max_compressed_size_bytes
            if len(compressed) > target:
                compressed = await run_in_threadpool(
                    self.compressor.fit_to_size, compressed, mime_type, target
                )
        except Exception:
            logger.warning("Server compression failed for %s", item.filename, exc_info=True)
            return data, mime_type

        if len(compressed) < len(data):
            logger.info(
                "Server compressed %s: %d -> %d bytes",
                item.filename, len(data), len(compressed),
            )
            return compressed, "image/jpeg"
        return data, mime_type

    async def _store(
        self,
        item: UploadItem,
        data: bytes,
        mime_type: str,
        store_name: str,
        remote: StorageBackend | None,
        errors: list[str],
    ) -> StoredObject | None:
        """Store one payload, falling back from remote to local.

        StorageAuthError from the remote backend is re-raised so the caller
        can drop the remote backend for the rest of the batch.
        """
        if remote is None:
            logger.debug("%s: %s", item.filename, UploadState.STORING_LOCAL.value)
            try:
                return await self.local.store(data, store_name, mime_type)
            except Exception as e:
                logger.exception("Local storage failed for %s", item.filename)
                errors.append(f"{item.filename}: {e}")
                return None

        logger.debug("%s: %s", item.filename, UploadState.STORING_REMOTE.value)
        try:
            return await remote.store(data, store_name, mime_type)
        except StorageAuthError:
            raise
        except Exception as remote_error:
            remote_message = getattr(remote_error, "message", None) or str(remote_error)
            logger.warning(
                "Google Drive upload failed for %s, trying local storage: %s",
                item.filename, remote_message,
            )
            logger.debug("%s: %s", item.filename, UploadState.STORING_LOCAL.value)
            try:
                stored = await self.local.store(data, store_name, mime_type)
            except Exception as local_error:
                logger.exception("Local fallback also failed for %s", item.filename)
                errors.append(f"{item.filename}: {remote_message} (local: {local_error})")
                return None
            errors.append(f"{item.filename}: saved locally instead (Google Drive: {remote_message})")
            return stored

    async def upload(self, items: list[UploadItem]) -> UploadResult:
        """Store a batch of files one after another.

        Oversized files and files that fail on every backend are reported in
        ``errors``; the others become attachments.
        """
        result = UploadResult()
        remote = self._resolve_remote()
        ceiling = self.settings.max_upload_size_bytes

        logger.info("Processing %d files", len(items))
        for item in items:
            logger.debug("%s: %s", item.filename, UploadState.PENDING.value)
            if item.size > ceiling:
                logger.info("Rejected %s: %d bytes exceeds %d", item.filename, item.size, ceiling)
                result.errors.append(
                    f"{item.filename}: file is too large (max {_megabytes(ceiling)})"
                )
                continue

            logger.debug("%s: %s", item.filename, UploadState.COMPRESSING.value)
            data, mime_type = await self._compress(item)
            store_name = item.filename if data is item.data else jpeg_filename(item.filename)

            try:
                stored = await self._store(item, data, mime_type, store_name, remote, result.errors)
            except StorageAuthError as e:
                logger.warning(
                    "Google Drive rejected the credentials, storing the rest of the batch locally: %s",
                    e.message,
                )
                remote = None
                stored = await self._store(item, data, mime_type, store_name, remote, result.errors)
            if stored is None:
                logger.debug("%s: %s", item.filename, UploadState.FAILED.value)
                continue

            result.files.append(
                Attachment(
                    id=stored.id,
                    name=item.filename,
                    url=stored.url,
                    thumbnail_url=stored.thumbnail_url,
                    mime_type=mime_type,
                    size=len(data),
                    storage=stored.storage,
                )
            )
            logger.debug("%s: %s -> %s", item.filename, UploadState.STORED.value, stored.url)

        if result.success:
            logger.info("Upload complete: %d files", len(result.files))
        else:
            logger.error("All uploads failed: %s", result.error_detail)
        return result

    async def delete(self, file_id: str, storage: StorageKind | None = None) -> None:
        """Best-effort removal of a stored file; failures are only logged."""
        kind = storage or classify_attachment_id(file_id)
        try:
            if kind == "local":
                await self.local.delete(file_id)
            else:
                await self.remote_factory().delete(file_id)
        except Exception:
            logger.warning("Failed to delete %s file %s", kind, file_id, exc_info=True)


def get_upload_service() -> UploadService:
    """Build an upload service from settings for one request."""
    settings = get_settings()
    compressor = get_compressor()
    local = LocalStorage(
        settings.upload_dir,
        url_prefix=settings.upload_url_prefix,
        compressor=compressor,
    )

    def remote_factory() -> StorageBackend:
        return DriveStorage.from_settings(settings, compressor=compressor)

    return UploadService(local, remote_factory, compressor, settings=settings)
