"""Local filesystem storage backend."""

import logging
import uuid
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from activitycalendar.services.compressor import Compressor, NoopCompressor
from activitycalendar.services.storage.base import (
    StoredObject,
    sanitize_filename,
    timestamp_ms,
)

logger = logging.getLogger(__name__)

THUMBNAIL_PREFIX = "thumb_"


class LocalStorage:
    """Stores files in a single flat directory served under a URL prefix."""

    kind = "local"

    def __init__(
        self,
        root_dir: Path,
        url_prefix: str = "/uploads",
        compressor: Compressor | None = None,
    ):
        self.root_dir = Path(root_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.compressor = compressor or NoopCompressor()

    def resolve_path(self, name: str) -> Path:
        """Path for a stored name; rejects anything that is not a bare filename."""
        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            raise ValueError(f"invalid storage name: {name!r}")
        return self.root_dir / name

    def url_for(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    def _ensure_dir(self) -> None:
        self.root_dir.mkdir(parents=True, exist_ok=True)

    async def store(self, data: bytes, filename: str, mime_type: str) -> StoredObject:
        """Write the payload (and a thumbnail for images) to disk."""
        await run_in_threadpool(self._ensure_dir)

        # Same-millisecond uploads of one filename must not overwrite each other
        name = f"{timestamp_ms()}_{uuid.uuid4().hex[:8]}_{sanitize_filename(filename)}"
        path = self.resolve_path(name)
        await run_in_threadpool(path.write_bytes, data)

        thumbnail_url = self.url_for(name)
        thumbnail = await run_in_threadpool(self.compressor.thumbnail, data, mime_type)
        if thumbnail:
            thumb_name = f"{THUMBNAIL_PREFIX}{name}"
            try:
                await run_in_threadpool(self.resolve_path(thumb_name).write_bytes, thumbnail)
                thumbnail_url = self.url_for(thumb_name)
            except OSError:
                logger.warning("Could not write thumbnail for %s", name, exc_info=True)

        logger.info("Stored %s locally (%d bytes)", name, len(data))
        return StoredObject(
            id=name,
            url=self.url_for(name),
            thumbnail_url=thumbnail_url,
            storage="local",
        )

    async def delete(self, object_id: str) -> None:
        """Remove a stored file and, if present, its thumbnail.

        Raises FileNotFoundError when the main file does not exist.
        """
        path = self.resolve_path(object_id)
        thumb_path = self.resolve_path(f"{THUMBNAIL_PREFIX}{object_id}")
        try:
            await run_in_threadpool(path.unlink)
        finally:
            await run_in_threadpool(thumb_path.unlink, missing_ok=True)
        logger.info("Deleted local file %s", object_id)
