"""Image compression and thumbnail generation."""

import io
import logging
from functools import lru_cache
from typing import Protocol

from PIL import Image, ImageOps, features

from activitycalendar.config import get_settings

logger = logging.getLogger(__name__)

# Re-encoding these would lose animation or vector data
PASSTHROUGH_IMAGE_TYPES = {"image/gif", "image/svg+xml"}

# Quality steps for the size-targeted loop: 90, 80, ... 10
FIT_QUALITY_START = 90
FIT_QUALITY_STEP = 10
FIT_QUALITY_FLOOR = 10


def is_image(mime_type: str | None) -> bool:
    return bool(mime_type) and mime_type.startswith("image/")


class Compressor(Protocol):
    """Reduces image payloads before they are stored."""

    def compress(self, data: bytes, mime_type: str) -> bytes: ...

    def thumbnail(self, data: bytes, mime_type: str) -> bytes | None: ...

    def fit_to_size(self, data: bytes, mime_type: str, target_bytes: int) -> bytes: ...


class NoopCompressor:
    """Used when no JPEG codec is available; everything passes through."""

    def compress(self, data: bytes, mime_type: str) -> bytes:
        return data

    def thumbnail(self, data: bytes, mime_type: str) -> bytes | None:
        return None

    def fit_to_size(self, data: bytes, mime_type: str, target_bytes: int) -> bytes:
        return data


class PillowCompressor:
    """Bounded JPEG re-encoding backed by Pillow.

    Every public method returns the best buffer it has instead of raising:
    a codec failure must never abort an upload.
    """

    def __init__(
        self,
        max_dimension: int = 2000,
        quality: int = 85,
        thumbnail_size: int = 200,
        thumbnail_quality: int = 70,
    ):
        self.max_dimension = max_dimension
        self.quality = quality
        self.thumbnail_size = thumbnail_size
        self.thumbnail_quality = thumbnail_quality

    def _open(self, data: bytes) -> Image.Image:
        img = Image.open(io.BytesIO(data))
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGB":
            img = img.convert("RGB")
        return img

    def _bound(self, img: Image.Image) -> Image.Image:
        """Shrink so the long edge fits ``max_dimension``; never upscales."""
        if max(img.size) > self.max_dimension:
            img = img.copy()
            img.thumbnail(
                (self.max_dimension, self.max_dimension),
                Image.Resampling.LANCZOS,
            )
        return img

    @staticmethod
    def _encode(img: Image.Image, quality: int) -> bytes:
        out = io.BytesIO()
        img.save(out, format="JPEG", quality=quality, optimize=True)
        return out.getvalue()

    def compress(self, data: bytes, mime_type: str) -> bytes:
        """Resize and re-encode an image as JPEG.

        Non-images and passthrough types are returned unchanged, as is any
        image whose re-encoded form would not be smaller.
        """
        if not is_image(mime_type) or mime_type in PASSTHROUGH_IMAGE_TYPES:
            return data

        try:
            img = self._bound(self._open(data))
            compressed = self._encode(img, self.quality)
        except Exception:
            logger.warning("Image compression failed, keeping original", exc_info=True)
            return data

        if len(compressed) >= len(data):
            return data
        return compressed

    def thumbnail(self, data: bytes, mime_type: str) -> bytes | None:
        """Center-cropped square JPEG preview, or None."""
        if not is_image(mime_type):
            return None

        try:
            img = self._open(data)
            size = (self.thumbnail_size, self.thumbnail_size)
            thumb = ImageOps.fit(img, size, Image.Resampling.LANCZOS)
            return self._encode(thumb, self.thumbnail_quality)
        except Exception:
            logger.warning("Thumbnail creation failed", exc_info=True)
            return None

    def fit_to_size(self, data: bytes, mime_type: str, target_bytes: int) -> bytes:
        """Lower JPEG quality step by step until the payload fits.

        Stops at the first encoding within ``target_bytes`` or at the quality
        floor, whichever comes first.
        """
        if len(data) <= target_bytes:
            return data
        if not is_image(mime_type) or mime_type in PASSTHROUGH_IMAGE_TYPES:
            return data

        try:
            img = self._bound(self._open(data))
            quality = FIT_QUALITY_START
            while True:
                encoded = self._encode(img, quality)
                if len(encoded) <= target_bytes or quality <= FIT_QUALITY_FLOOR:
                    break
                quality -= FIT_QUALITY_STEP
        except Exception:
            logger.warning("Size-targeted compression failed", exc_info=True)
            return data

        logger.info(
            "Fitted image to %d bytes at quality %d (target %d)",
            len(encoded), quality, target_bytes,
        )
        if len(encoded) >= len(data):
            return data
        return encoded


def jpeg_supported() -> bool:
    """Check that this Pillow build can encode JPEG."""
    return bool(features.check("jpg"))


@lru_cache
def get_compressor() -> Compressor:
    """Resolve the compressor once per process."""
    settings = get_settings()
    if not settings.image_compression_enabled:
        logger.info("Image compression disabled by configuration")
        return NoopCompressor()
    if not jpeg_supported():
        logger.warning("JPEG codec not available, server-side image compression disabled")
        return NoopCompressor()
    return PillowCompressor(
        max_dimension=settings.max_image_dimension,
        quality=settings.image_quality,
        thumbnail_size=settings.thumbnail_size,
        thumbnail_quality=settings.thumbnail_quality,
    )
