"""Attachment and upload schemas."""

from typing import Literal

from pydantic import Field

from activitycalendar.schemas.base import BaseSchema

StorageKind = Literal["local", "drive"]


class Attachment(BaseSchema):
    """A stored file referenced from a day record."""

    id: str
    name: str
    url: str
    thumbnail_url: str | None = None
    mime_type: str
    size: int = Field(..., ge=0)
    # Absent on records written before backends were tagged
    storage: StorageKind | None = None


class UploadResponse(BaseSchema):
    """Response for a batch upload with at least one stored file."""

    success: bool = True
    files: list[Attachment]
    partial_errors: list[str] | None = None


class UploadErrorResponse(BaseSchema):
    """Response when a request could not be processed."""

    success: bool = False
    error: str
    details: str | None = None


class DeleteFileRequest(BaseSchema):
    """Request body for deleting a stored file."""

    file_id: str | None = None
    storage: StorageKind | None = None


class DeleteFileResponse(BaseSchema):
    success: bool = True
