"""File upload API endpoints."""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from activitycalendar.api.deps import default_rate_limit, limiter, upload_rate_limit
from activitycalendar.config import get_settings
from activitycalendar.schemas.attachment import (
    DeleteFileRequest,
    DeleteFileResponse,
    UploadErrorResponse,
    UploadResponse,
)
from activitycalendar.services.upload_service import (
    UploadItem,
    UploadService,
    get_upload_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])

CHUNK_SIZE = 64 * 1024


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    payload = UploadErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=payload.to_json())


async def _read_upload(file: UploadFile, limit: int) -> UploadItem:
    """Read an uploaded file, stopping once it exceeds ``limit`` bytes.

    An oversized file keeps its full reported size so the upload service can
    reject it by name without holding the whole payload in memory.
    """
    chunks = []
    total = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            break
        chunks.append(chunk)

    size = max(file.size or 0, total)
    return UploadItem(
        filename=file.filename or "file",
        data=b"".join(chunks),
        content_type=file.content_type,
        size=size,
    )


@router.post(
    "",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": UploadErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": UploadErrorResponse},
    },
)
@limiter.limit(upload_rate_limit)
async def upload_files(
    request: Request,
    files: list[UploadFile] | None = File(None),
    service: UploadService = Depends(get_upload_service),
):
    """Store a batch of files in Google Drive, falling back to local storage.

    Succeeds when at least one file was stored; per-file problems are listed
    in ``partialErrors``.
    """
    if not files:
        return _error(status.HTTP_400_BAD_REQUEST, "No files provided")

    limit = get_settings().max_upload_size_bytes
    items = [await _read_upload(f, limit) for f in files]
    result = await service.upload(items)

    if not result.success:
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Could not upload files",
            result.error_detail,
        )

    return UploadResponse(files=result.files, partial_errors=result.errors or None)


@router.delete("", response_model=DeleteFileResponse)
@limiter.limit(default_rate_limit)
async def delete_file(
    request: Request,
    data: DeleteFileRequest,
    service: UploadService = Depends(get_upload_service),
):
    """Delete a stored file. Always reports success once dispatched."""
    if not data.file_id:
        return _error(status.HTTP_400_BAD_REQUEST, "File ID is required")

    await service.delete(data.file_id, storage=data.storage)
    return DeleteFileResponse()
