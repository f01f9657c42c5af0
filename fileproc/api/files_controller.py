"""
fileproc/api/files_controller.py

Handles requests under /files/.

This layer is responsible only for HTTP concerns:
  - Parsing the multipart form / JSON body and query parameters.
  - Delegating to the UploadService held on app.state.
  - Translating service-level errors into HTTP responses of the shape
    { "error": "...", "message": "...", ["details": [...]] }.

Responses:
  201  File accepted and queued for processing (POST /files/).
  202  Reprocessing queued (POST /files/{id}/process).
  400  Validation failure, security threat, or malformed body.
  404  No file with the given id.
  409  Reprocessing requested while the file is already being processed.
  500  Storage failure or any unexpected error.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse, JSONResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile

from fileproc.core.exceptions import (
    FileRecordNotFoundError,
    FileValidationError,
    ProcessingConflictError,
    SecurityThreatError,
    StorageError,
)
from fileproc.core.logger import get_logger
from fileproc.models.file_models import (
    DeletedFile,
    DeleteResponse,
    FileListResponse,
    FileStats,
    FileSummary,
    FileUpdateRequest,
    FileUpdateResponse,
    Pagination,
    ProcessResponse,
    QueueStatusResponse,
    UpdatedFile,
    UploadedFile,
    UploadResponse,
)
from fileproc.services.upload_service import UploadService
from fileproc.storage.base import FileStatus

logger = get_logger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])

# ── Helpers ────────────────────────────────────────────────────────────────────

def _err(
    error: str,
    message: str,
    status: int = 400,
    details: Optional[List[str]] = None,
) -> JSONResponse:
    """Return a JSON error response in the API's error shape."""
    content: Dict[str, Any] = {"error": error, "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status, content=content)


def _not_found(file_id: str) -> JSONResponse:
    return _err("File not found", f"No file found with ID: {file_id}", status=404)


def _json(model: Any, status: int = 200, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=model.model_dump(by_alias=True, mode="json"),
        headers=headers,
    )


def get_upload_service(request: Request) -> UploadService:
    """The single UploadService built in the app lifespan."""
    return request.app.state.upload_service


# ── Upload ─────────────────────────────────────────────────────────────────────

@router.post("/", status_code=201, response_model=UploadResponse, summary="Upload a file")
async def upload_file(
    request: Request,
    service: UploadService = Depends(get_upload_service),
) -> JSONResponse:
    """
    Accept one file in the multipart field ``file``:

        curl -F "file=@report.pdf;type=application/pdf" http://localhost:8000/files/

    The file is validated, scanned, stored and queued; analysis runs in the
    background and its result appears on GET /files/{id}.
    """
    # ── 1. Parse multipart form ────────────────────────────────────────────────
    try:
        form = await request.form()
    except Exception:
        return _err("No file uploaded", "Invalid multipart/form-data payload.")

    upload = form.get("file")
    if not isinstance(upload, StarletteUploadFile):
        return _err("No file uploaded", "Please select a file to upload")

    # ── 2. Read bytes and delegate ─────────────────────────────────────────────
    data = await upload.read()
    filename = upload.filename or ""
    media_type = upload.content_type or "application/octet-stream"

    try:
        record = await service.upload(filename, media_type, data)

    except FileValidationError as exc:
        logger.warning("Upload rejected — name='%s' errors=%s", filename, exc.errors)
        return _err(
            "File validation failed",
            "The uploaded file did not pass validation checks",
            details=exc.errors,
        )

    except SecurityThreatError:
        return _err(
            "Security threat detected",
            "File contains potentially malicious content",
        )

    except StorageError as exc:
        logger.error("Upload storage failure: %s", exc)
        return _err("Upload failed", "An error occurred while uploading the file", status=500)

    # ── 3. Respond ─────────────────────────────────────────────────────────────
    body = UploadResponse(
        message="File uploaded successfully",
        file=UploadedFile(
            id=record.id,
            original_name=record.original_name,
            size=record.size,
            status=record.status,
            download_url=record.download_url,
        ),
    )
    return _json(
        body,
        status=201,
        headers={"X-File-Id": record.id, "Location": f"/files/{record.id}"},
    )


# ── Listing / system ───────────────────────────────────────────────────────────

@router.get("/", response_model=FileListResponse, summary="List files")
async def list_files(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    status: Optional[FileStatus] = Query(None),
    public: bool = Query(False),
    service: UploadService = Depends(get_upload_service),
) -> JSONResponse:
    """Paginated listing, optionally filtered by status and public access."""
    result = service.list_files(page=page, limit=limit, status=status, public_only=public)
    body = FileListResponse(
        files=[FileSummary.from_record(r) for r in result.files],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            has_more=result.has_more,
        ),
    )
    return _json(body, headers={"X-Total-Files": str(result.total)})


# Declared before /{file_id} so "system" is not captured as an id.
@router.get(
    "/system/queue-status",
    response_model=QueueStatusResponse,
    summary="Processing queue snapshot",
)
async def queue_status(service: UploadService = Depends(get_upload_service)) -> JSONResponse:
    queue, counts = service.queue_status()
    return _json(QueueStatusResponse(queue=queue, file_stats=FileStats(**counts)))


# ── Single file ────────────────────────────────────────────────────────────────

@router.get("/{file_id}", response_model=FileSummary, summary="File details")
async def get_file(
    file_id: str,
    service: UploadService = Depends(get_upload_service),
) -> JSONResponse:
    try:
        record = service.get_file(file_id)
    except FileRecordNotFoundError:
        return _not_found(file_id)
    return _json(FileSummary.from_record(record))


@router.put("/{file_id}", response_model=FileUpdateResponse, summary="Update file metadata")
async def update_file(
    file_id: str,
    request: Request,
    service: UploadService = Depends(get_upload_service),
) -> JSONResponse:
    """Only ``publicAccess`` and ``originalName`` may be changed."""
    try:
        payload = await request.json()
    except ValueError:
        return _err("Invalid request", "Request body must be a JSON object.")

    try:
        update = FileUpdateRequest.model_validate(payload)
    except ValidationError as exc:
        details = [err["msg"] for err in exc.errors()]
        return _err("Invalid request", "The update request is not valid.", details=details)

    try:
        record = service.update_file(
            file_id,
            public_access=update.public_access,
            original_name=update.original_name,
        )
    except FileRecordNotFoundError:
        return _not_found(file_id)

    body = FileUpdateResponse(
        message="File updated successfully",
        file=UpdatedFile(
            id=record.id,
            original_name=record.original_name,
            public_access=record.public_access,
            status=record.status,
            last_modified=record.last_modified,
        ),
    )
    return _json(body)


@router.delete("/{file_id}", response_model=DeleteResponse, summary="Delete a file")
async def delete_file(
    file_id: str,
    service: UploadService = Depends(get_upload_service),
) -> JSONResponse:
    try:
        record = await service.delete_file(file_id)
    except FileRecordNotFoundError:
        return _not_found(file_id)

    body = DeleteResponse(
        message="File deleted successfully",
        deleted_file=DeletedFile(id=record.id, original_name=record.original_name),
    )
    return _json(body)


@router.get("/{file_id}/download", summary="Download the stored bytes")
async def download_file(
    file_id: str,
    service: UploadService = Depends(get_upload_service),
):
    try:
        record = service.get_file(file_id)
        path = service.read_file(file_id)
    except FileRecordNotFoundError:
        return _not_found(file_id)
    except StorageError as exc:
        logger.error("Download failed — id=%s: %s", file_id, exc)
        return _err("File not available", "The stored file could not be read.", status=404)

    return FileResponse(path, media_type=record.media_type, filename=record.original_name)


@router.post(
    "/{file_id}/process",
    status_code=202,
    response_model=ProcessResponse,
    summary="Reprocess a file",
)
async def reprocess_file(
    file_id: str,
    service: UploadService = Depends(get_upload_service),
) -> JSONResponse:
    try:
        record = await service.reprocess(file_id)
    except FileRecordNotFoundError:
        return _not_found(file_id)
    except ProcessingConflictError:
        return _err(
            "Already processing",
            "File is currently being processed",
            status=409,
        )
    except StorageError as exc:
        logger.error("Reprocess failed — id=%s: %s", file_id, exc)
        return _err("Processing failed", "The stored file could not be read.", status=500)

    body = ProcessResponse(
        message="File processing started",
        file_id=record.id,
        status=record.status,
    )
    return _json(body, status=202)
