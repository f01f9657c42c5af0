"""
fileproc/models/file_models.py

Pydantic DTOs for the /files endpoints. Multipart upload parsing is left to
FastAPI in the controller; only JSON bodies and responses are defined here.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, StrictBool, field_validator

from fileproc.models.processing_models import CamelModel, QueueStatus
from fileproc.storage.base import FileRecord, FileStatus


class FileSummary(CamelModel):
    """
    Public view of a file record.

        {
            "id": "3f0c…",
            "originalName": "report.pdf",
            "status": "processed",
            "processingResult": {"status": "completed", "analysis": {...}},
            ...
        }
    """

    id: str
    original_name: str
    filename: str
    size: int
    mimetype: str
    upload_date: datetime
    status: FileStatus
    download_url: Optional[str] = None
    public_access: bool
    processing_result: Optional[Dict[str, Any]] = None
    processed_date: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileSummary":
        return cls(
            id=record.id,
            original_name=record.original_name,
            filename=record.filename,
            size=record.size,
            mimetype=record.media_type,
            upload_date=record.upload_date,
            status=record.status,
            download_url=record.download_url,
            public_access=record.public_access,
            processing_result=record.processing_result,
            processed_date=record.processed_date,
            last_modified=record.last_modified,
        )


# ── Upload ─────────────────────────────────────────────────────────────────────

class UploadedFile(CamelModel):
    id: str
    original_name: str
    size: int
    status: FileStatus
    download_url: Optional[str] = None
    processing_queued: bool = True


class UploadResponse(CamelModel):
    """Response for POST /files/ (201)."""

    message: str
    file: UploadedFile


# ── Listing ────────────────────────────────────────────────────────────────────

class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    has_more: bool


class FileListResponse(CamelModel):
    files: List[FileSummary]
    pagination: Pagination


# ── Metadata update ────────────────────────────────────────────────────────────

class FileUpdateRequest(CamelModel):
    """
    JSON body for PUT /files/{file_id}. Only these two fields may change.

        { "publicAccess": true }
        { "originalName": "renamed.csv" }
    """

    model_config = ConfigDict(extra="forbid")

    public_access: Optional[StrictBool] = None
    original_name: Optional[str] = None

    @field_validator("original_name")
    @classmethod
    def name_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("originalName must be a non-empty string.")
        return v.strip()[:255]


class UpdatedFile(CamelModel):
    id: str
    original_name: str
    public_access: bool
    status: FileStatus
    last_modified: Optional[datetime] = None


class FileUpdateResponse(CamelModel):
    message: str
    file: UpdatedFile


# ── Delete / reprocess ─────────────────────────────────────────────────────────

class DeletedFile(CamelModel):
    id: str
    original_name: str


class DeleteResponse(CamelModel):
    message: str
    deleted_file: DeletedFile


class ProcessResponse(CamelModel):
    message: str
    file_id: str
    status: FileStatus


# ── System ─────────────────────────────────────────────────────────────────────

class FileStats(CamelModel):
    total: int
    uploaded: int
    processing: int
    processed: int
    error: int


class QueueStatusResponse(CamelModel):
    """
    Response for GET /files/system/queue-status.

        {
            "queue": {"queueLength": 0, "activeJobs": 1, "maxConcurrentJobs": 3},
            "fileStats": {"total": 4, "uploaded": 0, "processing": 1, ...}
        }
    """

    queue: QueueStatus
    file_stats: FileStats
