"""
fileproc/storage/base.py

Abstract interface for the file record layer.

Design goals:
  - Services depend only on this interface, never on a concrete backend.
  - FileRecord is the shared vocabulary between the upload service, the
    processing reconciliation callback and the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from fileproc.validation.virus_scanner import ScanResult


class FileStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


# ── Shared data-transfer objects ──────────────────────────────────────────────

@dataclass
class FileRecord:
    """
    Everything the service knows about one uploaded file.

    Attributes:
        id                : Opaque identifier (uuid4 hex string).
        original_name     : Filename as sent by the client.
        filename          : Secure name the bytes are stored under.
        media_type        : Declared media type.
        size              : Payload size in bytes.
        upload_date       : When the upload was accepted (UTC).
        status            : Lifecycle state, see FileStatus.
        file_path         : Location of the stored bytes on disk.
        download_url      : Public URL of the stored bytes.
        public_access     : Whether the file is listed in public listings.
        processing_result : camelCase result dict once processing settles.
        processed_date    : When processing settled successfully.
        last_modified     : Last metadata update.
        virus_scan        : Outcome of the upload-time scan, if one ran.
    """

    id: str
    original_name: str
    filename: str
    media_type: str
    size: int
    upload_date: datetime
    status: FileStatus = FileStatus.UPLOADED
    file_path: Optional[str] = None
    download_url: Optional[str] = None
    public_access: bool = False
    processing_result: Optional[Dict[str, Any]] = None
    processed_date: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    virus_scan: Optional["ScanResult"] = None


# ── Abstract base ──────────────────────────────────────────────────────────────

class FileStore(ABC):
    """
    Contract every file record backend must fulfil.

    Records are mutable and shared: callers update fields on the object
    returned by ``get`` in place.
    """

    @abstractmethod
    def add(self, record: FileRecord) -> None:
        """Store a new record. Re-adding an existing id overwrites it."""

    @abstractmethod
    def get(self, file_id: str) -> FileRecord:
        """
        Return the record for ``file_id``.

        Raises:
            FileRecordNotFoundError: No such record.
        """

    @abstractmethod
    def find(self, file_id: str) -> Optional[FileRecord]:
        """Return the record for ``file_id`` or ``None``."""

    @abstractmethod
    def list(self) -> List[FileRecord]:
        """All records in upload order."""

    @abstractmethod
    def delete(self, file_id: str) -> FileRecord:
        """
        Remove and return the record for ``file_id``.

        Raises:
            FileRecordNotFoundError: No such record.
        """

    def count_by_status(self) -> Dict[str, int]:
        """``{"total": n, "uploaded": .., "processing": .., "processed": .., "error": ..}``"""
        records = self.list()
        counts = {"total": len(records)}
        for status in FileStatus:
            counts[status.value] = sum(1 for r in records if r.status is status)
        return counts
