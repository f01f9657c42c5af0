"""
fileproc/services/upload_service.py

Orchestrates the upload lifecycle around the processing scheduler:

    bytes + filename + media type
      └─ FileValidator.ensure_valid()
           └─ VirusScanner.scan()
                └─ write to <upload_dir>/<secure name>
                     └─ FileStore.add()
                          └─ ProcessingScheduler.submit()  → handle
                               └─ _reconcile()  (handle done-callback)

The scheduler never touches file records; reconciling a settled handle into
the record's status and result is this service's job.

All collaborators are constructor-injected so tests can swap them out.
"""

from __future__ import annotations

import asyncio
import functools
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fileproc.analyzers.image_analyzer import thumbnail_name
from fileproc.core.config import settings
from fileproc.core.constants import IMAGE_MEDIA_TYPES, PROCESSING_FAILED, PROCESSING_REJECTED_MESSAGE
from fileproc.core.exceptions import (
    ProcessingConflictError,
    SecurityThreatError,
    StorageError,
)
from fileproc.core.logger import get_logger
from fileproc.models.processing_models import ProcessingResult, QueueStatus
from fileproc.processing.scheduler import ProcessingRequest, ProcessingScheduler
from fileproc.storage.base import FileRecord, FileStatus, FileStore
from fileproc.storage.memory_store import InMemoryFileStore
from fileproc.validation.file_validator import FileValidator, generate_secure_filename
from fileproc.validation.virus_scanner import VirusScanner

logger = get_logger(__name__)


@dataclass
class FilePage:
    files: List[FileRecord]
    page: int
    limit: int
    total: int

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class UploadService:
    """
    Accepts uploads, keeps their records, and feeds them to the scheduler.

    Design choices:
    - **Fire and forget**: ``upload`` returns as soon as the job is queued;
      the record moves to ``processed`` / ``error`` when its handle settles.
    - **Constructor injection**: the scheduler is shared by reference (one
      per app); store, validator and scanner default to the production ones.
    """

    def __init__(
        self,
        scheduler: ProcessingScheduler,
        store: FileStore | None = None,
        validator: FileValidator | None = None,
        scanner: VirusScanner | None = None,
        upload_dir: str | Path | None = None,
        scan_enabled: bool | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._store: FileStore = store or InMemoryFileStore()
        self._validator: FileValidator = validator or FileValidator()
        self._scanner: VirusScanner = scanner or VirusScanner()
        self._upload_dir = Path(upload_dir or settings.upload_dir)
        self._scan_enabled: bool = (
            settings.virus_scan_enabled if scan_enabled is None else scan_enabled
        )
        self._handles: Dict[str, "asyncio.Future[ProcessingResult]"] = {}

    @property
    def thumbnail_dir(self) -> Path:
        return self._upload_dir / "thumbnails"

    # ── Upload ─────────────────────────────────────────────────────────────────

    async def upload(self, filename: str, media_type: str, data: bytes) -> FileRecord:
        """
        Validate, scan, store and queue one file.

        Returns:
            The new record, already in ``processing`` state.

        Raises:
            FileValidationError : One or more validation checks failed.
            SecurityThreatError : The scanner flagged the payload.
            StorageError        : The bytes could not be written to disk.
        """
        self._validator.ensure_valid(filename, media_type, data)

        scan = None
        if self._scan_enabled:
            scan = self._scanner.scan(data)
            if not scan.clean:
                logger.warning("Virus detected in upload '%s' — %s", filename, scan.threat)
                raise SecurityThreatError(scan.threat or "Threat detected")

        secure_name = generate_secure_filename(filename)
        path = self._upload_dir / secure_name
        try:
            await asyncio.to_thread(_write_bytes, path, data)
        except OSError as exc:
            raise StorageError(f"Could not store '{filename}': {exc}") from exc

        record = FileRecord(
            id=str(uuid.uuid4()),
            original_name=filename,
            filename=secure_name,
            media_type=media_type,
            size=len(data),
            upload_date=_now(),
            file_path=str(path),
            download_url=f"/uploads/{secure_name}",
            virus_scan=scan,
        )
        self._store.add(record)
        self._dispatch(record, data)

        logger.info(
            "File uploaded successfully — id=%s name='%s' size=%d",
            record.id,
            filename,
            record.size,
        )
        return record

    # ── Queries ────────────────────────────────────────────────────────────────

    def list_files(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        status: Optional[FileStatus] = None,
        public_only: bool = False,
    ) -> FilePage:
        """Filter by status / public flag, then paginate (limit clamped to 1..max_page_size)."""
        page = max(1, page)
        limit = min(settings.max_page_size, max(1, limit or settings.default_page_size))

        records = self._store.list()
        if public_only:
            records = [r for r in records if r.public_access]
        if status is not None:
            records = [r for r in records if r.status is status]

        start = (page - 1) * limit
        return FilePage(
            files=records[start:start + limit],
            page=page,
            limit=limit,
            total=len(records),
        )

    def get_file(self, file_id: str) -> FileRecord:
        return self._store.get(file_id)

    def read_file(self, file_id: str) -> Path:
        """
        Location of the stored bytes.

        Raises:
            FileRecordNotFoundError : No such record.
            StorageError            : The bytes are no longer on disk.
        """
        record = self._store.get(file_id)
        if not record.file_path or not Path(record.file_path).is_file():
            raise StorageError(f"Stored bytes for '{file_id}' are not available.")
        return Path(record.file_path)

    def queue_status(self) -> Tuple[QueueStatus, Dict[str, int]]:
        """Scheduler snapshot plus per-status record counts."""
        return self._scheduler.status(), self._store.count_by_status()

    # ── Mutations ──────────────────────────────────────────────────────────────

    def update_file(
        self,
        file_id: str,
        public_access: Optional[bool] = None,
        original_name: Optional[str] = None,
    ) -> FileRecord:
        record = self._store.get(file_id)
        if public_access is not None:
            record.public_access = public_access
        if original_name is not None:
            record.original_name = original_name
        record.last_modified = _now()
        logger.info("File metadata updated — id=%s", file_id)
        return record

    async def delete_file(self, file_id: str) -> FileRecord:
        """
        Remove the record, its stored bytes and (for images) its thumbnail.

        Filesystem failures are logged and do not block the record removal.
        """
        record = self._store.get(file_id)

        targets: List[Path] = []
        if record.file_path:
            targets.append(Path(record.file_path))
        if record.media_type in IMAGE_MEDIA_TYPES:
            targets.append(self.thumbnail_dir / thumbnail_name(record.filename))

        for target in targets:
            try:
                await asyncio.to_thread(target.unlink, missing_ok=True)
            except OSError as exc:
                logger.warning("Failed to delete '%s' for file %s: %s", target, file_id, exc)

        self._store.delete(file_id)
        self._handles.pop(file_id, None)
        logger.info("File deleted successfully — id=%s name='%s'", file_id, record.original_name)
        return record

    async def reprocess(self, file_id: str) -> FileRecord:
        """
        Queue an already-uploaded file again.

        Raises:
            FileRecordNotFoundError : No such record.
            ProcessingConflictError : The file is already being processed.
            StorageError            : The stored bytes could not be read.
        """
        record = self._store.get(file_id)
        if record.status is FileStatus.PROCESSING:
            raise ProcessingConflictError(f"File '{file_id}' is already being processed.")

        # Claim the record before yielding to the loop so a second caller
        # sees PROCESSING and is refused.
        previous = record.status
        record.status = FileStatus.PROCESSING
        try:
            data = await asyncio.to_thread(self.read_file(file_id).read_bytes)
        except OSError as exc:
            record.status = previous
            raise StorageError(f"Stored bytes for '{file_id}' could not be read: {exc}") from exc
        except StorageError:
            record.status = previous
            raise

        self._dispatch(record, data)
        return record

    # ── Internals ──────────────────────────────────────────────────────────────

    def _dispatch(self, record: FileRecord, data: bytes) -> "asyncio.Future[ProcessingResult]":
        record.status = FileStatus.PROCESSING
        record.processing_result = None
        handle = self._scheduler.submit(ProcessingRequest.from_record(record, data))
        self._handles[record.id] = handle
        handle.add_done_callback(functools.partial(self._reconcile, record.id))
        return handle

    def _reconcile(self, file_id: str, handle: "asyncio.Future[ProcessingResult]") -> None:
        """Write a settled handle's outcome back into its file record."""
        if self._handles.get(file_id) is handle:
            del self._handles[file_id]

        record = self._store.find(file_id)
        if record is None:
            logger.debug("File %s was deleted before processing settled.", file_id)
            return

        if handle.cancelled() or handle.exception() is not None:
            reason = "cancelled" if handle.cancelled() else repr(handle.exception())
            logger.error("File processing failed — id=%s error=%s", file_id, reason)
            record.status = FileStatus.ERROR
            record.processing_result = {
                "error": PROCESSING_FAILED,
                "message": PROCESSING_REJECTED_MESSAGE,
            }
            return

        result = handle.result()
        record.processing_result = result.to_public()
        if result.ok:
            record.status = FileStatus.PROCESSED
            record.processed_date = _now()
        else:
            record.status = FileStatus.ERROR
