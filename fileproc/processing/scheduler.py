"""
fileproc/processing/scheduler.py

Bounded-concurrency admission queue and job dispatcher.

    submit(request) ──► backlog (FIFO deque) ──► _pump() ──► _run(entry)
         │                                          ▲            │
         └─ returns an asyncio.Future               └── finally ─┘

The scheduler lives on the asyncio event loop: the loop thread is the single
writer of the backlog and the active-job counter, so admission and release
are atomic relative to each other without a lock. Analyzers themselves run
in worker threads via ``asyncio.to_thread`` so parsing and thumbnail writes
never block the request path.

One instance per application; tests build as many independent schedulers as
they need.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Deque, Optional, Set

from fileproc.analyzers.base import AnalyzerRegistry
from fileproc.core.config import settings
from fileproc.core.constants import PROCESSING_FAILED, PROCESSING_FAILED_MESSAGE
from fileproc.core.exceptions import AnalyzerFailure, ResourceFailure, ValidationFailure
from fileproc.core.logger import get_logger
from fileproc.models.processing_models import (
    ErrorCategory,
    ProcessingResult,
    ProcessingStatus,
    QueueStatus,
)

if TYPE_CHECKING:
    from fileproc.storage.base import FileRecord

logger = get_logger(__name__)


# ── Queue vocabulary ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProcessingRequest:
    """
    One unit of work, immutable once submitted.

    Attributes:
        file_id     : Opaque identity of the file record.
        media_type  : Declared media type — the only input to analyzer selection.
        data        : Raw payload.
        byte_length : Declared payload size.
        filename    : Stored filename (drives derived paths such as thumbnails).
    """

    file_id: str
    media_type: str
    data: bytes = field(repr=False)
    byte_length: int
    filename: str

    @classmethod
    def from_record(cls, record: "FileRecord", data: bytes) -> "ProcessingRequest":
        return cls(
            file_id=record.id,
            media_type=record.media_type,
            data=data,
            byte_length=record.size,
            filename=record.filename,
        )


@dataclass
class QueueEntry:
    """A request plus the handle its submitter is awaiting. Never reused."""

    request: ProcessingRequest
    handle: "asyncio.Future[ProcessingResult]"


# ── Scheduler ──────────────────────────────────────────────────────────────────

class ProcessingScheduler:
    """
    Admits processing requests immediately and runs at most
    ``max_concurrent`` analyzers at any instant, oldest request first.

    Every handle settles exactly once. Analyzer failures are converted at the
    per-job boundary into an ``error`` ProcessingResult with a fixed,
    non-leaking message; the technical detail goes to the log only.
    """

    def __init__(
        self,
        registry: Optional[AnalyzerRegistry] = None,
        max_concurrent: Optional[int] = None,
    ) -> None:
        """
        Args:
            registry       : Media type -> analyzer mapping.
                             Defaults to ``AnalyzerRegistry.default()``.
            max_concurrent : Concurrency cap.
                             Defaults to ``settings.max_concurrent_jobs``.
        """
        self._registry: AnalyzerRegistry = registry or AnalyzerRegistry.default()
        self._max_concurrent: int = (
            max_concurrent if max_concurrent is not None else settings.max_concurrent_jobs
        )
        if self._max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {self._max_concurrent}.")

        self._backlog: Deque[QueueEntry] = deque()
        self._active: int = 0
        self._tasks: Set["asyncio.Task[None]"] = set()

    # ── Public API ─────────────────────────────────────────────────────────────

    def submit(self, request: ProcessingRequest) -> "asyncio.Future[ProcessingResult]":
        """
        Queue ``request`` and return its handle without waiting.

        The backlog is unbounded: overload shows up as latency, never as a
        rejection. Must be called from the event loop thread.
        """
        loop = asyncio.get_running_loop()
        handle: "asyncio.Future[ProcessingResult]" = loop.create_future()
        self._backlog.append(QueueEntry(request=request, handle=handle))
        logger.debug(
            "Queued file %s (%s) — backlog=%d active=%d",
            request.file_id,
            request.media_type,
            len(self._backlog),
            self._active,
        )
        self._pump()
        return handle

    def status(self) -> QueueStatus:
        """Point-in-time queue depth and worker usage."""
        return QueueStatus(
            queue_length=len(self._backlog),
            active_jobs=self._active,
            max_concurrent_jobs=self._max_concurrent,
        )

    async def join(self) -> None:
        """Wait until nothing is running and nothing is waiting."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Dispatch ───────────────────────────────────────────────────────────────

    def _pump(self) -> None:
        """Start queued jobs, oldest first, while a slot is free."""
        while self._active < self._max_concurrent and self._backlog:
            entry = self._backlog.popleft()
            self._active += 1
            task = asyncio.ensure_future(self._run(entry))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run(self, entry: QueueEntry) -> None:
        try:
            result = await self._execute(entry.request)
        except asyncio.CancelledError:
            entry.handle.cancel()
            raise
        except Exception as exc:
            logger.exception("Could not build a result for file %s", entry.request.file_id)
            if not entry.handle.done():
                entry.handle.set_exception(exc)
        else:
            # The submitter may have cancelled its handle while we worked.
            if not entry.handle.done():
                entry.handle.set_result(result)
        finally:
            self._active -= 1
            self._pump()

    async def _execute(self, request: ProcessingRequest) -> ProcessingResult:
        started_at = datetime.now(timezone.utc)
        t0 = time.perf_counter()
        logger.info(
            "Starting file processing — file=%s type=%s size=%d",
            request.file_id,
            request.media_type,
            request.byte_length,
        )

        try:
            analyzer = self._registry.resolve(request.media_type)
            analysis = await asyncio.to_thread(
                analyzer.run, request.data, request.media_type, request.filename
            )
        except ValidationFailure as exc:
            logger.warning("File %s rejected by analyzer: %s", request.file_id, exc)
            return self._failed(started_at, t0, ErrorCategory.VALIDATION)
        except AnalyzerFailure as exc:
            logger.warning("File %s could not be analysed: %s", request.file_id, exc)
            return self._failed(started_at, t0, ErrorCategory.ANALYZER)
        except ResourceFailure as exc:
            logger.error("Resource failure while processing file %s: %s", request.file_id, exc)
            return self._failed(started_at, t0, ErrorCategory.RESOURCE)
        except Exception:
            logger.exception("Unexpected error while processing file %s", request.file_id)
            return self._failed(started_at, t0, ErrorCategory.INTERNAL)

        duration_ms = _elapsed_ms(t0)
        logger.info(
            "File processing completed — file=%s kind=%s duration=%dms",
            request.file_id,
            analysis.kind,
            duration_ms,
        )
        return ProcessingResult(
            status=ProcessingStatus.COMPLETED,
            start_time=started_at,
            end_time=datetime.now(timezone.utc),
            duration_ms=duration_ms,
            analysis=analysis,
        )

    @staticmethod
    def _failed(started_at: datetime, t0: float, category: ErrorCategory) -> ProcessingResult:
        return ProcessingResult(
            status=ProcessingStatus.ERROR,
            start_time=started_at,
            end_time=datetime.now(timezone.utc),
            duration_ms=_elapsed_ms(t0),
            error=PROCESSING_FAILED,
            message=PROCESSING_FAILED_MESSAGE,
            error_category=category,
        )


def _elapsed_ms(t0: float) -> int:
    return int((time.perf_counter() - t0) * 1000)
