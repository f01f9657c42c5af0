"""
tests/processing/test_scheduler.py

Unit tests for ProcessingScheduler.

Most tests plug small purpose-built analyzers into the registry so that
timing, ordering and failures are fully controlled. The failure-isolation
test uses the production registry against real payloads.
"""

from __future__ import annotations

import asyncio
import threading
import time
from pathlib import Path
from typing import List

import pytest

from fileproc.analyzers.base import Analyzer, AnalyzerRegistry
from fileproc.analyzers.text_analyzer import TextAnalyzer
from fileproc.core.exceptions import ThumbnailWriteError
from fileproc.models.processing_models import (
    ErrorCategory,
    GenericAnalysis,
    ProcessingStatus,
)
from fileproc.processing.scheduler import ProcessingRequest, ProcessingScheduler


# ── Helpers ────────────────────────────────────────────────────────────────────

def _request(i: int, media_type: str = "text/plain", data: bytes = b"x") -> ProcessingRequest:
    return ProcessingRequest(
        file_id=f"id-{i}",
        media_type=media_type,
        data=data,
        byte_length=len(data),
        filename=f"f{i}.txt",
    )


def _scheduler(analyzer: Analyzer, max_concurrent: int) -> ProcessingScheduler:
    return ProcessingScheduler(
        registry=AnalyzerRegistry([], fallback=analyzer),
        max_concurrent=max_concurrent,
    )


def _ok(data: bytes, media_type: str) -> GenericAnalysis:
    return GenericAnalysis(note="ok", size=len(data), media_type=media_type)


class CountingAnalyzer(Analyzer):
    """Sleeps briefly and records the peak number of overlapping calls."""

    def __init__(self, delay: float = 0.05) -> None:
        self.delay = delay
        self.current = 0
        self.peak = 0
        self._lock = threading.Lock()

    def analyze(self, data, media_type, filename):
        with self._lock:
            self.current += 1
            self.peak = max(self.peak, self.current)
        time.sleep(self.delay)
        with self._lock:
            self.current -= 1
        return _ok(data, media_type)


class RecordingAnalyzer(Analyzer):
    """Records the order in which jobs start."""

    def __init__(self) -> None:
        self.started: List[str] = []

    def analyze(self, data, media_type, filename):
        self.started.append(filename)
        return _ok(data, media_type)


class GateAnalyzer(Analyzer):
    """Blocks every job until the gate opens."""

    def __init__(self) -> None:
        self.gate = threading.Event()

    def analyze(self, data, media_type, filename):
        self.gate.wait(timeout=5)
        return _ok(data, media_type)


class RaisingAnalyzer(Analyzer):
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def analyze(self, data, media_type, filename):
        raise self.exc


# ── Construction ───────────────────────────────────────────────────────────────

class TestConstruction:

    def test_rejects_non_positive_limit(self) -> None:
        with pytest.raises(ValueError):
            _scheduler(RecordingAnalyzer(), max_concurrent=0)

    def test_initial_status(self) -> None:
        status = _scheduler(RecordingAnalyzer(), max_concurrent=3).status()

        assert status.queue_length == 0
        assert status.active_jobs == 0
        assert status.max_concurrent_jobs == 3


# ── Admission and dispatch ─────────────────────────────────────────────────────

class TestDispatch:

    @pytest.mark.asyncio
    async def test_concurrency_never_exceeds_limit(self) -> None:
        analyzer = CountingAnalyzer()
        scheduler = _scheduler(analyzer, max_concurrent=3)

        handles = [scheduler.submit(_request(i)) for i in range(10)]
        await asyncio.gather(*handles)

        assert analyzer.peak == 3

    @pytest.mark.asyncio
    async def test_jobs_start_in_submission_order(self) -> None:
        analyzer = RecordingAnalyzer()
        scheduler = _scheduler(analyzer, max_concurrent=1)

        handles = [scheduler.submit(_request(i)) for i in range(5)]
        await asyncio.gather(*handles)

        assert analyzer.started == [f"f{i}.txt" for i in range(5)]

    @pytest.mark.asyncio
    async def test_status_reflects_backlog_and_active_jobs(self) -> None:
        analyzer = GateAnalyzer()
        scheduler = _scheduler(analyzer, max_concurrent=1)

        handles = [scheduler.submit(_request(i)) for i in range(3)]
        status = scheduler.status()
        assert status.active_jobs == 1
        assert status.queue_length == 2

        analyzer.gate.set()
        await asyncio.gather(*handles)

        status = scheduler.status()
        assert status.active_jobs == 0
        assert status.queue_length == 0

    @pytest.mark.asyncio
    async def test_every_handle_settles(self) -> None:
        scheduler = _scheduler(CountingAnalyzer(delay=0.01), max_concurrent=2)

        handles = [scheduler.submit(_request(i)) for i in range(8)]
        await scheduler.join()

        assert all(h.done() for h in handles)
        assert all(h.result().status is ProcessingStatus.COMPLETED for h in handles)

    @pytest.mark.asyncio
    async def test_completed_result_carries_timing(self) -> None:
        scheduler = _scheduler(RecordingAnalyzer(), max_concurrent=1)

        result = await scheduler.submit(_request(1))

        assert result.ok
        assert result.start_time <= result.end_time
        assert result.duration_ms >= 0
        assert result.analysis.kind == "generic"

    @pytest.mark.asyncio
    async def test_caller_cancelled_handle_does_not_break_the_queue(self) -> None:
        analyzer = GateAnalyzer()
        scheduler = _scheduler(analyzer, max_concurrent=1)

        first = scheduler.submit(_request(1))
        second = scheduler.submit(_request(2))
        first.cancel()
        analyzer.gate.set()

        result = await second
        await scheduler.join()

        assert result.ok
        assert scheduler.status().active_jobs == 0


# ── Failure handling ───────────────────────────────────────────────────────────

class TestFailures:

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_non_leaking_result(self) -> None:
        scheduler = _scheduler(
            RaisingAnalyzer(RuntimeError("secret path /srv/internal")), max_concurrent=1
        )

        result = await scheduler.submit(_request(1))

        assert result.status is ProcessingStatus.ERROR
        assert result.error == "Processing failed"
        assert result.message == "The file could not be processed successfully"
        assert "secret" not in result.model_dump_json()
        assert result.analysis is None

    @pytest.mark.asyncio
    async def test_analyzer_failure_category(self) -> None:
        scheduler = _scheduler(RaisingAnalyzer(ValueError("bad bytes")), max_concurrent=1)

        result = await scheduler.submit(_request(1))

        # Analyzer.run wraps unknown errors in the analyzer's typed failure.
        assert result.error_category is ErrorCategory.ANALYZER

    @pytest.mark.asyncio
    async def test_resource_failure_category(self) -> None:
        scheduler = _scheduler(RaisingAnalyzer(ThumbnailWriteError("disk full")), max_concurrent=1)

        result = await scheduler.submit(_request(1))

        assert result.error_category is ErrorCategory.RESOURCE

    @pytest.mark.asyncio
    async def test_unsupported_type_is_validation_category(self) -> None:
        scheduler = _scheduler(TextAnalyzer(), max_concurrent=1)

        result = await scheduler.submit(_request(1, media_type="image/png"))

        assert result.error_category is ErrorCategory.VALIDATION

    @pytest.mark.asyncio
    async def test_failure_releases_its_slot(self) -> None:
        scheduler = _scheduler(RaisingAnalyzer(RuntimeError("boom")), max_concurrent=1)

        handles = [scheduler.submit(_request(i)) for i in range(3)]
        results = await asyncio.gather(*handles)

        assert [r.status for r in results] == [ProcessingStatus.ERROR] * 3
        assert scheduler.status().active_jobs == 0

    @pytest.mark.asyncio
    async def test_corrupt_image_does_not_affect_text_job(self, tmp_path: Path) -> None:
        scheduler = ProcessingScheduler(
            registry=AnalyzerRegistry.default(thumbnail_dir=tmp_path),
            max_concurrent=2,
        )

        image = scheduler.submit(_request(1, media_type="image/png", data=b"not an image"))
        text = scheduler.submit(_request(2, media_type="text/plain", data=b"hello world\nfoo"))
        image_result, text_result = await asyncio.gather(image, text)

        assert image_result.status is ProcessingStatus.ERROR
        assert image_result.error_category is ErrorCategory.ANALYZER
        assert text_result.status is ProcessingStatus.COMPLETED
        assert text_result.analysis.line_count == 2
        assert text_result.analysis.word_count == 3
