"""fileproc/processing/__init__.py — public API of the processing package."""

from fileproc.processing.scheduler import ProcessingRequest, ProcessingScheduler, QueueEntry

__all__ = [
    "ProcessingRequest",
    "ProcessingScheduler",
    "QueueEntry",
]
