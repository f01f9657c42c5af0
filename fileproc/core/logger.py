"""
fileproc/core/logger.py

Centralised logging configuration.
Every module should obtain its logger via:

    from fileproc.core.logger import get_logger
    logger = get_logger(__name__)

Analyzers run in worker threads, so the format carries the thread name:
a job's "Starting" line comes from the event loop thread, anything the
analyzer itself logs comes from an ``asyncio_N`` worker.
"""

import logging
import sys

from fileproc.core.config import settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)-12s | %(name)s | %(message)s"

# Third-party loggers that are chatty at INFO/DEBUG.
_QUIET_LOGGERS = ("uvicorn.access", "PIL", "multipart", "python_multipart")


def _level() -> int:
    """``debug`` wins; otherwise ``log_level``, falling back to INFO for unknown names."""
    if settings.debug:
        return logging.DEBUG
    level = logging.getLevelName(settings.log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _build_handler(level: int) -> logging.StreamHandler:
    """Return a stdout handler with a structured, readable format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _configure_root_logger() -> None:
    """Configure the root logger once at import time."""
    root = logging.getLogger()
    if root.handlers:
        # Already configured (e.g. by pytest or uvicorn): leave it alone.
        return

    level = _level()
    root.setLevel(level)
    root.addHandler(_build_handler(level))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger.

    Usage
    -----
    >>> logger = get_logger(__name__)
    >>> logger.info("File processing completed — file=%s", file_id)
    """
    return logging.getLogger(name)
