"""fileproc/storage/__init__.py — public API of the storage package."""

from fileproc.storage.base import FileRecord, FileStatus, FileStore
from fileproc.storage.memory_store import InMemoryFileStore

__all__ = [
    "FileRecord",
    "FileStatus",
    "FileStore",
    "InMemoryFileStore",
]
