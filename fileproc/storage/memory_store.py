"""
fileproc/storage/memory_store.py

In-memory implementation of the FileStore interface.

Records live for the lifetime of the process only — nothing survives a
restart. All access happens on the event loop thread.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from fileproc.core.exceptions import FileRecordNotFoundError
from fileproc.storage.base import FileRecord, FileStore


class InMemoryFileStore(FileStore):
    """FileStore backed by an insertion-ordered dict."""

    def __init__(self) -> None:
        self._records: Dict[str, FileRecord] = {}

    def add(self, record: FileRecord) -> None:
        self._records[record.id] = record

    def get(self, file_id: str) -> FileRecord:
        record = self._records.get(file_id)
        if record is None:
            raise FileRecordNotFoundError(file_id)
        return record

    def find(self, file_id: str) -> Optional[FileRecord]:
        return self._records.get(file_id)

    def list(self) -> List[FileRecord]:
        return list(self._records.values())

    def delete(self, file_id: str) -> FileRecord:
        try:
            return self._records.pop(file_id)
        except KeyError:
            raise FileRecordNotFoundError(file_id) from None
