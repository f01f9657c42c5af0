"""
fileproc/core/exceptions.py

Custom exception hierarchy for the application.

Raising typed exceptions from analyzers and services lets the scheduler
classify failures and lets controllers return the correct HTTP status code
without leaking internals.
"""

from typing import List, Optional


class AppBaseException(Exception):
    """Root exception — catch-all for any application-level error."""


# ── Validation failures ────────────────────────────────────────────────────────

class ValidationFailure(AppBaseException):
    """Raised when input is rejected before any analysis work is done."""


class UnsupportedMediaTypeError(ValidationFailure):
    """Raised when an analyzer is asked to handle a media type it does not support."""


class FileValidationError(ValidationFailure):
    """Raised when an upload fails one or more validation checks."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class SecurityThreatError(ValidationFailure):
    """Raised when the scanner flags an upload."""

    def __init__(self, threat: str) -> None:
        super().__init__(threat)
        self.threat = threat


# ── Analyzer failures ──────────────────────────────────────────────────────────

class AnalyzerFailure(AppBaseException):
    """Raised when an analyzer cannot decode or parse the bytes it was given."""


class ImageProcessingFailed(AnalyzerFailure):
    """Corrupt or undecodable image payload."""


class CsvProcessingFailed(AnalyzerFailure):
    """Undecodable or malformed CSV payload."""


class SpreadsheetProcessingFailed(AnalyzerFailure):
    """Workbook could not be opened or read."""


class PdfProcessingFailed(AnalyzerFailure):
    """PDF bytes could not be inspected."""


class TextProcessingFailed(AnalyzerFailure):
    """Plain-text payload could not be analysed."""


# ── Resource failures ──────────────────────────────────────────────────────────

class ResourceFailure(AppBaseException):
    """Raised when a filesystem or other resource operation fails."""


class ThumbnailWriteError(ResourceFailure):
    """Raised when a thumbnail cannot be persisted."""


class StorageError(ResourceFailure):
    """Raised when an uploaded file cannot be written or read back."""


# ── File record exceptions ─────────────────────────────────────────────────────

class FileRecordNotFoundError(AppBaseException):
    """Raised when no file record exists for the given id."""

    def __init__(self, file_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"File '{file_id}' does not exist.")
        self.file_id = file_id


class ProcessingConflictError(AppBaseException):
    """Raised when processing is requested for a file that is already being processed."""
