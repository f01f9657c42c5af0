"""
fileproc/validation/file_validator.py

Upload-time checks run before a file is stored or queued for processing.

Checks, all collected rather than short-circuited so the client sees every
problem at once:
  - payload present and non-empty
  - size under the absolute ceiling and under the per-type limit
  - media type on the allow-list
  - extension consistent with the media type, and not a dangerous one
  - leading bytes matching the media type's magic number
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import List, Optional

from fileproc.core.config import settings
from fileproc.core.constants import ALLOWED_MEDIA_TYPES, DANGEROUS_EXTENSIONS, MAGIC_SIGNATURES, MB
from fileproc.core.exceptions import FileValidationError

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def generate_secure_filename(original_name: str) -> str:
    """
    ``"My Report (v2).PDF"`` -> ``"<uuid4>_My_Report__v2_.pdf"``

    The stem is sanitised and capped at 50 characters; the extension is
    lower-cased and kept.
    """
    path = PurePath(original_name)
    ext = path.suffix.lower()
    stem = _UNSAFE_CHARS.sub("_", path.stem)[:50]
    return f"{uuid.uuid4()}_{stem}{ext}"


def header_matches(data: bytes, media_type: str) -> bool:
    """True when ``data`` starts with a known signature for ``media_type`` (or none is known)."""
    signatures = MAGIC_SIGNATURES.get(media_type)
    if not signatures:
        return True
    return any(data.startswith(sig) for sig in signatures)


class FileValidator:
    """Validates an upload's name, declared media type and bytes."""

    def __init__(self, max_bytes: Optional[int] = None) -> None:
        """
        Args:
            max_bytes: Absolute size ceiling. Defaults to ``settings.max_upload_bytes``.
        """
        self.max_bytes: int = max_bytes or settings.max_upload_bytes

    def validate(self, filename: str, media_type: str, data: bytes) -> ValidationReport:
        report = ValidationReport()

        if not data:
            report.errors.append("File is empty or corrupted")
            return report

        size = len(data)
        if size > self.max_bytes:
            report.errors.append(
                f"File size exceeds maximum limit of {self.max_bytes // MB}MB"
            )

        ext = PurePath(filename or "").suffix.lower()
        rule = ALLOWED_MEDIA_TYPES.get(media_type)
        if rule is None:
            report.errors.append(f"File type {media_type} is not allowed")
        else:
            extensions, limit = rule
            if size > limit:
                report.errors.append(
                    f"File size exceeds limit for {media_type} (max: {limit / MB:g}MB)"
                )
            if ext not in extensions:
                report.errors.append(
                    f"File extension {ext or '(none)'} doesn't match MIME type {media_type}"
                )

        if ext in DANGEROUS_EXTENSIONS:
            report.errors.append(f"File extension {ext} is not allowed for security reasons")

        if not header_matches(data, media_type):
            report.errors.append(
                f"File header doesn't match expected format for {media_type}"
            )

        return report

    def ensure_valid(self, filename: str, media_type: str, data: bytes) -> None:
        """
        Raises:
            FileValidationError: One or more checks failed; ``errors`` lists them.
        """
        report = self.validate(filename, media_type, data)
        if not report.is_valid:
            raise FileValidationError(report.errors)
