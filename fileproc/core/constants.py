"""
fileproc/core/constants.py

Application-wide fixed constants.

These are business rules that are part of the system's contract and are
NOT configurable via environment variables.
"""

from typing import Dict, FrozenSet, List, Tuple

MB = 1024 * 1024

# ── Media types ────────────────────────────────────────────────────────────────

JPEG = "image/jpeg"
PNG = "image/png"
GIF = "image/gif"
CSV = "text/csv"
PLAIN_TEXT = "text/plain"
PDF = "application/pdf"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS = "application/vnd.ms-excel"

IMAGE_MEDIA_TYPES: FrozenSet[str] = frozenset({JPEG, PNG, GIF})
SPREADSHEET_MEDIA_TYPES: FrozenSet[str] = frozenset({XLSX, XLS})

#: media type -> (accepted extensions, per-type size limit in bytes)
ALLOWED_MEDIA_TYPES: Dict[str, Tuple[Tuple[str, ...], int]] = {
    JPEG: ((".jpg", ".jpeg"), 5 * MB),
    PNG: ((".png",), 5 * MB),
    GIF: ((".gif",), 2 * MB),
    PDF: ((".pdf",), 10 * MB),
    CSV: ((".csv",), 1 * MB),
    PLAIN_TEXT: ((".txt",), 512 * 1024),
    XLSX: ((".xlsx",), 5 * MB),
    XLS: ((".xls",), 5 * MB),
}

DANGEROUS_EXTENSIONS: FrozenSet[str] = frozenset({
    ".exe", ".bat", ".cmd", ".com", ".pif", ".scr", ".vbs", ".js", ".jar",
    ".app", ".deb", ".pkg", ".rpm", ".dmg", ".iso", ".bin", ".run", ".sh",
})

#: Leading bytes a payload must start with for its declared media type.
#: Types missing from this table are not signature-checked.
MAGIC_SIGNATURES: Dict[str, List[bytes]] = {
    JPEG: [b"\xff\xd8\xff"],
    PNG: [b"\x89PNG\r\n\x1a\n"],
    GIF: [b"GIF87a", b"GIF89a"],
    PDF: [b"%PDF"],
}

# ── Mock virus scanner ─────────────────────────────────────────────────────────

SUSPICIOUS_PATTERNS: Tuple[bytes, ...] = (
    b"EICAR-STANDARD-ANTIVIRUS-TEST-FILE",
    b"X5O!P%@AP[4\\PZX54(P^)7CC)7}$EICAR",
    b"virus",
    b"malware",
)
SCANNER_ENGINE: str = "MockAV v1.0"

# ── Analyzer contract ──────────────────────────────────────────────────────────

THUMBNAIL_MAX_SIDE: int = 200
THUMBNAIL_QUALITY: int = 80
THUMBNAIL_PUBLIC_PREFIX: str = "/uploads/thumbnails"

CSV_SAMPLE_ROWS: int = 5        # rows retained while streaming (type inference)
CSV_RETURNED_ROWS: int = 3      # rows echoed back in the result
SHEET_SAMPLE_ROWS: int = 3

TEXT_PREVIEW_CHARS: int = 200
TEXT_TRUNCATION_MARKER: str = "..."

PDF_BYTES_PER_PAGE: int = 50_000
PDF_HEADER_BYTES: int = 10
UNKNOWN: str = "Unknown"

GENERIC_NOTE: str = "File uploaded successfully but no specific processing available"

# ── Caller-facing error strings (never carry technical detail) ─────────────────

PROCESSING_FAILED: str = "Processing failed"
PROCESSING_FAILED_MESSAGE: str = "The file could not be processed successfully"
PROCESSING_REJECTED_MESSAGE: str = "File processing encountered an error"
