"""
fileproc/analyzers/pdf_analyzer.py

Heuristic PDF inspection.

No document model is built: page count is estimated from the payload size
and features are detected by raw byte-pattern search.
"""

from __future__ import annotations

import re

from fileproc.analyzers.base import Analyzer
from fileproc.core.constants import PDF, PDF_BYTES_PER_PAGE, PDF_HEADER_BYTES, UNKNOWN
from fileproc.core.exceptions import PdfProcessingFailed
from fileproc.models.processing_models import PdfAnalysis

_VERSION_RE = re.compile(rb"%PDF-(\d\.\d)")


def extract_pdf_version(data: bytes) -> str:
    """``b"%PDF-1.4..."`` -> ``"1.4"``; ``"Unknown"`` when the header is absent."""
    match = _VERSION_RE.search(data[:PDF_HEADER_BYTES])
    return match.group(1).decode("ascii") if match else UNKNOWN


class PdfAnalyzer(Analyzer):
    media_types = frozenset({PDF})
    failure = PdfProcessingFailed

    def analyze(self, data: bytes, media_type: str, filename: str) -> PdfAnalysis:
        # An empty payload still completes: one page, version "Unknown".
        return PdfAnalysis(
            estimated_pages=max(1, len(data) // PDF_BYTES_PER_PAGE),
            file_size=len(data),
            has_images=b"/Image" in data,
            has_text=b"/Text" in data,
            encrypted=b"/Encrypt" in data,
            has_signature=b"/Sig" in data,
            pdf_version=extract_pdf_version(data),
        )
