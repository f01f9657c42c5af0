"""fileproc/analyzers/generic_analyzer.py — fallback for media types without a dedicated analyzer."""

from __future__ import annotations

from fileproc.analyzers.base import Analyzer
from fileproc.core.constants import GENERIC_NOTE
from fileproc.models.processing_models import GenericAnalysis


class GenericAnalyzer(Analyzer):
    """Accepts any media type and reports only size and type. Never fails."""

    def analyze(self, data: bytes, media_type: str, filename: str) -> GenericAnalysis:
        return GenericAnalysis(note=GENERIC_NOTE, size=len(data), media_type=media_type)
