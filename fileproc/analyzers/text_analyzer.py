"""fileproc/analyzers/text_analyzer.py — line/word/character statistics for plain text."""

from __future__ import annotations

from fileproc.analyzers.base import Analyzer, round_half_up
from fileproc.core.constants import PLAIN_TEXT, TEXT_PREVIEW_CHARS, TEXT_TRUNCATION_MARKER
from fileproc.core.exceptions import TextProcessingFailed
from fileproc.models.processing_models import TextAnalysis


class TextAnalyzer(Analyzer):
    """
    Analyzer for ``text/plain``.

    Undecodable bytes are replaced rather than rejected. An empty payload is
    still one (empty) line, so the per-line average never divides by zero.
    """

    media_types = frozenset({PLAIN_TEXT})
    failure = TextProcessingFailed

    def analyze(self, data: bytes, media_type: str, filename: str) -> TextAnalysis:
        text = data.decode("utf-8", errors="replace")

        lines = text.split("\n")
        words = text.split()
        preview = text[:TEXT_PREVIEW_CHARS]
        if len(text) > TEXT_PREVIEW_CHARS:
            preview += TEXT_TRUNCATION_MARKER

        return TextAnalysis(
            line_count=len(lines),
            word_count=len(words),
            character_count=len(text),
            average_words_per_line=round_half_up(len(words) / len(lines), 1),
            preview=preview,
            is_empty=not text.strip(),
            size=len(data),
        )
