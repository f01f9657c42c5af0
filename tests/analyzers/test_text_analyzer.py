"""
tests/analyzers/test_text_analyzer.py

Unit tests for TextAnalyzer, GenericAnalyzer and the analyzer registry.
"""

from __future__ import annotations

from pathlib import Path

from fileproc.analyzers.base import AnalyzerRegistry, round_half_up
from fileproc.analyzers.csv_analyzer import CsvAnalyzer
from fileproc.analyzers.generic_analyzer import GenericAnalyzer
from fileproc.analyzers.image_analyzer import ImageAnalyzer
from fileproc.analyzers.spreadsheet_analyzer import SpreadsheetAnalyzer
from fileproc.analyzers.text_analyzer import TextAnalyzer
from fileproc.core.constants import GENERIC_NOTE, XLS, XLSX


class TestTextAnalyzer:

    def test_counts(self) -> None:
        result = TextAnalyzer().run(b"hello world\nfoo", "text/plain", "n.txt")

        assert result.kind == "text"
        assert result.line_count == 2
        assert result.word_count == 3
        assert result.character_count == 15
        assert result.average_words_per_line == 1.5
        assert result.preview == "hello world\nfoo"
        assert result.is_empty is False
        assert result.size == 15

    def test_long_text_preview_is_truncated(self) -> None:
        result = TextAnalyzer().run(b"a" * 250, "text/plain", "long.txt")

        assert result.preview == "a" * 200 + "..."
        assert result.character_count == 250

    def test_exactly_200_chars_has_no_marker(self) -> None:
        result = TextAnalyzer().run(b"b" * 200, "text/plain", "edge.txt")
        assert result.preview == "b" * 200

    def test_empty_payload(self) -> None:
        result = TextAnalyzer().run(b"", "text/plain", "empty.txt")

        assert result.line_count == 1
        assert result.word_count == 0
        assert result.average_words_per_line == 0.0
        assert result.is_empty is True

    def test_whitespace_only_is_empty(self) -> None:
        assert TextAnalyzer().run(b"  \n\t\n", "text/plain", "ws.txt").is_empty is True

    def test_average_rounds_exact_ties_up(self) -> None:
        # 1 word over 4 lines is exactly 0.25; round() would give 0.2.
        result = TextAnalyzer().run(b"a\n\n\n", "text/plain", "tie.txt")

        assert result.line_count == 4
        assert result.average_words_per_line == 0.3

    def test_invalid_utf8_is_replaced_not_rejected(self) -> None:
        result = TextAnalyzer().run(b"ok \xff\xfe done", "text/plain", "mixed.txt")

        assert result.word_count == 3
        assert "\ufffd" in result.preview
        assert result.size == 10


class TestGenericAnalyzer:

    def test_reports_note_size_and_type(self) -> None:
        result = GenericAnalyzer().run(b"12345", "application/zip", "a.zip")

        assert result.kind == "generic"
        assert result.note == GENERIC_NOTE
        assert result.size == 5
        assert result.media_type == "application/zip"

    def test_accepts_any_media_type(self) -> None:
        assert GenericAnalyzer().supports("anything/at-all") is True


class TestAnalyzerRegistry:

    def test_default_registry_routes_by_declared_type(self, tmp_path: Path) -> None:
        registry = AnalyzerRegistry.default(thumbnail_dir=tmp_path)

        assert isinstance(registry.resolve("image/png"), ImageAnalyzer)
        assert isinstance(registry.resolve("text/csv"), CsvAnalyzer)
        assert isinstance(registry.resolve(XLSX), SpreadsheetAnalyzer)
        assert isinstance(registry.resolve(XLS), SpreadsheetAnalyzer)
        assert isinstance(registry.resolve("text/plain"), TextAnalyzer)

    def test_unknown_type_falls_back_to_generic(self, tmp_path: Path) -> None:
        registry = AnalyzerRegistry.default(thumbnail_dir=tmp_path)
        assert isinstance(registry.resolve("application/zip"), GenericAnalyzer)

    def test_thumbnail_dir_is_passed_to_image_analyzer(self, tmp_path: Path) -> None:
        registry = AnalyzerRegistry.default(thumbnail_dir=tmp_path / "thumbs")
        assert registry.resolve("image/gif").thumbnail_dir == tmp_path / "thumbs"


class TestRoundHalfUp:

    def test_exact_ties_go_up(self) -> None:
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(1.125, 2) == 1.13
        assert round_half_up(2.5, 0) == 3.0

    def test_inexact_ties_follow_the_stored_value(self) -> None:
        # 1.005 is stored as 1.00499999...
        assert round_half_up(1.005, 2) == 1.0

    def test_negative_ties_go_away_from_zero(self) -> None:
        assert round_half_up(-0.25, 1) == -0.3
