"""fileproc/analyzers/__init__.py — public API of the analyzers package."""

from fileproc.analyzers.base import Analyzer, AnalyzerRegistry, round_half_up
from fileproc.analyzers.csv_analyzer import CsvAnalyzer, infer_column_type
from fileproc.analyzers.generic_analyzer import GenericAnalyzer
from fileproc.analyzers.image_analyzer import ImageAnalyzer, thumbnail_name
from fileproc.analyzers.pdf_analyzer import PdfAnalyzer, extract_pdf_version
from fileproc.analyzers.spreadsheet_analyzer import SpreadsheetAnalyzer
from fileproc.analyzers.text_analyzer import TextAnalyzer

__all__ = [
    "Analyzer",
    "AnalyzerRegistry",
    "CsvAnalyzer",
    "GenericAnalyzer",
    "ImageAnalyzer",
    "PdfAnalyzer",
    "SpreadsheetAnalyzer",
    "TextAnalyzer",
    "extract_pdf_version",
    "infer_column_type",
    "round_half_up",
    "thumbnail_name",
]
