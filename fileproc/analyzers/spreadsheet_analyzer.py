"""
fileproc/analyzers/spreadsheet_analyzer.py

Workbook summary using openpyxl.

Only the OOXML format can be opened; a legacy binary ``.xls`` payload fails
to load and surfaces as a SpreadsheetProcessingFailed.
"""

from __future__ import annotations

import io
from typing import Any, List, Sequence

from openpyxl import load_workbook

from fileproc.analyzers.base import Analyzer
from fileproc.core.constants import SHEET_SAMPLE_ROWS, SPREADSHEET_MEDIA_TYPES, UNKNOWN
from fileproc.core.exceptions import SpreadsheetProcessingFailed
from fileproc.core.logger import get_logger
from fileproc.models.processing_models import SheetSummary, SpreadsheetAnalysis

logger = get_logger(__name__)


def _trim(row: Sequence[Any]) -> List[Any]:
    """Drop trailing empty cells so a row's width is its last populated column."""
    cells = list(row)
    while cells and (cells[-1] is None or cells[-1] == ""):
        cells.pop()
    return cells


class SpreadsheetAnalyzer(Analyzer):
    """Analyzer for Excel workbooks: per-sheet shape plus workbook authorship."""

    media_types = SPREADSHEET_MEDIA_TYPES
    failure = SpreadsheetProcessingFailed

    def analyze(self, data: bytes, media_type: str, filename: str) -> SpreadsheetAnalysis:
        try:
            wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except Exception as exc:
            raise SpreadsheetProcessingFailed(
                f"'{filename}' could not be opened as a workbook: {exc}"
            ) from exc

        try:
            sheets: List[SheetSummary] = []
            for ws in wb.worksheets:
                rows = [_trim(r) for r in ws.iter_rows(values_only=True)]
                while rows and not rows[-1]:
                    rows.pop()
                sheets.append(
                    SheetSummary(
                        name=ws.title,
                        row_count=len(rows),
                        column_count=max((len(r) for r in rows), default=0),
                        has_headers=bool(rows) and len(rows[0]) > 0,
                        sample_rows=rows[:SHEET_SAMPLE_ROWS],
                    )
                )
            props = wb.properties
            creator = props.creator or UNKNOWN
            last_modified_by = props.lastModifiedBy or UNKNOWN
        finally:
            wb.close()

        logger.debug("'%s' — %d sheet(s) summarised.", filename, len(sheets))

        return SpreadsheetAnalysis(
            total_sheets=len(sheets),
            sheets=sheets,
            creator=creator,
            last_modified_by=last_modified_by,
            format="XLSX" if "openxml" in media_type else "XLS",
            size=len(data),
        )
