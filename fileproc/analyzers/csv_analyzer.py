"""
fileproc/analyzers/csv_analyzer.py

Streams delimited text with the standard-library ``csv`` reader.

Every data row is counted, but only the first few are retained: they feed
the per-column type inference and the sample echoed back to the client.
"""

from __future__ import annotations

import csv
import io
import re
from datetime import datetime
from typing import Dict, Iterable, List

from fileproc.analyzers.base import Analyzer
from fileproc.core.constants import CSV, CSV_RETURNED_ROWS, CSV_SAMPLE_ROWS
from fileproc.core.exceptions import CsvProcessingFailed
from fileproc.core.logger import get_logger
from fileproc.models.processing_models import ColumnType, CsvAnalysis

logger = get_logger(__name__)

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

_NUMBER_RE = re.compile(
    r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
    r"|0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+"
)

# Non-ISO layouts still accepted as calendar dates.
_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%a, %d %b %Y %H:%M:%S GMT",
)


def _is_number(value: str) -> bool:
    """
    Numeric literal as a browser's ``Number()`` reads it.

    Accepts signed decimals with an optional exponent, ``Infinity`` (exact
    spelling) and unsigned hex/binary/octal integers. Rejects what ``float()``
    alone would let through: digit separators (``1_000``), ``inf``, ``nan``.
    """
    return _NUMBER_RE.fullmatch(value.strip()) is not None


def _is_date(value: str) -> bool:
    try:
        datetime.fromisoformat(value)
        return True
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(value, fmt)
            return True
        except ValueError:
            continue
    return False


def infer_column_type(values: Iterable[str]) -> ColumnType:
    """
    Guess a column's type from its sampled values.

    Blank values are ignored. The checks run in a fixed order and the first
    hit wins: every value numeric -> ``number``; any value email-like ->
    ``email``; any value a calendar date -> ``date``; otherwise ``text``.
    A column with no non-blank values is ``empty``.

    A single date-like value is enough to classify the whole column as
    ``date``, so mixed columns can be labelled loosely.
    """
    present = [v.strip() for v in values if v and v.strip()]
    if not present:
        return "empty"
    if all(_is_number(v) for v in present):
        return "number"
    if any(_EMAIL_RE.search(v) for v in present):
        return "email"
    if any(_is_date(v) for v in present):
        return "date"
    return "text"


class CsvAnalyzer(Analyzer):
    """Analyzer for ``text/csv`` uploads. The first row is the header row."""

    media_types = frozenset({CSV})
    failure = CsvProcessingFailed

    def analyze(self, data: bytes, media_type: str, filename: str) -> CsvAnalysis:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CsvProcessingFailed(f"'{filename}' is not valid UTF-8: {exc}") from exc

        headers: List[str] = []
        sample: List[Dict[str, str]] = []
        total_rows = 0

        reader = csv.reader(io.StringIO(text, newline=""))
        try:
            for row in reader:
                if not row:            # blank line
                    continue
                if not headers:
                    headers = row
                    continue
                total_rows += 1
                if len(sample) < CSV_SAMPLE_ROWS:
                    sample.append(
                        {h: (row[i] if i < len(row) else "") for i, h in enumerate(headers)}
                    )
        except csv.Error as exc:
            raise CsvProcessingFailed(
                f"'{filename}' is malformed near line {reader.line_num}: {exc}"
            ) from exc

        # No data rows, no guesses: the map stays empty rather than all-"empty".
        column_types: Dict[str, ColumnType] = {}
        if sample:
            column_types = {h: infer_column_type(r.get(h, "") for r in sample) for h in headers}

        logger.debug("'%s' — %d data row(s), %d column(s).", filename, total_rows, len(headers))

        return CsvAnalysis(
            total_rows=total_rows,
            columns=headers,
            column_count=len(headers),
            sample_rows=sample[:CSV_RETURNED_ROWS],
            column_type_guesses=column_types,
            has_headers=bool(headers),
            size=len(data),
        )
