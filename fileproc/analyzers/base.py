"""
fileproc/analyzers/base.py

Abstract interface for the type analyzers, plus the registry that maps a
declared media type to the analyzer responsible for it.

Design goals:
  - The scheduler depends only on this interface, never on Pillow/openpyxl.
  - Analyzers decide success vs. failure; wall-clock bookkeeping and the
    terminal status belong to the scheduler.
  - Every failure leaves an analyzer as a typed AnalyzerFailure (or a
    ResourceFailure) — never a silent empty result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import ClassVar, Dict, FrozenSet, Iterable, Optional, Type

from fileproc.core.exceptions import (
    AnalyzerFailure,
    AppBaseException,
    UnsupportedMediaTypeError,
)
from fileproc.core.logger import get_logger
from fileproc.models.processing_models import Analysis

logger = get_logger(__name__)


def round_half_up(value: float, places: int) -> float:
    """
    Round to ``places`` decimals, ties away from zero.

    The tie is judged on the float's exact binary value, so ``0.25`` (exact)
    rounds to ``0.3`` while ``1.005`` (stored just below) rounds to ``1.0``.
    Built-in ``round()`` sends exact ties to the even neighbour instead.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


class Analyzer(ABC):
    """
    Contract every type analyzer must fulfil.

    Subclasses declare the media types they accept and the typed failure
    they raise, and implement ``analyze``. Callers go through ``run``.
    """

    #: Media types this analyzer accepts. Empty means "anything" (fallback).
    media_types: ClassVar[FrozenSet[str]] = frozenset()

    #: Exception class unexpected errors are wrapped in.
    failure: ClassVar[Type[AnalyzerFailure]] = AnalyzerFailure

    def supports(self, media_type: str) -> bool:
        return not self.media_types or media_type in self.media_types

    def run(self, data: bytes, media_type: str, filename: str) -> Analysis:
        """
        Validate the media type, then analyse.

        Raises:
            UnsupportedMediaTypeError: ``media_type`` is not handled here.
            AnalyzerFailure:           The payload could not be decoded/parsed.
            ResourceFailure:           A side-effect (e.g. thumbnail write) failed.
        """
        if not self.supports(media_type):
            raise UnsupportedMediaTypeError(
                f"{type(self).__name__} does not handle '{media_type}'."
            )
        try:
            return self.analyze(data, media_type, filename)
        except AppBaseException:
            raise
        except Exception as exc:
            raise self.failure(f"'{filename}' could not be analysed: {exc}") from exc

    @abstractmethod
    def analyze(self, data: bytes, media_type: str, filename: str) -> Analysis:
        """
        Produce the family-specific analysis for one payload.

        Args:
            data       : Raw file bytes.
            media_type : Declared media type (already checked by ``run``).
            filename   : Stored filename — used for derived paths and messages.
        """


class AnalyzerRegistry:
    """
    Maps declared media types to analyzers.

    Lookup is by declared type only — no content sniffing. Types nobody
    registered for resolve to the fallback analyzer.
    """

    def __init__(self, analyzers: Iterable[Analyzer], fallback: Analyzer) -> None:
        self._by_type: Dict[str, Analyzer] = {}
        for analyzer in analyzers:
            for media_type in analyzer.media_types:
                self._by_type[media_type] = analyzer
        self._fallback = fallback

    def resolve(self, media_type: str) -> Analyzer:
        return self._by_type.get(media_type, self._fallback)

    @property
    def media_types(self) -> FrozenSet[str]:
        return frozenset(self._by_type)

    @classmethod
    def default(cls, thumbnail_dir: Optional[Path] = None) -> "AnalyzerRegistry":
        """Build the production analyzer set."""
        # Local imports keep the concrete analyzers (and their libraries)
        # out of the base module's import graph.
        from fileproc.analyzers.csv_analyzer import CsvAnalyzer
        from fileproc.analyzers.generic_analyzer import GenericAnalyzer
        from fileproc.analyzers.image_analyzer import ImageAnalyzer
        from fileproc.analyzers.pdf_analyzer import PdfAnalyzer
        from fileproc.analyzers.spreadsheet_analyzer import SpreadsheetAnalyzer
        from fileproc.analyzers.text_analyzer import TextAnalyzer

        registry = cls(
            [
                ImageAnalyzer(thumbnail_dir=thumbnail_dir),
                CsvAnalyzer(),
                SpreadsheetAnalyzer(),
                PdfAnalyzer(),
                TextAnalyzer(),
            ],
            fallback=GenericAnalyzer(),
        )
        logger.debug("Analyzer registry built for %d media type(s).", len(registry.media_types))
        return registry
