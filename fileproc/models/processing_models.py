"""
fileproc/models/processing_models.py

Pydantic models for the processing pipeline.

``Analysis`` is a discriminated union keyed on ``kind`` — exactly one
family-specific shape per result, chosen by the declared media type.
``ProcessingResult`` wraps it with the scheduler's wall-clock bookkeeping.

All models serialise with camelCase aliases:

    result.model_dump(by_alias=True, mode="json")
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ── Enumerations ───────────────────────────────────────────────────────────────

class ProcessingStatus(str, Enum):
    COMPLETED = "completed"
    ERROR = "error"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    ANALYZER = "analyzer"
    RESOURCE = "resource"
    INTERNAL = "internal"


ColumnType = Literal["number", "email", "date", "text", "empty"]


# ── Family-specific analyses ───────────────────────────────────────────────────

class ImageAnalysis(CamelModel):
    kind: Literal["image"] = "image"
    width: int
    height: int
    format: str
    channels: int
    has_alpha: bool
    color_space: str
    thumbnail_path: str
    aspect_ratio: float
    megapixels: float
    estimated_colors: str


class CsvAnalysis(CamelModel):
    kind: Literal["csv"] = "csv"
    total_rows: int
    columns: List[str]
    column_count: int
    sample_rows: List[Dict[str, str]] = Field(max_length=3)
    column_type_guesses: Dict[str, ColumnType]
    has_headers: bool
    size: int


class SheetSummary(CamelModel):
    name: str
    row_count: int
    column_count: int
    has_headers: bool
    sample_rows: List[List[Any]] = Field(max_length=3)


class SpreadsheetAnalysis(CamelModel):
    kind: Literal["spreadsheet"] = "spreadsheet"
    total_sheets: int
    sheets: List[SheetSummary]
    creator: str
    last_modified_by: str
    format: Literal["XLSX", "XLS"]
    size: int


class PdfAnalysis(CamelModel):
    kind: Literal["pdf"] = "pdf"
    estimated_pages: int
    file_size: int
    has_images: bool
    has_text: bool
    encrypted: bool
    has_signature: bool
    pdf_version: str


class TextAnalysis(CamelModel):
    kind: Literal["text"] = "text"
    line_count: int
    word_count: int
    character_count: int
    average_words_per_line: float
    preview: str
    is_empty: bool
    size: int


class GenericAnalysis(CamelModel):
    kind: Literal["generic"] = "generic"
    note: str
    size: int
    media_type: str


Analysis = Annotated[
    Union[
        ImageAnalysis,
        CsvAnalysis,
        SpreadsheetAnalysis,
        PdfAnalysis,
        TextAnalysis,
        GenericAnalysis,
    ],
    Field(discriminator="kind"),
]


# ── Result envelope ────────────────────────────────────────────────────────────

class ProcessingResult(CamelModel):
    """
    Terminal outcome of one processing job.

    A ``completed`` result carries an ``analysis``; an ``error`` result
    carries only the fixed, caller-safe ``error`` / ``message`` pair and the
    failure category.
    """

    status: ProcessingStatus
    start_time: datetime
    end_time: datetime
    duration_ms: int = Field(ge=0)
    analysis: Optional[Analysis] = None
    error: Optional[str] = None
    message: Optional[str] = None
    error_category: Optional[ErrorCategory] = None

    @model_validator(mode="after")
    def _one_outcome(self) -> "ProcessingResult":
        if self.status is ProcessingStatus.COMPLETED:
            if self.analysis is None or self.error is not None:
                raise ValueError("completed results carry an analysis and no error")
        elif self.analysis is not None or self.error is None:
            raise ValueError("error results carry an error and no analysis")
        return self

    @property
    def ok(self) -> bool:
        return self.status is ProcessingStatus.COMPLETED

    def to_public(self) -> Dict[str, Any]:
        """JSON-ready camelCase dict, without unset optional fields."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class QueueStatus(CamelModel):
    """Point-in-time view of the scheduler's backlog and worker slots."""

    queue_length: int
    active_jobs: int
    max_concurrent_jobs: int
