"""
Error taxonomy for the ingestion pipeline.

Core failures derive from IngestionError and carry a `details` dict with the
diagnostics a caller needs to suggest a fix (detected headers, row index,
confidence). Source/transport failures derive from SourceError and are raised
by the file and URL boundaries only.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "IngestionError",
    "InsufficientData",
    "NoHeaderFound",
    "MissingProductColumn",
    "NoValidRows",
    "SourceError",
    "FetchError",
    "UnsupportedFormat",
    "SheetNotFound",
    "UnreadableWorkbook",
]


class IngestionError(Exception):
    """Base class for failures of the header/column/row pipeline."""

    kind = "INGESTION_ERROR"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details


class InsufficientData(IngestionError):
    """Fewer than two usable lines/rows in the source."""

    kind = "INSUFFICIENT_DATA"


class NoHeaderFound(IngestionError):
    """No row in the scan window scored as a plausible header."""

    kind = "NO_HEADER_FOUND"


class MissingProductColumn(IngestionError):
    """A header row was chosen but no column maps to the product field."""

    kind = "MISSING_PRODUCT_COLUMN"


class NoValidRows(IngestionError):
    """Header and columns resolved, but no data row survived extraction."""

    kind = "NO_VALID_ROWS"


class SourceError(Exception):
    """Base class for file/network boundary failures."""

    kind = "SOURCE_ERROR"


class FetchError(SourceError):
    kind = "FETCH_ERROR"

    def __init__(self, message: str, attempts: list[str] | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts or []


class UnsupportedFormat(SourceError):
    kind = "UNSUPPORTED_FORMAT"


class SheetNotFound(SourceError):
    kind = "SHEET_NOT_FOUND"


class UnreadableWorkbook(SourceError):
    """The spreadsheet decoder rejected the file (corrupt or mislabelled)."""

    kind = "UNREADABLE_WORKBOOK"
