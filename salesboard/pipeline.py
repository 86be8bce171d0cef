"""
Ingestion pipeline orchestrator.

Composes the stages into one all-or-nothing call:

1. Obtain a grid (parse CSV text, or take an already decoded sheet)
2. Choose the header row (best detected candidate, or an operator override)
3. Require a product column
4. Extract sales records, requiring at least one

Each failure raises a distinct IngestionError subclass carrying diagnostics
(detected headers, row index, confidence) for the caller to display.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from salesboard.column_identifier import describe_column_map
from salesboard.errors import InsufficientData, MissingProductColumn, NoHeaderFound, NoValidRows
from salesboard.header_detector import HeaderCandidate, build_manual_candidate, detect_header_candidates
from salesboard.logger import debug_watcher, get_logger
from salesboard.remote import fetch_text
from salesboard.row_extractor import SalesRecord, extract_rows
from salesboard.text_grid import decode_text, parse_delimited_text
from salesboard.workbook import TEXT_SUFFIXES, check_suffix, read_text_file, read_workbook

logger = get_logger(__name__)

Grid = list[list[Any]]
Source = Union[str, Sequence[Sequence[Any]]]


@dataclass(frozen=True)
class IngestionResult:
    """Records plus the header decision that produced them."""

    records: list[SalesRecord]
    header: HeaderCandidate
    candidates: list[HeaderCandidate] = field(default_factory=list)
    sheet_name: str | None = None
    sheet_names: list[str] = field(default_factory=list)
    manual: bool = False
    row_count: int = 0


def _to_grid(source: Source) -> Grid:
    if isinstance(source, str):
        return parse_delimited_text(source)
    grid = [list(row) if row is not None else [] for row in source]
    if len(grid) < 2:
        raise InsufficientData(
            "Data needs a header row and at least one data row "
            f"(found {len(grid)} row(s))",
            line_count=len(grid),
        )
    return grid


@debug_watcher
def run_ingestion(
    source: Source,
    manual_header_row: int | None = None,
    *,
    sheet_name: str | None = None,
    sheet_names: list[str] | None = None,
) -> IngestionResult:
    """
    Run the full pipeline on CSV text or a decoded grid.

    Args:
        source: Raw delimited text, or a row-major grid of cells.
        manual_header_row: Zero-based header row chosen by the operator.
            If None, the best detected candidate is used.
        sheet_name: Name of the sheet the grid came from, for reporting.
        sheet_names: All sheet names of the source workbook, for reporting.

    Returns:
        IngestionResult with the records and the chosen header.

    Raises:
        InsufficientData: Fewer than two usable lines/rows.
        NoHeaderFound: No plausible header row (or the chosen row is empty).
        MissingProductColumn: The header row has no product column.
        NoValidRows: No data row survived extraction.
    """
    grid = _to_grid(source)

    candidates: list[HeaderCandidate] = []
    if manual_header_row is not None:
        header = build_manual_candidate(grid, manual_header_row) if manual_header_row >= 0 else None
        if header is None:
            raise NoHeaderFound(
                f"Header row {manual_header_row} does not exist or is empty",
                row_index=manual_header_row,
                row_count=len(grid),
            )
    else:
        candidates = detect_header_candidates(grid)
        if not candidates:
            raise NoHeaderFound(
                "No header row found in the first rows of the sheet",
                row_count=len(grid),
            )
        header = candidates[0]

    logger.info(
        f"Header row {header.row_index} (confidence={header.confidence:.2f}, "
        f"{'manual' if manual_header_row is not None else 'detected'}): "
        f"{describe_column_map(header.column_map) or 'no fields'}"
    )

    if not header.has_product:
        raise MissingProductColumn(
            "No product column found. Detected headers: " + ", ".join(header.headers),
            headers=list(header.headers),
            row_index=header.row_index,
            confidence=header.confidence,
        )

    records = extract_rows(grid, header.row_index, header.column_map)
    if not records:
        raise NoValidRows(
            "No valid data rows found below the header row",
            row_index=header.row_index,
            headers=list(header.headers),
            column_map=describe_column_map(header.column_map),
        )

    logger.info(f"Ingested {len(records)} records from {len(grid)} rows")
    return IngestionResult(
        records=records,
        header=header,
        candidates=candidates,
        sheet_name=sheet_name,
        sheet_names=list(sheet_names or []),
        manual=manual_header_row is not None,
        row_count=len(grid),
    )


def ingest(source: Source, manual_header_row: int | None = None) -> list[SalesRecord]:
    """Ingest CSV text or a grid and return the sales records only."""
    return run_ingestion(source, manual_header_row).records


def ingest_bytes(
    data: bytes,
    filename: str,
    sheet_name: str | None = None,
    manual_header_row: int | None = None,
) -> IngestionResult:
    """
    Ingest an uploaded file's bytes, choosing the decoder from its name.

    Raises:
        UnsupportedFormat: If the file name has an unsupported suffix.
    """
    suffix = check_suffix(filename)
    if suffix in TEXT_SUFFIXES:
        return run_ingestion(decode_text(data), manual_header_row, sheet_names=["CSV"])

    workbook = read_workbook(data, sheet_name, suffix=suffix)
    return run_ingestion(
        workbook.grid,
        manual_header_row,
        sheet_name=workbook.sheet_name,
        sheet_names=workbook.sheet_names,
    )


@debug_watcher
def ingest_file(
    path: Path | str,
    sheet_name: str | None = None,
    manual_header_row: int | None = None,
) -> IngestionResult:
    """Ingest a CSV or spreadsheet file from disk."""
    file_path = Path(path)
    suffix = check_suffix(file_path.name)
    if suffix in TEXT_SUFFIXES:
        return run_ingestion(read_text_file(file_path), manual_header_row, sheet_names=["CSV"])

    workbook = read_workbook(file_path, sheet_name)
    return run_ingestion(
        workbook.grid,
        manual_header_row,
        sheet_name=workbook.sheet_name,
        sheet_names=workbook.sheet_names,
    )


@debug_watcher
def ingest_url(url: str, manual_header_row: int | None = None) -> IngestionResult:
    """Fetch CSV text from a URL (Google Sheets links included) and ingest it."""
    return run_ingestion(fetch_text(url), manual_header_row, sheet_names=["Sheet1"])
