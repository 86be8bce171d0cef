"""
Header Detector - locates the header row of an arbitrary sales sheet.

Uploaded sheets often start with titles, notes or blank rows before the real
column labels. Each of the first rows is scored as a header candidate:

1. Cells that are empty, short numbers or dates are not header labels.
2. Labels are identified against the synonym table.
3. If no product column was identified, a column whose following cells are
   mostly text is taken as the product column.
4. confidence = matches / labels, plus bonuses for a product column and for
   two or more figure columns, clamped to 1.0.

Candidates are returned best first; ties keep sheet order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd

from salesboard import config
from salesboard.cells import CellKind, classify_cell, clean_text, looks_numeric
from salesboard.column_identifier import ColumnMap, SemanticField, identify_column, identify_columns
from salesboard.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)

_DATE_PATTERN = re.compile(r"^\d{4}[-/]\d{1,2}[-/]\d{1,2}$")


@dataclass(frozen=True)
class HeaderCandidate:
    """A row considered as the header, with its column map and score."""

    row_index: int
    headers: tuple[str, ...]
    column_map: ColumnMap = field(default_factory=dict)
    confidence: float = 0.0

    @property
    def has_product(self) -> bool:
        return SemanticField.PRODUCT in self.column_map


def is_valid_header_cell(cell: Any) -> bool:
    """
    Check whether a cell can be a column label.

    Empty cells, numbers shorter than 10 characters and YYYY-M-D / YYYY/M/D
    dates are rejected.
    """
    text = clean_text(cell)
    if not text:
        return False
    if looks_numeric(text) and len(text) < config.NUMERIC_HEADER_MAX_LENGTH:
        return False
    if _DATE_PATTERN.match(text):
        return False
    return True


def score_candidate(
    matches: int,
    valid_count: int,
    has_product: bool,
    other_fields: int,
) -> float:
    """
    Heuristic confidence that a row is the header.

    Args:
        matches: Labels resolved to a field (including a fallback product column).
        valid_count: Number of valid header cells in the row.
        has_product: Whether a product column was found.
        other_fields: Number of non-product fields in the column map.

    Returns:
        Score in [0, 1].
    """
    if valid_count <= 0:
        return 0.0
    confidence = matches / valid_count
    if has_product:
        confidence += config.PRODUCT_BONUS
    if other_fields >= config.FIELDS_BONUS_MIN:
        confidence += config.FIELDS_BONUS
    return min(confidence, 1.0)


def _row(grid: Sequence[Sequence[Any]], index: int) -> Sequence[Any]:
    if 0 <= index < len(grid) and grid[index] is not None:
        return grid[index]
    return ()


def _find_text_column(
    grid: Sequence[Sequence[Any]],
    row_index: int,
    valid_columns: Sequence[int],
) -> int | None:
    """Return the first column whose next sampled cells are mostly non-numeric text."""
    last_row = min(row_index + 1 + config.PRODUCT_SAMPLE_ROWS, len(grid))
    for col_index in valid_columns:
        text_count = 0
        total_count = 0
        for check_row in range(row_index + 1, last_row):
            row = _row(grid, check_row)
            if col_index >= len(row):
                continue
            cell = row[col_index]
            if classify_cell(cell) is CellKind.EMPTY:
                continue
            total_count += 1
            if classify_cell(cell) is CellKind.TEXT and not looks_numeric(clean_text(cell)):
                text_count += 1
        if total_count > 0 and text_count / total_count >= config.PRODUCT_TEXT_RATIO:
            return col_index
    return None


def _evaluate_row(grid: Sequence[Sequence[Any]], row_index: int) -> HeaderCandidate | None:
    row = _row(grid, row_index)
    valid_columns = [i for i, cell in enumerate(row) if is_valid_header_cell(cell)]
    if len(valid_columns) < config.MIN_VALID_HEADER_CELLS:
        return None

    column_map: ColumnMap = {}
    matches = 0
    for col_index in valid_columns:
        semantic_field = identify_column(clean_text(row[col_index]))
        if semantic_field is not None:
            column_map[semantic_field] = col_index
            matches += 1

    if SemanticField.PRODUCT not in column_map:
        product_col = _find_text_column(grid, row_index, valid_columns)
        if product_col is not None:
            column_map[SemanticField.PRODUCT] = product_col
            matches += 1

    other_fields = sum(1 for f in column_map if f is not SemanticField.PRODUCT)
    confidence = score_candidate(
        matches,
        len(valid_columns),
        SemanticField.PRODUCT in column_map,
        other_fields,
    )
    return HeaderCandidate(
        row_index=row_index,
        headers=tuple(clean_text(row[i]) for i in valid_columns),
        column_map=column_map,
        confidence=confidence,
    )


def detect_header_candidates(grid: Sequence[Sequence[Any]]) -> list[HeaderCandidate]:
    """
    Score the first rows of a grid as header candidates.

    Only the first min(15, len(grid)) rows are examined and rows with fewer
    than two valid header cells are skipped. Never raises.

    Args:
        grid: Row-major cells; ragged rows allowed.

    Returns:
        Candidates sorted by descending confidence (stable).
    """
    candidates: list[HeaderCandidate] = []
    for row_index in range(min(config.HEADER_SCAN_ROWS, len(grid))):
        candidate = _evaluate_row(grid, row_index)
        if candidate is None:
            continue
        logger.debug(
            f"Row {row_index}: confidence={candidate.confidence:.2f} "
            f"fields={[f.value for f in candidate.column_map]}"
        )
        candidates.append(candidate)

    # sorted() is stable, so equal scores keep row order
    return sorted(candidates, key=lambda c: c.confidence, reverse=True)


def build_manual_candidate(grid: Sequence[Sequence[Any]], row_index: int) -> HeaderCandidate | None:
    """
    Build the candidate for an operator-chosen header row.

    Labels are identified directly, without the product fallback or scoring;
    confidence is 1.0. Returns None when the row does not exist or is empty.
    """
    row = _row(grid, row_index)
    if not row:
        return None

    # Invalid cells become "" so column positions are kept
    labels = [clean_text(cell) if is_valid_header_cell(cell) else "" for cell in row]

    return HeaderCandidate(
        row_index=row_index,
        headers=tuple(label for label in labels if label),
        column_map=identify_columns(labels),
        confidence=1.0,
    )


def candidates_report(candidates: Sequence[HeaderCandidate]) -> pd.DataFrame:
    """
    Tabulate header candidates for display.

    Args:
        candidates: Candidates, typically from detect_header_candidates().

    Returns:
        DataFrame with one row per candidate, in the given order.
    """
    data = []
    for c in candidates:
        data.append({
            "Row": c.row_index,
            "Headers": ", ".join(c.headers),
            "Product_Column": c.column_map.get(SemanticField.PRODUCT),
            "Fields": ", ".join(f.value for f in SemanticField if f in c.column_map),
            "Confidence": round(c.confidence, 3),
        })

    return pd.DataFrame(data, columns=["Row", "Headers", "Product_Column", "Fields", "Confidence"])
