"""
Row Extractor - turns the data rows below a header into sales records.

Rows are skipped, not rejected, when they carry no data: empty rows, rows
without a product name, total/subtotal rows (合計, 総計, 計) and rows whose
figures are all zero. Unparseable figures count as 0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from salesboard import config
from salesboard.cells import clean_text, is_empty, normalize_number
from salesboard.column_identifier import ColumnMap, SemanticField, describe_column_map
from salesboard.errors import MissingProductColumn
from salesboard.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)


@dataclass(frozen=True)
class SalesRecord:
    """Normalized per-product sales figures."""

    product: str
    last_year: float | None
    target: float
    actual: float
    yoy_growth: float
    achievement_rate: float

    def to_dict(self) -> dict[str, Any]:
        """Presentation form with camelCase keys."""
        return {
            "product": self.product,
            "lastYear": self.last_year,
            "target": self.target,
            "actual": self.actual,
            "yoyGrowth": self.yoy_growth,
            "achievementRate": self.achievement_rate,
        }


def round_half_up(value: float) -> float:
    """Round to the nearest integer, .5 toward positive infinity."""
    return float(math.floor(value + 0.5))


def compute_yoy_growth(last_year: float | None, actual: float) -> float:
    """Year-over-year growth in percent, one decimal; 0 unless both figures are positive."""
    if last_year is None or last_year <= 0 or actual <= 0:
        return 0.0
    return round_half_up(((actual - last_year) / last_year) * 1000) / 10


def compute_achievement_rate(target: float, actual: float) -> float:
    """Actual as a percentage of target, one decimal; 0 unless both figures are positive."""
    if target <= 0 or actual <= 0:
        return 0.0
    return round_half_up((actual / target) * 1000) / 10


def _cell(row: Sequence[Any], index: int | None) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def extract_rows(
    grid: Sequence[Sequence[Any]],
    header_row_index: int,
    column_map: ColumnMap,
) -> list[SalesRecord]:
    """
    Build sales records from every row after the header.

    Args:
        grid: Row-major cells.
        header_row_index: Zero-based index of the header row.
        column_map: Field to column index; product is required.

    Returns:
        Records in sheet order.

    Raises:
        MissingProductColumn: If column_map has no product column.
    """
    if SemanticField.PRODUCT not in column_map:
        raise MissingProductColumn(
            "No product column found in the header row",
            row_index=header_row_index,
            column_map=describe_column_map(column_map),
        )

    product_col = column_map[SemanticField.PRODUCT]
    last_year_col = column_map.get(SemanticField.LAST_YEAR)
    target_col = column_map.get(SemanticField.TARGET)
    actual_col = column_map.get(SemanticField.ACTUAL)

    records: list[SalesRecord] = []
    skipped_empty = 0
    skipped_aggregate = 0
    skipped_zero = 0

    for row_index in range(header_row_index + 1, len(grid)):
        row = grid[row_index]
        if not row or all(is_empty(cell) for cell in row):
            skipped_empty += 1
            continue

        product = clean_text(_cell(row, product_col))
        if not product:
            skipped_empty += 1
            continue
        if product in config.AGGREGATE_LABELS:
            skipped_aggregate += 1
            continue

        last_year = normalize_number(_cell(row, last_year_col)) if last_year_col is not None else None
        target = normalize_number(_cell(row, target_col)) if target_col is not None else 0.0
        actual = normalize_number(_cell(row, actual_col)) if actual_col is not None else 0.0

        if not (target > 0 or actual > 0 or (last_year is not None and last_year > 0)):
            skipped_zero += 1
            continue

        records.append(
            SalesRecord(
                product=product,
                last_year=last_year,
                target=target,
                actual=actual,
                yoy_growth=compute_yoy_growth(last_year, actual),
                achievement_rate=compute_achievement_rate(target, actual),
            )
        )

    logger.debug(
        f"Extracted {len(records)} records after row {header_row_index} "
        f"(skipped: empty={skipped_empty}, aggregate={skipped_aggregate}, no_figures={skipped_zero})"
    )
    return records
