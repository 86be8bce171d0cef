"""
Aggregates and data-quality checks over ingested sales records.

Feeds the dashboard totals row and the validation panel shown after import.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd

from salesboard.row_extractor import compute_achievement_rate, compute_yoy_growth

if TYPE_CHECKING:
    from collections.abc import Sequence

    from salesboard.row_extractor import SalesRecord

RECORD_COLUMNS = ["product", "lastYear", "target", "actual", "yoyGrowth", "achievementRate"]

# Quality score (valid rows / total rows, %) below which a warning is raised
QUALITY_WARNING_THRESHOLD = 80.0


@dataclass
class ValidationReport:
    """Outcome of validate_records()."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    info: list[str] = field(default_factory=list)
    total_rows: int = 0
    valid_rows: int = 0
    missing_values: int = 0
    duplicates: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def quality_score(self) -> float:
        if self.total_rows == 0:
            return 0.0
        return (self.valid_rows / self.total_rows) * 100


def calculate_totals(records: Sequence[SalesRecord]) -> dict[str, float]:
    """
    Sum the figures of all records.

    Missing last-year figures count as 0. Overall growth and achievement use
    the same formulas as individual records.
    """
    last_year = sum(r.last_year or 0.0 for r in records)
    target = sum(r.target for r in records)
    actual = sum(r.actual for r in records)
    return {
        "lastYear": last_year,
        "target": target,
        "actual": actual,
        "yoyGrowth": compute_yoy_growth(last_year, actual),
        "achievementRate": compute_achievement_rate(target, actual),
    }


def records_to_frame(records: Sequence[SalesRecord]) -> pd.DataFrame:
    """Convert records to a DataFrame with camelCase columns in record order."""
    return pd.DataFrame([r.to_dict() for r in records], columns=RECORD_COLUMNS)


def validate_records(records: Sequence[SalesRecord]) -> ValidationReport:
    """
    Check ingested records for quality problems.

    Args:
        records: Records from the pipeline.

    Returns:
        ValidationReport; blank product names are errors, duplicates and
        negative figures are warnings.
    """
    report = ValidationReport(total_rows=len(records))
    if not records:
        report.errors.append("No data found")
        return report

    seen: set[str] = set()
    for index, record in enumerate(records, start=1):
        row_valid = True

        if not record.product.strip():
            report.errors.append(f"Row {index}: product name is empty")
            row_valid = False
        else:
            if record.product in seen:
                report.duplicates += 1
                report.warnings.append(f"Duplicate product name: {record.product}")
            seen.add(record.product)

        # Blank or absent figures arrive as 0
        if record.target == 0:
            report.missing_values += 1
            report.warnings.append(f"Row {index}: target is not entered")
        if record.actual == 0:
            report.missing_values += 1
            report.warnings.append(f"Row {index}: actual is not entered")

        if record.target < 0 or record.actual < 0:
            report.warnings.append(f"Row {index}: contains negative values")

        if row_valid:
            report.valid_rows += 1

    score = report.quality_score
    if score < QUALITY_WARNING_THRESHOLD:
        report.warnings.append(f"Data quality score: {score:.1f}% (below {QUALITY_WARNING_THRESHOLD:.0f}%)")
    else:
        report.info.append(f"Data quality score: {score:.1f}%")

    if not any(r.last_year and r.last_year > 0 for r in records):
        report.info.append("No last-year figures; year-over-year growth is not calculated")

    return report


def report_to_dict(report: ValidationReport) -> dict[str, Any]:
    return {
        "isValid": report.is_valid,
        "errors": list(report.errors),
        "warnings": list(report.warnings),
        "info": list(report.info),
        "dataQuality": {
            "totalRows": report.total_rows,
            "validRows": report.valid_rows,
            "missingValues": report.missing_values,
            "duplicates": report.duplicates,
        },
    }
