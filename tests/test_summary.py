"""
Unit tests for totals and the validation report.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from salesboard.row_extractor import SalesRecord, compute_achievement_rate, compute_yoy_growth
from salesboard.summary import (
    RECORD_COLUMNS,
    calculate_totals,
    records_to_frame,
    report_to_dict,
    validate_records,
)


def make_record(product, last_year, target, actual):
    return SalesRecord(
        product=product,
        last_year=last_year,
        target=target,
        actual=actual,
        yoy_growth=compute_yoy_growth(last_year, actual),
        achievement_rate=compute_achievement_rate(target, actual),
    )


class TestCalculateTotals:
    """Tests for calculate_totals()."""

    def test_totals(self):
        records = [
            make_record("A", 1000.0, 1000.0, 1100.0),
            make_record("B", None, 500.0, 400.0),
        ]
        totals = calculate_totals(records)
        assert totals["lastYear"] == 1000.0
        assert totals["target"] == 1500.0
        assert totals["actual"] == 1500.0
        assert totals["achievementRate"] == 100.0
        assert totals["yoyGrowth"] == 50.0

    def test_empty(self):
        totals = calculate_totals([])
        assert totals == {
            "lastYear": 0,
            "target": 0,
            "actual": 0,
            "yoyGrowth": 0.0,
            "achievementRate": 0.0,
        }


class TestRecordsToFrame:
    """Tests for records_to_frame()."""

    def test_columns_and_order(self):
        df = records_to_frame([make_record("A", 1.0, 2.0, 3.0), make_record("B", None, 4.0, 5.0)])
        assert list(df.columns) == RECORD_COLUMNS
        assert list(df["product"]) == ["A", "B"]
        assert df["lastYear"].isna().iloc[1]

    def test_empty(self):
        df = records_to_frame([])
        assert df.empty
        assert list(df.columns) == RECORD_COLUMNS


class TestValidateRecords:
    """Tests for validate_records()."""

    def test_clean_records(self):
        report = validate_records([make_record("A", 100.0, 100.0, 90.0), make_record("B", 50.0, 60.0, 70.0)])
        assert report.is_valid
        assert report.warnings == []
        assert report.quality_score == 100.0
        assert report.info == ["Data quality score: 100.0%"]

    def test_no_data(self):
        report = validate_records([])
        assert not report.is_valid
        assert report.errors == ["No data found"]

    def test_duplicates(self):
        report = validate_records([make_record("A", 1.0, 1.0, 1.0), make_record("A", 2.0, 2.0, 2.0)])
        assert report.duplicates == 1
        assert "Duplicate product name: A" in report.warnings

    def test_missing_values(self):
        report = validate_records([make_record("A", 100.0, 0.0, 0.0)])
        assert report.missing_values == 2
        assert "Row 1: target is not entered" in report.warnings
        assert "Row 1: actual is not entered" in report.warnings

    def test_negative_values(self):
        report = validate_records([make_record("A", 100.0, -5.0, 10.0)])
        assert "Row 1: contains negative values" in report.warnings

    def test_blank_product_lowers_quality(self):
        records = [make_record(" ", 1.0, 1.0, 1.0), make_record("B", 1.0, 1.0, 1.0)]
        report = validate_records(records)
        assert not report.is_valid
        assert report.quality_score == 50.0
        assert any(w.startswith("Data quality score: 50.0%") for w in report.warnings)

    def test_no_last_year_info(self):
        report = validate_records([make_record("A", None, 10.0, 10.0)])
        assert "No last-year figures; year-over-year growth is not calculated" in report.info

    def test_report_to_dict(self):
        report = validate_records([make_record("A", 1.0, 1.0, 1.0), make_record("A", 1.0, 1.0, 1.0)])
        data = report_to_dict(report)
        assert data["isValid"] is True
        assert data["dataQuality"] == {
            "totalRows": 2,
            "validRows": 2,
            "missingValues": 0,
            "duplicates": 1,
        }
