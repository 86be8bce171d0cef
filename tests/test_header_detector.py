"""
Unit tests for the Header Detector module.
"""

import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import pytest

from salesboard import config
from salesboard.column_identifier import SemanticField, identify_columns
from salesboard.header_detector import (
    HeaderCandidate,
    build_manual_candidate,
    candidates_report,
    detect_header_candidates,
    is_valid_header_cell,
    score_candidate,
)


class TestIsValidHeaderCell:
    """Tests for is_valid_header_cell()."""

    def test_labels_are_valid(self):
        assert is_valid_header_cell("商品名")
        assert is_valid_header_cell("Q1")

    def test_empty_is_invalid(self):
        assert not is_valid_header_cell(None)
        assert not is_valid_header_cell("")
        assert not is_valid_header_cell("  ")

    def test_short_numbers_are_invalid(self):
        assert not is_valid_header_cell("123")
        assert not is_valid_header_cell(2454)
        assert not is_valid_header_cell("3.5")

    def test_long_numbers_are_valid(self):
        assert is_valid_header_cell("12345678901")

    def test_dates_are_invalid(self):
        assert not is_valid_header_cell("2024-01-05")
        assert not is_valid_header_cell("2024/1/5")
        assert not is_valid_header_cell(datetime(2024, 1, 5))


class TestScoreCandidate:
    """Each bonus condition of score_candidate() in isolation."""

    def test_base_ratio(self):
        assert score_candidate(1, 4, False, 1) == pytest.approx(0.25)

    def test_product_bonus(self):
        assert score_candidate(1, 4, True, 0) == pytest.approx(0.55)

    def test_fields_bonus(self):
        assert score_candidate(2, 4, False, 2) == pytest.approx(0.7)

    def test_fields_bonus_needs_two_fields(self):
        assert score_candidate(2, 4, False, 1) == pytest.approx(0.5)

    def test_clamped_to_one(self):
        assert score_candidate(4, 4, True, 3) == 1.0

    def test_no_valid_cells(self):
        assert score_candidate(0, 0, True, 3) == 0.0


class TestDetectHeaderCandidates:
    """Tests for detect_header_candidates()."""

    def test_header_in_first_row(self):
        grid = [
            ["主力商品名", "前年", "予定", "実績"],
            ["バターフィナンシェ4入り", "2454", "1820", "1726"],
        ]
        candidates = detect_header_candidates(grid)
        best = candidates[0]
        assert best.row_index == 0
        assert best.confidence == 1.0
        assert best.headers == ("主力商品名", "前年", "予定", "実績")
        assert best.column_map == {
            SemanticField.PRODUCT: 0,
            SemanticField.LAST_YEAR: 1,
            SemanticField.TARGET: 2,
            SemanticField.ACTUAL: 3,
        }

    def test_header_below_title_rows(self):
        grid = [
            ["月次レポート"],
            [],
            ["商品名", "予定", "実績"],
            ["A", "100", "120"],
        ]
        candidates = detect_header_candidates(grid)
        assert candidates[0].row_index == 2
        assert candidates[0].has_product

    def test_text_column_fallback(self):
        grid = [
            ["Label", "Q1", "Q2"],
            ["Apple", "10", "20"],
            ["Banana", "5", "6"],
        ]
        candidates = detect_header_candidates(grid)
        assert len(candidates) == 1
        assert candidates[0].column_map == {SemanticField.PRODUCT: 0}
        # 1 match of 3 labels plus the product bonus
        assert candidates[0].confidence == pytest.approx(1 / 3 + 0.3)

    def test_no_fallback_for_numeric_columns(self):
        grid = [
            ["Label", "Q1"],
            ["1", "2"],
            ["3", "4"],
        ]
        candidates = detect_header_candidates(grid)
        assert len(candidates) == 1
        assert not candidates[0].has_product
        assert candidates[0].confidence == 0.0

    def test_rows_with_one_label_skipped(self):
        grid = [["Title"], ["1", "2"], ["x", ""]]
        assert detect_header_candidates(grid) == []

    def test_scan_window(self):
        header = ["商品名", "実績"]
        titles = [[f"note {i}"] for i in range(config.HEADER_SCAN_ROWS)]

        assert detect_header_candidates(titles + [header, ["A", "1"]]) == []

        found = detect_header_candidates(titles[:-1] + [header, ["A", "1"]])
        assert found[0].row_index == config.HEADER_SCAN_ROWS - 1

    def test_ties_keep_sheet_order(self):
        grid = [
            ["商品名", "実績"],
            ["A", "1"],
            ["商品名", "実績"],
            ["B", "2"],
        ]
        candidates = detect_header_candidates(grid)
        assert [c.row_index for c in candidates] == [0, 2]
        assert candidates[0].confidence == candidates[1].confidence

    def test_sorted_by_confidence(self):
        grid = [
            ["Label", "Q1", "Q2"],
            ["商品名", "前年", "実績"],
            ["A", "1", "2"],
        ]
        candidates = detect_header_candidates(grid)
        assert candidates[0].row_index == 1
        confidences = [c.confidence for c in candidates]
        assert confidences == sorted(confidences, reverse=True)

    def test_ragged_rows(self):
        grid = [["商品名", "予定", "実績"], ["A"], ["B", "1"], []]
        candidates = detect_header_candidates(grid)
        assert candidates[0].row_index == 0

    def test_empty_grid(self):
        assert detect_header_candidates([]) == []

    def test_grid_not_mutated(self):
        grid = [["商品名", "実績"], ["A", "1"]]
        snapshot = [list(row) for row in grid]
        detect_header_candidates(grid)
        assert grid == snapshot

    def test_scan_rows_override(self, monkeypatch):
        monkeypatch.setattr(config, "HEADER_SCAN_ROWS", 1)
        grid = [["Title"], ["商品名", "実績"], ["A", "1"]]
        assert detect_header_candidates(grid) == []


class TestBuildManualCandidate:
    """Tests for build_manual_candidate()."""

    def test_manual_row(self):
        grid = [["Report"], ["商品名", "", "実績"], ["A", "", "5"]]
        candidate = build_manual_candidate(grid, 1)
        assert candidate.row_index == 1
        assert candidate.confidence == 1.0
        assert candidate.headers == ("商品名", "実績")
        assert candidate.column_map == {SemanticField.PRODUCT: 0, SemanticField.ACTUAL: 2}

    def test_matches_identify_columns(self):
        grid = [["実績", "商品名", None, "実績値"], ["1", "A", "", "2"]]
        candidate = build_manual_candidate(grid, 0)
        assert candidate.column_map == identify_columns(["実績", "商品名", "", "実績値"])
        assert candidate.column_map[SemanticField.ACTUAL] == 3
        assert candidate.headers == ("実績", "商品名", "実績値")

    def test_no_fallback(self):
        grid = [["Label", "Q1"], ["Apple", "10"]]
        candidate = build_manual_candidate(grid, 0)
        assert not candidate.has_product

    def test_missing_or_empty_row(self):
        grid = [["商品名", "実績"], []]
        assert build_manual_candidate(grid, 5) is None
        assert build_manual_candidate(grid, 1) is None


class TestCandidatesReport:
    """Tests for candidates_report()."""

    def test_columns_and_rows(self):
        candidates = [
            HeaderCandidate(0, ("商品名", "実績"), {SemanticField.PRODUCT: 0, SemanticField.ACTUAL: 1}, 1.0),
            HeaderCandidate(3, ("Label", "Q1"), {}, 0.0),
        ]
        df = candidates_report(candidates)
        assert list(df.columns) == ["Row", "Headers", "Product_Column", "Fields", "Confidence"]
        assert len(df) == 2
        assert df.iloc[0]["Headers"] == "商品名, 実績"
        assert df.iloc[0]["Fields"] == "product, actual"
        assert df.iloc[1]["Fields"] == ""

    def test_empty(self):
        df = candidates_report([])
        assert df.empty
        assert "Confidence" in df.columns
