"""
Unit tests for the Column Identifier module.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from salesboard.column_identifier import (
    SYNONYM_TABLE,
    SemanticField,
    describe_column_map,
    identify_column,
    identify_columns,
)


class TestIdentifyColumn:
    """Tests for identify_column()."""

    def test_product(self):
        assert identify_column("商品名") == SemanticField.PRODUCT
        assert identify_column("主力商品名") == SemanticField.PRODUCT
        assert identify_column("Product") == SemanticField.PRODUCT

    def test_target(self):
        assert identify_column("Target") == SemanticField.TARGET
        assert identify_column("予定") == SemanticField.TARGET
        assert identify_column("Budget 2024") == SemanticField.TARGET

    def test_last_year(self):
        assert identify_column("前年度") == SemanticField.LAST_YEAR
        assert identify_column("前年") == SemanticField.LAST_YEAR

    def test_actual(self):
        assert identify_column("実績値") == SemanticField.ACTUAL
        assert identify_column("  SALES  ") == SemanticField.ACTUAL

    def test_unknown(self):
        assert identify_column("xyz123") is None
        assert identify_column("") is None
        assert identify_column("   ") is None

    def test_non_string(self):
        assert identify_column(None) is None
        assert identify_column(2024) is None

    def test_field_values_are_camel_case(self):
        assert [f.value for f in SemanticField] == ["product", "lastYear", "target", "actual"]
        assert [f for f, _ in SYNONYM_TABLE] == list(SemanticField)

    # Containment matching is loose; these document the current behavior
    def test_last_year_wins_over_actual_for_sales_label(self):
        # "売上" is contained in the lastYear synonym "前年売上"
        assert identify_column("売上") == SemanticField.LAST_YEAR
        assert identify_column("前年売上") == SemanticField.LAST_YEAR

    def test_short_label_contained_in_synonym(self):
        # "a" is contained in "name"
        assert identify_column("a") == SemanticField.PRODUCT

    def test_label_containing_synonym(self):
        assert identify_column("product code") == SemanticField.PRODUCT
        assert identify_column("2024年実績") == SemanticField.ACTUAL


class TestIdentifyColumns:
    """Tests for identify_columns() and describe_column_map()."""

    def test_header_row(self):
        column_map = identify_columns(["主力商品名", "前年", "予定", "実績"])
        assert column_map == {
            SemanticField.PRODUCT: 0,
            SemanticField.LAST_YEAR: 1,
            SemanticField.TARGET: 2,
            SemanticField.ACTUAL: 3,
        }

    def test_unmatched_labels_skipped(self):
        column_map = identify_columns(["No.", "商品名", "xyz", "実績"])
        assert column_map == {SemanticField.PRODUCT: 1, SemanticField.ACTUAL: 3}

    def test_later_duplicate_wins(self):
        column_map = identify_columns(["実績", "商品名", "実績値"])
        assert column_map[SemanticField.ACTUAL] == 2

    def test_describe(self):
        column_map = {SemanticField.TARGET: 2, SemanticField.PRODUCT: 0}
        assert describe_column_map(column_map) == "product=0, target=2"
        assert describe_column_map({}) == ""
