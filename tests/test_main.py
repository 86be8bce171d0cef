"""
Tests for the command-line entry point.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import pandas as pd

import main
from salesboard.sample import SAMPLE_ROWS


class TestMain:
    """Tests for main()."""

    def test_write_sample_csv(self, tmp_path):
        target = tmp_path / "sample.csv"
        assert main.main(["--write-sample", str(target)]) == main.EXIT_OK
        assert target.read_text(encoding="utf-8").startswith("\ufeff主力商品名")

    def test_import_and_export_csv(self, tmp_path, capsys):
        source = tmp_path / "sales.csv"
        main.main(["--write-sample", str(source)])
        output = tmp_path / "out" / "records.csv"

        assert main.main([str(source), "--candidates", "-o", str(output)]) == main.EXIT_OK
        df = pd.read_csv(output, encoding="utf-8-sig")
        assert len(df) == len(SAMPLE_ROWS) - 1
        assert list(df.columns)[0] == "product"
        assert "Header row 0" in capsys.readouterr().out

    def test_export_xlsx(self, tmp_path):
        source = main.write_sample(tmp_path / "sales.xlsx")
        output = tmp_path / "records.xlsx"
        assert main.main([str(source), "--sheet", "売上データ", "-o", str(output)]) == main.EXIT_OK
        with pd.ExcelFile(output) as xls:
            assert xls.sheet_names == ["Records", "Totals"]

    def test_ingestion_error_exit_code(self, tmp_path):
        source = tmp_path / "bad.csv"
        source.write_text("商品名,実績\n", encoding="utf-8")
        assert main.main([str(source)]) == main.EXIT_INGESTION_ERROR

    def test_missing_file_exit_code(self, tmp_path):
        assert main.main([str(tmp_path / "missing.csv")]) == main.EXIT_SOURCE_ERROR

    def test_unsupported_format_exit_code(self, tmp_path):
        source = tmp_path / "report.pdf"
        source.write_bytes(b"%PDF")
        assert main.main([str(source)]) == main.EXIT_SOURCE_ERROR

    def test_corrupt_workbook_exit_code(self, tmp_path):
        source = tmp_path / "sales.xlsx"
        source.write_bytes(b"not a zip")
        assert main.main([str(source)]) == main.EXIT_SOURCE_ERROR

    def test_is_url(self):
        assert main.is_url("https://docs.google.com/spreadsheets/d/x/edit")
        assert not main.is_url("data/sales.csv")
