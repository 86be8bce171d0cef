"""
Sample sales sheet templates offered for download.

The rows use the column labels the header detector recognizes, so a user can
fill in the template and upload it unchanged.
"""

from __future__ import annotations

from pathlib import Path

import xlsxwriter

SAMPLE_HEADER = ["主力商品名", "前年", "予定", "実績"]

SAMPLE_ROWS: list[list[str | int]] = [
    SAMPLE_HEADER,
    ["バターフィナンシェ4入り", 2454, 1820, 1726],
    ["バターフィナンシェ8入り", "", 2800, 2346],
    ["バターフィナンシェ12入り", 1539, 1260, 1317],
    ["バターフィナンシェ16入り", 1060, 980, 1180],
    ["バターカレット9入り", 344, 140, 123],
    ["アソート(カステラ)", "", 1400, 1433],
    ["セレ16(14)", 1277, 1400, 1245],
    ["バターキャラメルポット", 497, 140, 150],
    ["バターバイヤモンド(ショコラ)", 936, 980, 1138],
    ["抹茶フィナンシェ", 1468, 1400, 871],
    ["レモンケーキ", 798, 1680, 1575],
]

SAMPLE_SHEET_NAME = "売上データ"


def sample_csv_text(with_bom: bool = True) -> str:
    """
    Render the sample rows as CSV text.

    Args:
        with_bom: Prefix a UTF-8 byte-order mark so spreadsheet apps detect
            the encoding.
    """
    body = "\n".join(",".join(str(cell) for cell in row) for row in SAMPLE_ROWS)
    return ("\ufeff" if with_bom else "") + body


def write_sample_workbook(path: Path | str, sheet_name: str = SAMPLE_SHEET_NAME) -> Path:
    """
    Write the sample rows to an .xlsx workbook.

    Empty strings are left as blank cells.

    Returns:
        Path of the written workbook.
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)

    workbook = xlsxwriter.Workbook(str(output))
    try:
        worksheet = workbook.add_worksheet(sheet_name)
        header_format = workbook.add_format({"bold": True, "bg_color": "#DDEBF7", "border": 1})
        number_format = workbook.add_format({"num_format": "#,##0"})

        for row_idx, row in enumerate(SAMPLE_ROWS):
            for col_idx, value in enumerate(row):
                if value == "":
                    continue
                if row_idx == 0:
                    worksheet.write_string(row_idx, col_idx, str(value), header_format)
                elif isinstance(value, int):
                    worksheet.write_number(row_idx, col_idx, value, number_format)
                else:
                    worksheet.write_string(row_idx, col_idx, str(value))

        worksheet.set_column(0, 0, 28)
        worksheet.set_column(1, len(SAMPLE_HEADER) - 1, 12)
    finally:
        workbook.close()

    return output
