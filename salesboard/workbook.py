"""
File loader utilities for uploaded sales sheets.

Decodes spreadsheet files into a raw grid (no header applied; header
detection happens later) and reads CSV files as text for the text grid parser.
"""

from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.biffh import XLRDError

from salesboard.errors import InsufficientData, SheetNotFound, UnreadableWorkbook, UnsupportedFormat
from salesboard.logger import get_logger
from salesboard.text_grid import decode_text

logger = get_logger(__name__)

TEXT_SUFFIXES = (".csv", ".txt")
EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")
ALLOWED_SUFFIXES = TEXT_SUFFIXES + EXCEL_SUFFIXES

# Raised by pandas, openpyxl and xlrd for corrupt or mislabelled files
_DECODER_ERRORS = (zipfile.BadZipFile, InvalidFileException, XLRDError, KeyError, ValueError)


@dataclass
class WorkbookGrid:
    """One decoded sheet plus the names of every sheet in the workbook."""

    sheet_names: list[str]
    sheet_name: str
    grid: list[list[Any]] = field(default_factory=list)


def _engine_for(suffix: str | None) -> str | None:
    if suffix in (".xlsx", ".xlsm"):
        return "openpyxl"
    if suffix == ".xls":
        return "xlrd"
    return None


def _frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    # object dtype keeps Python scalars; NaN/NaT become None
    raw = df.astype(object).where(pd.notna(df), None)
    return [list(row) for row in raw.itertuples(index=False, name=None)]


def read_workbook(
    source: Path | str | bytes,
    sheet_name: str | None = None,
    *,
    suffix: str | None = None,
) -> WorkbookGrid:
    """
    Decode a spreadsheet into a raw grid for one sheet.

    Args:
        source: Path to the workbook or its bytes.
        sheet_name: Sheet to read. If None, uses the first sheet.
        suffix: File suffix used to pick the engine when source is bytes.

    Returns:
        WorkbookGrid with every sheet name and the selected sheet's cells.

    Raises:
        SheetNotFound: If sheet_name is not in the workbook.
        InsufficientData: If the workbook has no sheets.
        UnreadableWorkbook: If the decoder rejects the file.
    """
    if isinstance(source, (bytes, bytearray)):
        handle: Any = BytesIO(source)
        engine = _engine_for(suffix.lower() if suffix else ".xlsx")
    else:
        handle = Path(source)
        engine = _engine_for(handle.suffix.lower())

    try:
        with pd.ExcelFile(handle, engine=engine) as xls:
            sheet_names = [str(name) for name in xls.sheet_names]
            if not sheet_names:
                raise InsufficientData("Workbook contains no sheets")

            selected = sheet_name if sheet_name is not None else sheet_names[0]
            if selected not in sheet_names:
                raise SheetNotFound(f"Sheet '{selected}' not found (available: {', '.join(sheet_names)})")

            df = xls.parse(selected, header=None)
    except _DECODER_ERRORS as exc:
        logger.warning(f"Workbook decoder failed ({engine or 'auto'}): {type(exc).__name__}: {exc}")
        raise UnreadableWorkbook(
            f"Could not read the file as a spreadsheet ({type(exc).__name__}). "
            "Check that it is a valid .xlsx/.xls workbook."
        ) from exc

    grid = _frame_to_grid(df)
    logger.info(f"Loaded sheet '{selected}' ({len(grid)} rows, {df.shape[1]} columns)")
    return WorkbookGrid(sheet_names=sheet_names, sheet_name=selected, grid=grid)


def read_text_file(path: Path | str) -> str:
    """Read a CSV/TXT file as text, trying the configured encodings."""
    return decode_text(Path(path).read_bytes())


def check_suffix(name: str) -> str:
    """
    Return the lower-cased suffix of a file name.

    Raises:
        UnsupportedFormat: If the suffix is not a supported sheet format.
    """
    suffix = Path(name).suffix.lower()
    if suffix not in ALLOWED_SUFFIXES:
        raise UnsupportedFormat(f"Unsupported file format: {suffix or name}")
    return suffix
