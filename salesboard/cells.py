"""
Cell normalization utilities.

Grid cells arrive as whatever the parser produced: text, numbers, None, NaN,
or dates from a decoded workbook. They are classified into a closed set of
kinds (empty, text, number) before any heuristic looks at them.

Numeric text is parsed leniently: thousands separators and currency glyphs are
removed, the leading number is read, and anything unparseable becomes 0.
"""

from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, time
from enum import Enum
from typing import Any

import pandas as pd

_BOM = "\ufeff"
_STRIP_CHARS = re.compile(r"[,¥$]")
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_FULL_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


class CellKind(Enum):
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def classify_cell(value: Any) -> CellKind:
    """Classify a raw cell value as EMPTY, TEXT or NUMBER."""
    if value is None:
        return CellKind.EMPTY
    if _is_number(value):
        if isinstance(value, float) and math.isnan(value):
            return CellKind.EMPTY
        return CellKind.NUMBER
    if isinstance(value, str):
        return CellKind.TEXT if value.replace(_BOM, "").strip() else CellKind.EMPTY
    try:
        if pd.isna(value):
            return CellKind.EMPTY
    except (TypeError, ValueError):
        pass
    return CellKind.TEXT


def is_empty(value: Any) -> bool:
    return classify_cell(value) is CellKind.EMPTY


def _render(value: Any) -> str:
    if _is_number(value):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def clean_text(cell: Any) -> str:
    """
    Return the trimmed string form of a cell.

    Strips a leading byte-order mark, surrounding double quotes and
    leading/trailing whitespace. Empty cells give "".
    """
    if classify_cell(cell) is CellKind.EMPTY:
        return ""
    text = _render(cell)
    if text.startswith(_BOM):
        text = text[1:]
    text = text.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.strip()


def looks_numeric(text: str) -> bool:
    """True when the whole trimmed text is a plain decimal number."""
    return bool(_FULL_NUMBER.match(text.strip()))


def normalize_number(cell: Any) -> float:
    """
    Coerce a cell to a float, never failing.

    Numbers pass through; text has "," "¥" "$" removed and its leading numeric
    prefix parsed ("95%" -> 95.0). Empty or unparseable cells give 0.0.
    """
    kind = classify_cell(cell)
    if kind is CellKind.NUMBER:
        return float(cell)
    if kind is CellKind.EMPTY:
        return 0.0

    cleaned = _STRIP_CHARS.sub("", _render(cell).replace(_BOM, ""))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    try:
        numeric = float(match.group(1))
    except ValueError:
        return 0.0
    if math.isinf(numeric):
        return 0.0
    return numeric
