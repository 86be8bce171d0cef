"""
Delimited text parsing into a grid of strings.

Used when the source is CSV text (an uploaded .csv file or a spreadsheet
exported as CSV from a URL) rather than a decoded workbook. Lines are
normalized and split one at a time, so a quoted field never spans lines.
"""

from __future__ import annotations

from salesboard import config
from salesboard.cells import clean_text
from salesboard.errors import InsufficientData
from salesboard.logger import get_logger

logger = get_logger(__name__)

_BOM = "\ufeff"


def _split_line(line: str) -> list[str]:
    """
    Split one line on commas outside double quotes.

    Every `"` toggles the quoted state wherever it appears in a field, so
    `A, "1,234"` and `ab"c,d"` both keep their inner comma. Inside quotes a
    doubled `""` is a literal quote. Quote characters are not kept.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and line[i + 1:i + 2] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    fields.append("".join(current))
    return [clean_text(field) for field in fields]


def normalize_lines(text: str) -> list[str]:
    """Strip the BOM, unify line breaks and drop blank lines."""
    normalized = text.lstrip(_BOM).replace("\r\n", "\n").replace("\r", "\n").strip()
    return [line.strip() for line in normalized.split("\n") if line.strip()]


def parse_delimited_text(text: str) -> list[list[str]]:
    """
    Parse comma-separated text into a row-major grid.

    Args:
        text: Raw CSV text.

    Returns:
        One list of cleaned field strings per non-blank line.

    Raises:
        InsufficientData: If fewer than two non-blank lines remain.
    """
    lines = normalize_lines(text)
    if len(lines) < 2:
        raise InsufficientData(
            "CSV data needs a header line and at least one data line "
            f"(found {len(lines)} non-blank line(s))",
            line_count=len(lines),
            preview=text[: config.ERROR_PREVIEW_CHARS],
        )

    grid = [_split_line(line) for line in lines]
    logger.debug(f"Parsed delimited text into {len(grid)} rows")
    return grid


def decode_text(data: bytes, encodings: list[str] | None = None) -> str:
    """
    Decode uploaded CSV bytes, trying each configured encoding in order.

    Raises:
        ValueError: If no encoding decodes the bytes.
    """
    last_error: Exception | None = None
    for encoding in encodings or config.CSV_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as exc:
            last_error = exc
            continue
    raise ValueError("Failed to decode CSV bytes") from last_error
