"""
Column Identifier - maps free-text header labels to semantic fields.

Header labels in uploaded sheets are written by hand, mostly in Japanese
("主力商品名", "前年", "予定", "実績"). Each semantic field has a list of
synonyms; a label matches a synonym when the two are equal or either one
contains the other. Fields are tried in declaration order and the first match
wins, so a label like "前年売上" resolves to lastYear rather than actual.

The containment rule produces known false positives for short labels (e.g.
"a" is contained in "name").
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from salesboard.config import COLUMN_SYNONYMS

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class SemanticField(str, Enum):
    """Canonical fields of a sales record, in matching priority order."""

    PRODUCT = "product"
    LAST_YEAR = "lastYear"
    TARGET = "target"
    ACTUAL = "actual"


ColumnMap = dict[SemanticField, int]


def _build_synonym_table(
    synonyms: Mapping[str, Sequence[str]],
) -> tuple[tuple[SemanticField, tuple[str, ...]], ...]:
    # Iterate SemanticField, not the mapping, so order never depends on config
    return tuple(
        (field, tuple(s.lower().strip() for s in synonyms.get(field.value, ()) if s.strip()))
        for field in SemanticField
    )


SYNONYM_TABLE = _build_synonym_table(COLUMN_SYNONYMS)


def identify_column(header_text: Any) -> SemanticField | None:
    """
    Resolve a header label to a semantic field.

    Args:
        header_text: Raw header cell text.

    Returns:
        The first field whose synonym equals, contains, or is contained in the
        lower-cased, trimmed label; None when nothing matches.
    """
    if not isinstance(header_text, str):
        return None
    normalized = header_text.lower().strip()
    if not normalized:
        return None

    for field, synonyms in SYNONYM_TABLE:
        for synonym in synonyms:
            if normalized == synonym or synonym in normalized or normalized in synonym:
                return field
    return None


def identify_columns(headers: Sequence[Any]) -> ColumnMap:
    """
    Identify every label of a header row.

    Later columns overwrite earlier ones that resolve to the same field.

    Args:
        headers: Header labels in column order.

    Returns:
        Mapping of field to zero-based column index.
    """
    column_map: ColumnMap = {}
    for index, label in enumerate(headers):
        field = identify_column(label)
        if field is not None:
            column_map[field] = index
    return column_map


def describe_column_map(column_map: Mapping[SemanticField, int]) -> str:
    """Render a column map as "product=0, target=2" in field order."""
    return ", ".join(
        f"{field.value}={column_map[field]}" for field in SemanticField if field in column_map
    )
