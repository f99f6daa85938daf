from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import MissingKeyColumn
from ..models.cell import Cell

"""Header row location and key column matching.

The uploaded sheets follow no fixed template: title rows may precede the
header and the key columns go by several names. Matching is an ordered list of
whole-cell predicates over normalized header text, tried pattern by pattern
(the first pattern that hits any cell wins), so precedence stays explicit.
"""

__all__ = [
    "HeaderPattern",
    "FEATURE_NAME_PATTERNS",
    "FEATURE_INDEX_PATTERNS",
    "KeyColumns",
    "is_blank_row",
    "find_header_row_index",
    "pick_column_index",
    "resolve_key_columns",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderPattern:
    """A single header predicate: normalized cell must fully match ``regex``."""
    name: str
    regex: re.Pattern[str]

    def matches(self, normalized_cell: str) -> bool:
        return self.regex.fullmatch(normalized_cell) is not None


def _pattern(name: str, regex: str) -> HeaderPattern:
    return HeaderPattern(name=name, regex=re.compile(regex))


# Priority order matters: earlier patterns win over later ones.
FEATURE_NAME_PATTERNS: tuple[HeaderPattern, ...] = (
    _pattern("feature", r"feature"),
    _pattern("features", r"features"),
    _pattern("feature name", r"feature\s*name"),
    _pattern("title", r"title"),
    _pattern("name", r"name"),
)

FEATURE_INDEX_PATTERNS: tuple[HeaderPattern, ...] = (
    _pattern("feature index", r"feature\s*index"),
    _pattern("index", r"index"),
    _pattern("sr no", r"sr\.?\s*no\.?"),
    _pattern("s no", r"s\.?\s*no\.?"),
)


@dataclass(frozen=True)
class KeyColumns:
    """0-based column positions of the join keys (None when absent)."""
    name_col: int | None
    index_col: int | None


def is_blank_row(row: Sequence[Cell]) -> bool:
    return all(c.is_blank() for c in row)


def find_header_row_index(rows: Sequence[Sequence[Cell]]) -> int:
    """Index of the first row that is not entirely blank (0 when none)."""
    for i, row in enumerate(rows):
        if row and not is_blank_row(row):
            return i
    return 0


def pick_column_index(header_row: Sequence[Cell], patterns: Sequence[HeaderPattern]) -> int | None:
    normalized = [c.normalized() for c in header_row]
    for pattern in patterns:
        for idx, cell in enumerate(normalized):
            if pattern.matches(cell):
                return idx
    return None


def resolve_key_columns(header_row: Sequence[Cell], sheet_name: str = "") -> KeyColumns:
    """Resolve feature-name / feature-index columns; at least one is required."""
    keys = KeyColumns(
        name_col=pick_column_index(header_row, FEATURE_NAME_PATTERNS),
        index_col=pick_column_index(header_row, FEATURE_INDEX_PATTERNS),
    )
    if keys.name_col is None and keys.index_col is None:
        raise MissingKeyColumn(
            f"could not find a 'Feature' or 'Feature Index' column in sheet '{sheet_name}'"
        )
    logger.debug(
        "sheet=%s key columns name_col=%s index_col=%s", sheet_name, keys.name_col, keys.index_col
    )
    return keys
