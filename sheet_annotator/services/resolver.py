from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..excel.header import KeyColumns, is_blank_row
from ..excel.reader import SheetGrid
from ..models.annotation_result import MatchRule, RowMatch
from ..models.cell import Cell, normalize_text
from ..models.result_record import ResultRecord

"""Row → ResultRecord resolution.

Fallback chain per data row, first success wins:

1. index    -- index column cell parses as a number equal to feature_index
2. name     -- normalized name cell equals a normalized feature_name
3. position -- records sorted by feature_index, taken at the row's ordinal
               among non-blank data rows

The positional rule is a best-effort heuristic: it is only right when the
uploaded sheet keeps the order the estimates were generated in. Sheets that
carry an index or name column never need it for rows whose keys match.
"""

__all__ = [
    "RecordIndex",
    "resolve_rows",
]

logger = logging.getLogger(__name__)


def _position_key(record: ResultRecord) -> tuple[int, int]:
    # feature_index 無しのレコードは末尾 (入力順は sorted の安定性で維持)
    if record.feature_index is None:
        return (1, 0)
    return (0, record.feature_index)


class RecordIndex:
    """Lookup tables over one immutable list of ResultRecords."""

    def __init__(self, records: Sequence[ResultRecord]) -> None:
        self.by_index: dict[float, ResultRecord] = {}
        self.by_name: dict[str, ResultRecord] = {}
        for record in records:
            if record.feature_index is not None:
                # duplicate index: later record replaces earlier one
                self.by_index[float(record.feature_index)] = record
            key = normalize_text(record.feature_name)
            if key and key not in self.by_name:
                self.by_name[key] = record
        self.by_position: list[ResultRecord] = sorted(records, key=_position_key)

    def lookup(self, row: Sequence[Cell], ordinal: int, keys: KeyColumns) -> tuple[MatchRule, ResultRecord | None]:
        if keys.index_col is not None:
            number = _cell_at(row, keys.index_col).as_number()
            if number is not None:
                hit = self.by_index.get(number)
                if hit is not None:
                    return MatchRule.INDEX, hit

        if keys.name_col is not None:
            name = _cell_at(row, keys.name_col).normalized()
            hit = self.by_name.get(name) if name else None
            if hit is not None:
                return MatchRule.NAME, hit

        if ordinal < len(self.by_position):
            return MatchRule.POSITION, self.by_position[ordinal]
        return MatchRule.NONE, None


def _cell_at(row: Sequence[Cell], col: int) -> Cell:
    if col < len(row):
        return row[col]
    return Cell.blank()


def resolve_rows(
    grid: SheetGrid,
    header_row_index: int,
    keys: KeyColumns,
    records: Sequence[ResultRecord],
    on_row: Callable[[RowMatch], None] | None = None,
) -> list[RowMatch]:
    """Resolve every non-blank data row below the header.

    Args:
        grid: Sheet grid (values view)
        header_row_index: 0-based header row position
        keys: Resolved key columns
        records: Result records for this call
        on_row: Optional callback per resolved row (progress display)

    Returns:
        One RowMatch per non-blank data row, in sheet order
    """
    index = RecordIndex(records)
    matches: list[RowMatch] = []
    ordinal = 0
    for row_index in range(header_row_index + 1, len(grid.rows)):
        row = grid.rows[row_index]
        if is_blank_row(row):
            continue
        rule, record = index.lookup(row, ordinal, keys)
        match = RowMatch(row_index=row_index, ordinal=ordinal, rule=rule, record=record)
        if record is None:
            logger.debug("sheet=%s row=%d no matching estimate", grid.sheet_name, match.excel_row)
        matches.append(match)
        if on_row is not None:
            on_row(match)
        ordinal += 1
    return matches
