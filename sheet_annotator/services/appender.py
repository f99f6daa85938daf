from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from openpyxl.worksheet.worksheet import Worksheet

from ..excel.reader import SheetGrid
from ..models.annotation_result import RowMatch
from ..models.cell import Cell
from ..models.department import DEFAULT_DEPARTMENTS, Department
from ..models.result_record import ResultRecord

"""Append AI estimate columns to the selected worksheet.

Additive only: new headers go to the right of the sheet's used width (merged
ranges on written rows included) and values are written exclusively into those
new columns. No pre-existing cell is ever written.
"""

__all__ = [
    "RANGE_KEY_LABELS",
    "SCALAR_HEADERS",
    "build_appended_headers",
    "record_values",
    "append_columns",
]

RANGE_KEY_LABELS = ("Min", "MostLikely", "Max")
SCALAR_HEADERS = ("AI Confidence", "AI Complexity", "AI Tech Remarks", "AI User Remark")


def build_appended_headers(departments: Sequence[Department] = DEFAULT_DEPARTMENTS) -> list[str]:
    headers = [f"AI {d.label} {k}" for d in departments for k in RANGE_KEY_LABELS]
    headers.extend(SCALAR_HEADERS)
    return headers


def _number(value: float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _text(value: str) -> str | None:
    # 空文字は空セルとして扱う
    return value if value else None


def record_values(record: ResultRecord, departments: Sequence[Department] = DEFAULT_DEPARTMENTS) -> list[Any]:
    """Values for the appended columns, aligned with build_appended_headers()."""
    values: list[Any] = []
    for d in departments:
        hours = record.range_for(d.tag)
        if hours is None:
            values.extend([None, None, None])
        else:
            values.extend(_number(v) for v in hours.as_tuple())
    values.extend([
        _text(record.confidence),
        _text(record.complexity),
        _text(record.tech_remarks),
        _text(record.user_remark),
    ])
    return values


def append_columns(
    worksheet: Worksheet,
    grid: SheetGrid,
    header_row_index: int,
    matches: Sequence[RowMatch],
    departments: Sequence[Department] = DEFAULT_DEPARTMENTS,
) -> list[str]:
    """Write appended headers and matched values into ``worksheet``.

    ``grid`` is padded in place to the new width so it keeps mirroring the sheet.

    Returns:
        The appended header texts
    """
    headers = build_appended_headers(departments)
    written_rows = {header_row_index + 1} | {m.row_index + 1 for m in matches if m.record is not None}
    base = max(grid.width, _merged_width(worksheet, written_rows))  # 既存の使用幅の直後から追記
    total = base + len(headers)

    header_row = grid.rows[header_row_index]
    _pad(header_row, base)
    for offset, text in enumerate(headers):
        _write(worksheet, header_row_index + 1, base + offset + 1, text)
        header_row.append(Cell.from_raw(text))

    for match in matches:
        row = grid.rows[match.row_index]
        _pad(row, total)
        if match.record is None:
            continue
        for offset, value in enumerate(record_values(match.record, departments)):
            row[base + offset] = Cell.from_raw(value)
            if value is None:
                continue
            _write(worksheet, match.row_index + 1, base + offset + 1, value)
    return headers


def _merged_width(worksheet: Worksheet, rows: set[int]) -> int:
    """Rightmost column covered by a merged range touching any of ``rows`` (1-based).

    Only the anchor of a merged range carries a value, so the grid alone
    under-reports the occupied width; non-anchor cells are read-only.
    """
    width = 0
    for merged in worksheet.merged_cells.ranges:
        if any(merged.min_row <= r <= merged.max_row for r in rows):
            width = max(width, merged.max_col)
    return width


def _pad(row: list[Cell], width: int) -> None:
    while len(row) < width:
        row.append(Cell.blank())


def _write(worksheet: Worksheet, row: int, column: int, value: Any) -> None:
    cell = worksheet.cell(row=row, column=column, value=value)
    if isinstance(value, str) and value.startswith("="):
        # remarks like "=TBD" are text, not formulas
        cell.data_type = "s"
