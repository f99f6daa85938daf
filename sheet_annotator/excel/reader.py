from __future__ import annotations

import zipfile
from dataclasses import dataclass
from io import BytesIO
from itertools import zip_longest

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import EmptySheet, NoSheetsFound, WorkbookReadError
from ..models.cell import Cell

"""Workbook loading, sheet selection and grid extraction.

The uploaded workbook is loaded twice from the same bytes:

- a formula-preserving copy (data_only=False) that is mutated and saved, so
  formulas in pre-existing cells survive untouched
- a cached-value copy (data_only=True) that is only read, so a formula cell
  such as ``=A3+1`` in an index column still matches by its value

Both copies are fresh per call; the caller's bytes are never modified.
"""

__all__ = [
    "SheetGrid",
    "LoadedWorkbook",
    "load_workbook_bytes",
    "select_sheet_index",
    "read_grid",
]


@dataclass
class SheetGrid:
    """Ragged grid of a worksheet (row 0 == worksheet row 1).

    Trailing blank cells of each row and trailing blank rows are trimmed;
    leading blank rows are kept so row positions stay aligned with the sheet.
    """
    sheet_name: str
    rows: list[list[Cell]]

    @property
    def width(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    def row(self, index: int) -> list[Cell]:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return []


@dataclass
class LoadedWorkbook:
    workbook: Workbook  # formulas kept; the copy that gets saved
    values: Workbook  # cached values; read-only use


def load_workbook_bytes(data: bytes) -> LoadedWorkbook:
    """Parse workbook bytes, raising WorkbookReadError on a corrupt container."""
    try:
        workbook = openpyxl.load_workbook(BytesIO(data), data_only=False)
        values = openpyxl.load_workbook(BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise WorkbookReadError(f"cannot read workbook: {e}") from e
    return LoadedWorkbook(workbook=workbook, values=values)


def select_sheet_index(workbook: Workbook) -> int:
    """Pick the sheet to annotate: the 2nd sheet if present, else the 1st.

    Producers of these workbooks conventionally put a cover / index sheet first
    and the feature table second.
    """
    sheets = workbook.worksheets  # chartsheet は対象外
    if not sheets:
        raise NoSheetsFound("no sheets found in uploaded workbook")
    return 1 if len(sheets) > 1 else 0


def read_grid(worksheet: Worksheet, formulas: Worksheet | None = None) -> SheetGrid:
    """Read a worksheet into a SheetGrid; raises EmptySheet when nothing remains.

    ``worksheet`` should come from the cached-value copy. When ``formulas`` (the
    same sheet from the formula-preserving copy) is given, a cell without a
    cached value falls back to its formula text so it still counts as occupied.
    """
    value_rows = worksheet.iter_rows(values_only=True)
    formula_rows = formulas.iter_rows(values_only=True) if formulas is not None else iter(())
    rows: list[list[Cell]] = []
    for raw_row, formula_row in zip_longest(value_rows, formula_rows, fillvalue=()):
        raw_row = raw_row or ()
        formula_row = formula_row or ()
        cells = []
        for raw, formula in zip_longest(raw_row, formula_row):
            cells.append(Cell.from_raw(raw if raw is not None else formula))
        # 行末の空セルは落とす (ragged grid)
        while cells and cells[-1].value is None:
            cells.pop()
        rows.append(cells)
    # 末尾の空行を除去 (先頭側は位置合わせのため残す)
    while rows and not rows[-1]:
        rows.pop()
    if not rows or all(c.is_blank() for row in rows for c in row):
        raise EmptySheet(f"uploaded sheet '{worksheet.title}' is empty")
    return SheetGrid(sheet_name=worksheet.title, rows=rows)
