from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from sheet_annotator.models.cell import Cell, CellKind, normalize_text


@pytest.mark.parametrize(
    "raw,kind,value",
    [
        (None, CellKind.BLANK, None),
        (float("nan"), CellKind.BLANK, None),
        (math.inf, CellKind.BLANK, None),
        (3, CellKind.NUMBER, 3),
        (2.5, CellKind.NUMBER, 2.5),
        (True, CellKind.TEXT, "TRUE"),
        ("Login", CellKind.TEXT, "Login"),
        (date(2024, 5, 1), CellKind.TEXT, "2024-05-01"),
        (datetime(2024, 5, 1, 9, 30), CellKind.TEXT, "2024-05-01T09:30:00"),
    ],
)
def test_from_raw_kinds(raw, kind, value):
    cell = Cell.from_raw(raw)
    assert cell.kind is kind
    assert cell.value == value


def test_normalize_text_collapses_whitespace_and_case():
    assert normalize_text("  Feature \t  Name\n") == "feature name"
    assert normalize_text(None) == ""
    assert normalize_text(1.0) == "1"
    assert normalize_text(Cell.from_raw("  SR  No ")) == "sr no"


def test_blank_and_whitespace_cells_are_blank():
    assert Cell.blank().is_blank()
    assert Cell.from_raw("   ").is_blank()
    assert not Cell.from_raw(0).is_blank()


@pytest.mark.parametrize(
    "raw,expected",
    [
        (4, 4.0),
        (4.5, 4.5),
        (" 7 ", 7.0),
        ("3.0", 3.0),
        ("abc", None),
        ("", None),
        ("   ", None),
        (None, None),
        ("nan", None),
        ("inf", None),
        (False, None),
    ],
)
def test_as_number(raw, expected):
    assert Cell.from_raw(raw).as_number() == expected


def test_blank_index_cell_never_becomes_zero():
    # 空セルを 0 として扱わない
    assert Cell.from_raw("").as_number() is None
    assert Cell.blank().as_number() is None
