from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any

import pandas as pd

"""Closed scalar cell model.

Worksheet values arrive as whatever openpyxl hands back (str, int, float, bool,
datetime, None). They are folded into three kinds only:

- TEXT: anything textual (bool / datetime are rendered as text)
- NUMBER: int / float (finite)
- BLANK: None, NaN, or nothing at all

Coercion is explicit: ``as_number()`` is the only way a cell "parses as a number".
"""

__all__ = [
    "CellKind",
    "Cell",
    "normalize_text",
]

_WS_RE = re.compile(r"\s+")


class CellKind(Enum):
    TEXT = "text"
    NUMBER = "number"
    BLANK = "blank"


def _number_text(value: int | float) -> str:
    # 1.0 -> "1" (Excel 上は整数表示なので照合も整数表記に揃える)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_text(value: Any) -> str:
    """Collapse whitespace runs, trim and lower-case. None -> ""."""
    if value is None:
        return ""
    if isinstance(value, Cell):
        return value.normalized()
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        text = _number_text(value)
    else:
        text = str(value)
    return _WS_RE.sub(" ", text).strip().lower()


@dataclass(frozen=True)
class Cell:
    kind: CellKind
    value: str | int | float | None = None

    @staticmethod
    def blank() -> Cell:
        return Cell(CellKind.BLANK, None)

    @staticmethod
    def from_raw(raw: Any) -> Cell:
        """Classify a raw worksheet value."""
        if raw is None or (pd.api.types.is_scalar(raw) and pd.isna(raw)):
            return Cell.blank()
        if isinstance(raw, bool):
            return Cell(CellKind.TEXT, "TRUE" if raw else "FALSE")
        if isinstance(raw, numbers.Real):
            if not math.isfinite(raw):
                return Cell.blank()
            if isinstance(raw, numbers.Integral):
                return Cell(CellKind.NUMBER, int(raw))
            return Cell(CellKind.NUMBER, float(raw))
        if isinstance(raw, (datetime, date, time)):
            return Cell(CellKind.TEXT, raw.isoformat())
        return Cell(CellKind.TEXT, str(raw))

    def normalized(self) -> str:
        if self.kind is CellKind.BLANK:
            return ""
        return normalize_text(self.value)

    def is_blank(self) -> bool:
        """True when the cell is blank after trimming (whitespace-only text counts)."""
        return self.normalized() == ""

    def as_number(self) -> float | None:
        """Return the numeric value, or None when the cell does not parse as a number.

        Blank / whitespace-only cells never parse (an empty index cell must not
        silently become feature 0).
        """
        if self.kind is CellKind.NUMBER:
            return float(self.value)  # type: ignore[arg-type]
        if self.kind is CellKind.BLANK:
            return None
        text = str(self.value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return number
