from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .result_record import ResultRecord

"""Annotation result models.

AnnotationResult is what one engine call hands back: the new workbook bytes,
the suggested output name and the per-row match report used for the SUMMARY
line and the error log.
"""

__all__ = [
    "MatchRule",
    "RowMatch",
    "AnnotationResult",
]


class MatchRule(Enum):
    """Which rule of the fallback chain resolved a row."""
    INDEX = "index"
    NAME = "name"
    POSITION = "position"  # best-effort: assumes sheet order == generation order
    NONE = "none"


@dataclass(frozen=True)
class RowMatch:
    row_index: int  # 0-based row position in the sheet grid
    ordinal: int  # 0-based ordinal among non-blank data rows
    rule: MatchRule
    record: ResultRecord | None = None

    @property
    def matched(self) -> bool:
        return self.record is not None

    @property
    def excel_row(self) -> int:
        """1-based worksheet row number (for logs / error records)."""
        return self.row_index + 1


@dataclass(frozen=True)
class AnnotationResult:
    content: bytes  # annotated workbook bytes
    file_name: str  # suggested (or explicit) output name
    sheet_name: str
    header_row_index: int
    appended_headers: list[str]
    matches: list[RowMatch]
    elapsed_seconds: float = 0.0

    @property
    def data_rows(self) -> int:
        return len(self.matches)

    @property
    def matched_rows(self) -> int:
        return sum(1 for m in self.matches if m.matched)

    @property
    def unmatched(self) -> list[RowMatch]:
        return [m for m in self.matches if not m.matched]

    def count_by(self, rule: MatchRule) -> int:
        return sum(1 for m in self.matches if m.rule is rule)
