from __future__ import annotations

import re

from sheet_annotator.models import AnnotationResult, HoursRange, MatchRule, ResultRecord, RowMatch
from sheet_annotator.services.summary import department_totals, render_summary_line, render_totals_line


def _result(elapsed: float = 0.1234) -> AnnotationResult:
    rec = ResultRecord(1, "A")
    return AnnotationResult(
        content=b"",
        file_name="plan_with_estimates.xlsx",
        sheet_name="Features",
        header_row_index=2,
        appended_headers=[],
        matches=[
            RowMatch(3, 0, MatchRule.INDEX, rec),
            RowMatch(4, 1, MatchRule.NAME, rec),
            RowMatch(5, 2, MatchRule.POSITION, rec),
            RowMatch(6, 3, MatchRule.NONE, None),
        ],
        elapsed_seconds=elapsed,
    )


def test_summary_line_format():
    line = render_summary_line(_result())
    pattern = (
        r"^SUMMARY file=\S+ sheet=\S+ rows=\d+ matched=\d+ by_index=\d+ by_name=\d+ "
        r"by_position=\d+ unmatched=\d+ elapsed_sec=[0-9.]+$"
    )
    assert re.match(pattern, line)
    assert "rows=4 matched=3 by_index=1 by_name=1 by_position=1 unmatched=1" in line
    assert line.endswith("elapsed_sec=0.12")


def test_summary_small_elapsed():
    assert render_summary_line(_result(0.0004)).endswith("elapsed_sec=0.0004")


def test_department_totals(scenario_records):
    totals = department_totals(scenario_records)
    assert totals["frontend"] == 6
    assert totals["backend"] == 2
    assert totals["mobile"] == 0
    assert totals["total"] == 8


def test_render_totals_line():
    records = [ResultRecord(1, "A", ranges={"frontend": HoursRange(1, 2.5, 4)})]
    line = render_totals_line(department_totals(records))
    assert line == "TOTALS frontend=2.5 backend=0 mobile=0 htmlCss=0 aiMl=0 total=2.5"
