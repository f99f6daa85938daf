from __future__ import annotations

from collections.abc import Sequence

from ..models.annotation_result import AnnotationResult, MatchRule
from ..models.department import DEFAULT_DEPARTMENTS, Department
from ..models.result_record import ResultRecord

"""Summary line rendering for the annotator CLI.

Format:
SUMMARY file={name} sheet={sheet} rows={n} matched={m} by_index={a}
by_name={b} by_position={c} unmatched={u} elapsed_sec={s}
(single line; ``log_summary`` adds the "SUMMARY " prefix)
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(result: AnnotationResult) -> str:
    """Render a SUMMARY line from an AnnotationResult.

    Examples:
        >>> from sheet_annotator.models import AnnotationResult
        >>> r = AnnotationResult(content=b"", file_name="a_with_estimates.xlsx", sheet_name="Features",
        ...     header_row_index=0, appended_headers=[], matches=[], elapsed_seconds=0.0)
        >>> render_summary_line(r)
        'SUMMARY file=a_with_estimates.xlsx sheet=Features rows=0 matched=0 by_index=0 by_name=0 by_position=0 unmatched=0 elapsed_sec=0'
    """
    return (
        f"SUMMARY file={result.file_name} "
        f"sheet={result.sheet_name} "
        f"rows={result.data_rows} "
        f"matched={result.matched_rows} "
        f"by_index={result.count_by(MatchRule.INDEX)} "
        f"by_name={result.count_by(MatchRule.NAME)} "
        f"by_position={result.count_by(MatchRule.POSITION)} "
        f"unmatched={len(result.unmatched)} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)}"
    )


def department_totals(
    records: Sequence[ResultRecord], departments: Sequence[Department] = DEFAULT_DEPARTMENTS
) -> dict[str, float]:
    """Sum of mostLikely hours per department tag, plus ``"total"``."""
    sums = {d.tag: 0.0 for d in departments}
    for record in records:
        for d in departments:
            hours = record.range_for(d.tag)
            if hours is not None:
                sums[d.tag] += hours.most_likely
    sums["total"] = sum(sums[d.tag] for d in departments)
    return sums


def render_totals_line(totals: dict[str, float], departments: Sequence[Department] = DEFAULT_DEPARTMENTS) -> str:
    parts = [f"{d.tag}={_format_number(totals.get(d.tag, 0.0))}" for d in departments]
    parts.append(f"total={_format_number(totals.get('total', 0.0))}")
    return "TOTALS " + " ".join(parts)
