from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from ..errors import MissingFile, NoEstimatesProvided
from ..excel.header import find_header_row_index, is_blank_row, resolve_key_columns
from ..excel.reader import load_workbook_bytes, read_grid, select_sheet_index
from ..excel.writer import OUTPUT_SUFFIX, serialize_workbook, suggest_output_name
from ..models.annotation_result import AnnotationResult, RowMatch
from ..models.department import DEFAULT_DEPARTMENTS, Department
from ..models.result_record import ResultRecord
from .appender import append_columns
from .progress import ProgressTracker
from .resolver import resolve_rows

logger = logging.getLogger(__name__)

"""Annotation pipeline orchestration.

One call == one synchronous pass:
select sheet → locate header → match key columns → resolve rows →
append columns → serialize. Nothing is cached between calls and nothing is
written to disk here; the caller decides what to do with the bytes.
"""

__all__ = [
    "annotate_workbook",
]


def annotate_workbook(
    original: bytes | None,
    records: Sequence[ResultRecord],
    *,
    original_name: str = "workbook.xlsx",
    output_name: str | None = None,
    departments: Sequence[Department] = DEFAULT_DEPARTMENTS,
    output_suffix: str = OUTPUT_SUFFIX,
    show_progress: bool = False,
) -> AnnotationResult:
    """Annotate the uploaded workbook with the estimates in ``records``.

    Args:
        original: Raw bytes of the uploaded workbook
        records: Result records (must be non-empty)
        original_name: Uploaded file name; base of the suggested output name
        output_name: Explicit output name, used verbatim when given
        departments: Department tags/labels, in appended-column order
        output_suffix: Suffix for the suggested name
        show_progress: Show a row progress bar (TTY only)

    Returns:
        AnnotationResult with the new bytes, output name and per-row matches

    Raises:
        MissingFile, NoEstimatesProvided, WorkbookReadError, NoSheetsFound,
        EmptySheet, MissingKeyColumn
    """
    start_time = datetime.now(UTC)
    if not original:
        raise MissingFile("missing original Excel file")
    if not records:
        raise NoEstimatesProvided("no estimates to export")

    loaded = load_workbook_bytes(original)
    sheet_index = select_sheet_index(loaded.workbook)
    worksheet = loaded.workbook.worksheets[sheet_index]
    grid = read_grid(loaded.values.worksheets[sheet_index], formulas=worksheet)

    header_row_index = find_header_row_index(grid.rows)
    logger.debug("sheet=%s header_row_index=%d", grid.sheet_name, header_row_index)
    # MissingKeyColumn はここで発生 (シートへの書き込み前)
    keys = resolve_key_columns(grid.row(header_row_index), grid.sheet_name)

    data_rows = sum(1 for row in grid.rows[header_row_index + 1:] if not is_blank_row(row))
    with ProgressTracker(data_rows, description="Annotating rows", enabled=show_progress) as progress:
        def _on_row(match: RowMatch) -> None:
            progress.advance(matched=match.matched)

        matches = resolve_rows(grid, header_row_index, keys, records, on_row=_on_row)

    headers = append_columns(worksheet, grid, header_row_index, matches, departments)
    content = serialize_workbook(loaded.workbook, original)
    file_name = suggest_output_name(original_name, output_name, suffix=output_suffix)

    elapsed = (datetime.now(UTC) - start_time).total_seconds()
    result = AnnotationResult(
        content=content,
        file_name=file_name,
        sheet_name=grid.sheet_name,
        header_row_index=header_row_index,
        appended_headers=headers,
        matches=matches,
        elapsed_seconds=elapsed,
    )
    logger.info(
        "annotated sheet=%s rows=%d matched=%d unmatched=%d",
        result.sheet_name,
        result.data_rows,
        result.matched_rows,
        len(result.unmatched),
    )
    return result
