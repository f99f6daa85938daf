"""Annotate uploaded feature sheets with AI effort estimates.

Typical use::

    from sheet_annotator import annotate_workbook, load_results

    records = load_results(Path("status.json"))
    result = annotate_workbook(Path("features.xlsx").read_bytes(), records,
                               original_name="features.xlsx")
    Path(result.file_name).write_bytes(result.content)
"""

from .errors import (
    AnnotationError,
    EmptySheet,
    MissingFile,
    MissingKeyColumn,
    NoEstimatesProvided,
    NoSheetsFound,
    ResultsFormatError,
    SessionMismatch,
    WorkbookReadError,
)
from .models import AnnotationResult, Department, HoursRange, MatchRule, ResultRecord
from .services.orchestrator import annotate_workbook
from .services.results_loader import load_results

__all__ = [
    "annotate_workbook",
    "load_results",
    "AnnotationResult",
    "Department",
    "HoursRange",
    "MatchRule",
    "ResultRecord",
    "AnnotationError",
    "EmptySheet",
    "MissingFile",
    "MissingKeyColumn",
    "NoEstimatesProvided",
    "NoSheetsFound",
    "ResultsFormatError",
    "SessionMismatch",
    "WorkbookReadError",
]
