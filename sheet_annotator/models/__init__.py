"""Domain models for the estimate sheet annotator."""

from .annotation_result import AnnotationResult, MatchRule, RowMatch
from .cell import Cell, CellKind, normalize_text
from .department import DEFAULT_DEPARTMENTS, Department
from .error_record import ErrorRecord
from .result_record import CONFIDENCE_LEVELS, HoursRange, ResultRecord
from .status import EstimateStatus, EstimationStatus

__all__ = [
    # Sheet models
    "Cell",
    "CellKind",
    "normalize_text",
    # Estimate models
    "CONFIDENCE_LEVELS",
    "DEFAULT_DEPARTMENTS",
    "Department",
    "HoursRange",
    "ResultRecord",
    "EstimateStatus",
    "EstimationStatus",
    # Reporting models
    "AnnotationResult",
    "MatchRule",
    "RowMatch",
    "ErrorRecord",
]
