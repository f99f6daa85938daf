from __future__ import annotations

"""Error taxonomy for the sheet annotator.

Every failure of an annotation call derives from ``AnnotationError`` so callers
(CLI, services embedding the engine) can catch one type. Row-level misses are
NOT errors: unmatched rows are reported in ``AnnotationResult`` instead.
"""

__all__ = [
    "AnnotationError",
    "MissingFile",
    "NoEstimatesProvided",
    "NoSheetsFound",
    "EmptySheet",
    "MissingKeyColumn",
    "WorkbookReadError",
    "ResultsFormatError",
    "SessionMismatch",
]


class AnnotationError(Exception):
    """Base exception for annotation failures."""


class MissingFile(AnnotationError):
    """Raised when no original workbook bytes were supplied."""


class NoEstimatesProvided(AnnotationError):
    """Raised when the result record list is empty."""


class NoSheetsFound(AnnotationError):
    """Raised when the workbook contains no worksheets."""


class EmptySheet(AnnotationError):
    """Raised when the selected worksheet has no rows."""


class MissingKeyColumn(AnnotationError):
    """Raised when neither a feature-name nor a feature-index column exists."""


class WorkbookReadError(AnnotationError):
    """Raised when the input bytes are not a readable workbook container.

    This is fatal: retrying the pipeline with the same bytes cannot succeed.
    """


class ResultsFormatError(AnnotationError):
    """Raised when a results file / status payload cannot be interpreted."""


class SessionMismatch(AnnotationError):
    """Raised when the uploaded workbook belongs to another session."""
