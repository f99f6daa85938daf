from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.annotation_result import AnnotationResult
from ..models.error_record import ErrorRecord

"""Annotation report buffering (JSON Lines).

- Fixed schema per line (ErrorRecord fields, no extra keys)
- One file per CLI run: ``<logs_dir>/errors-YYYYMMDD-HHMMSS.log`` (UTC),
  created lazily on the first flush that has records
- Serial use only; no thread safety needed
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "NO_MATCH",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
FILE_LEVEL_SHEET = "<FILE_LEVEL>"
NO_MATCH = "NO_MATCH"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def record_failure(self, file: str, error_type: str, message: str) -> None:
        """Record a file-level (fatal) failure; row is -1."""
        self.append(ErrorRecord.create(file=file, sheet=FILE_LEVEL_SHEET, row=-1, error_type=error_type, message=message))

    def record_unmatched(self, file: str, result: AnnotationResult) -> int:
        """Record one NO_MATCH entry per unmatched data row; returns the count."""
        unmatched = result.unmatched
        for match in unmatched:
            self.append(
                ErrorRecord.create(
                    file=file,
                    sheet=result.sheet_name,
                    row=match.excel_row,
                    error_type=NO_MATCH,
                    message="no estimate matched by index, name or position",
                )
            )
        return len(unmatched)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file path, or None when empty."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
