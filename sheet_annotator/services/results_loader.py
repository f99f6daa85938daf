from __future__ import annotations

import json
import logging
import math
import zipfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import ResultsFormatError, SessionMismatch
from ..models.department import DEFAULT_DEPARTMENTS, Department
from ..models.result_record import CONFIDENCE_LEVELS, HoursRange, ResultRecord
from ..models.status import EstimateStatus, EstimationStatus

"""Turn estimation service output into ResultRecords.

Sources:
- a status payload (``{"sessionId", "status", "progress", "result": [...]}``)
- a bare JSON list of result items
- a flat estimation table (.csv / .xlsx) as written by ``excel.flat_export``

Result items are loosely typed. Per department tag the loader prefers
``<tag>HoursRange`` ({min, mostLikely, max}); older responses only carry a
flat ``<tag>Hours`` number, which becomes a degenerate range {n, n, n}.
"""

__all__ = [
    "parse_status_payload",
    "record_from_item",
    "records_from_items",
    "records_from_frame",
    "load_results",
    "ensure_same_session",
]

logger = logging.getLogger(__name__)

FLAT_TEXT_COLUMNS = ("batch", "featureName", "confidence", "userRemark", "complexity", "techRemarks")


def _to_number(value: Any) -> float:
    """Loose numeric coercion: missing / non-numeric / non-finite -> 0, negatives -> 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(number, 0.0)


def _to_range(maybe_range: Any, maybe_flat: Any) -> HoursRange:
    if isinstance(maybe_range, Mapping):
        return HoursRange(
            min=_to_number(maybe_range.get("min")),
            most_likely=_to_number(maybe_range.get("mostLikely")),
            max=_to_number(maybe_range.get("max")),
        )
    n = _to_number(maybe_flat)
    return HoursRange(min=n, most_likely=n, max=n)


def _to_feature_index(value: Any, position: int) -> int | None:
    if value is None:
        return position
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def record_from_item(
    item: Mapping[str, Any], position: int, departments: Sequence[Department] = DEFAULT_DEPARTMENTS
) -> ResultRecord:
    """Normalize one result item.

    Args:
        item: Raw result item from the status payload
        position: 0-based position in the result list (fallback feature index)
        departments: Department tags to read ranges for
    """
    confidence = item.get("confidence") or item.get("batchConfidenceDelta") or "Medium"
    if confidence not in CONFIDENCE_LEVELS:
        logger.warning("feature=%s unexpected confidence %r (kept as is)", item.get("featureName"), confidence)
    ranges = {
        d.tag: _to_range(item.get(f"{d.tag}HoursRange"), item.get(f"{d.tag}Hours"))
        for d in departments
    }
    return ResultRecord(
        feature_index=_to_feature_index(item.get("featureIndex"), position),
        feature_name=_text(item.get("featureName")),
        batch=_text(item.get("batch")),
        confidence=_text(confidence),
        complexity=_text(item.get("complexity")),
        tech_remarks=_text(item.get("techRemarks")),
        user_remark=_text(item.get("userRemark")),
        ranges=ranges,
    )


def records_from_items(
    items: Sequence[Any], departments: Sequence[Department] = DEFAULT_DEPARTMENTS
) -> list[ResultRecord]:
    records: list[ResultRecord] = []
    for position, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ResultsFormatError(f"result item #{position} is not an object")
        records.append(record_from_item(item, position, departments))
    return records


def parse_status_payload(payload: Mapping[str, Any]) -> EstimateStatus:
    """Parse a status response; an unknown status is a format error."""
    raw_status = payload.get("status")
    try:
        status = EstimationStatus(str(raw_status).upper())
    except ValueError as e:
        raise ResultsFormatError(f"unknown estimation status: {raw_status!r}") from e
    result = payload.get("result")
    return EstimateStatus(
        session_id=_text(payload.get("sessionId")),
        status=status,
        error=payload.get("error"),
        progress=payload.get("progress"),
        result=list(result) if isinstance(result, list) else [],
    )


def records_from_frame(
    df: pd.DataFrame, departments: Sequence[Department] = DEFAULT_DEPARTMENTS
) -> list[ResultRecord]:
    """Read a flat estimation table (one row per feature) back into records."""
    columns = set(df.columns)
    if "featureIndex" not in columns and "featureName" not in columns:
        raise ResultsFormatError("flat results table needs a 'featureIndex' or 'featureName' column")
    items: list[dict[str, Any]] = []
    for raw in df.to_dict(orient="records"):
        row = {k: (None if pd.api.types.is_scalar(v) and pd.isna(v) else v) for k, v in raw.items()}
        item: dict[str, Any] = {col: row.get(col) for col in FLAT_TEXT_COLUMNS}
        item["featureIndex"] = row.get("featureIndex")
        for d in departments:
            parts = {k: row.get(f"{d.tag}_{k}") for k in ("min", "mostLikely", "max")}
            if any(f"{d.tag}_{k}" in columns for k in parts):
                item[f"{d.tag}HoursRange"] = parts
        items.append(item)
    return records_from_items(items, departments)


def load_results(
    path: Path, departments: Sequence[Department] = DEFAULT_DEPARTMENTS
) -> list[ResultRecord]:
    """Load result records from a .json / .csv / .xlsx file."""
    if not path.exists():
        raise ResultsFormatError(f"results file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ResultsFormatError(f"invalid results json: {e}") from e
        if isinstance(data, list):
            return records_from_items(data, departments)
        if isinstance(data, Mapping):
            status = parse_status_payload(data)
            if status.status is EstimationStatus.FAILED:
                raise ResultsFormatError(f"estimation failed: {status.error or 'unknown error'}")
            if not status.is_terminal:
                logger.warning(
                    "session=%s status=%s progress=%s (results may be incomplete)",
                    status.session_id,
                    status.status.value,
                    status.progress,
                )
            return records_from_items(status.result, departments)
        raise ResultsFormatError("results json must be a list or a status object")
    if suffix in (".csv", ".xlsx"):
        try:
            if suffix == ".csv":
                df = pd.read_csv(path, dtype=object)
            else:
                df = pd.read_excel(path, sheet_name=0, dtype=object)
        except (ValueError, OSError, zipfile.BadZipFile) as e:
            raise ResultsFormatError(f"cannot read results table {path.name}: {e}") from e
        return records_from_frame(df, departments)
    raise ResultsFormatError(f"unsupported results file type: {path.suffix}")


def ensure_same_session(active_session_id: str | None, uploaded_session_id: str | None) -> None:
    """Refuse to annotate a workbook uploaded under a different session."""
    active = (active_session_id or "").strip()
    uploaded = (uploaded_session_id or "").strip()
    if not active or not uploaded or active != uploaded:
        raise SessionMismatch(
            "the uploaded Excel file does not match the current sessionId; "
            "re-upload the Excel for this session"
        )
