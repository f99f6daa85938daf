from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from io import BytesIO

import pandas as pd

from ..errors import NoEstimatesProvided
from ..models.department import DEFAULT_DEPARTMENTS, Department
from ..models.result_record import ResultRecord

"""Flat estimation export.

Writes the records alone (no uploaded workbook involved) as a single
``Estimations`` sheet, one row per feature. The layout is what
``services.results_loader.records_from_frame`` reads back, so an edited export
can be fed to the annotator again.
"""

__all__ = [
    "ESTIMATIONS_SHEET",
    "build_estimation_frame",
    "export_estimations",
    "safe_file_part",
    "estimation_file_name",
]

ESTIMATIONS_SHEET = "Estimations"
_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9._-]")


def safe_file_part(value: str | None) -> str:
    return _UNSAFE_RE.sub("_", str(value or ""))[:80]


def estimation_file_name(session_id: str | None, today: date | None = None) -> str:
    day = (today or date.today()).isoformat()
    return f"estimation_{safe_file_part(session_id)}_{day}.xlsx"


def build_estimation_frame(
    records: Sequence[ResultRecord],
    session_id: str | None = None,
    departments: Sequence[Department] = DEFAULT_DEPARTMENTS,
) -> pd.DataFrame:
    rows = []
    for r in records:
        row: dict[str, object] = {
            "sessionId": (session_id or "").strip(),
            "featureIndex": r.feature_index,
            "batch": r.batch,
            "featureName": r.feature_name,
            "confidence": r.confidence,
            "userRemark": r.user_remark,
            "complexity": r.complexity,
            "techRemarks": r.tech_remarks,
        }
        for d in departments:
            hours = r.range_for(d.tag)
            row[f"{d.tag}_min"] = hours.min if hours else None
            row[f"{d.tag}_mostLikely"] = hours.most_likely if hours else None
            row[f"{d.tag}_max"] = hours.max if hours else None
        rows.append(row)
    return pd.DataFrame(rows)


def export_estimations(
    records: Sequence[ResultRecord],
    session_id: str | None = None,
    departments: Sequence[Department] = DEFAULT_DEPARTMENTS,
    today: date | None = None,
) -> tuple[bytes, str]:
    """Return (xlsx bytes, suggested file name) for the flat export."""
    if not records:
        raise NoEstimatesProvided("no results to export")
    df = build_estimation_frame(records, session_id, departments)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=ESTIMATIONS_SHEET, index=False)
    return buffer.getvalue(), estimation_file_name(session_id, today)
