# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from collections.abc import Callable, Sequence
from io import BytesIO
from pathlib import Path
from typing import Any

import openpyxl
import pytest

from sheet_annotator.models import HoursRange, ResultRecord

WorkbookFactory = Callable[..., bytes]


def build_workbook(sheets: dict[str, Sequence[Sequence[Any]]]) -> bytes:
    """xlsx bytes with one sheet per entry; None cells are left unwritten."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def sheet_values(content: bytes, index: int = 0) -> list[tuple[Any, ...]]:
    wb = openpyxl.load_workbook(BytesIO(content))
    return [tuple(r) for r in wb.worksheets[index].iter_rows(values_only=True)]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("ANNOTATOR_CONFIG", raising=False)
        yield p


@pytest.fixture()
def make_workbook() -> WorkbookFactory:
    return lambda sheets: build_workbook(sheets)


@pytest.fixture()
def read_sheet() -> Callable[..., list[tuple[Any, ...]]]:
    return sheet_values


@pytest.fixture()
def scenario_records() -> list[ResultRecord]:
    return [
        ResultRecord(
            feature_index=1,
            feature_name="Login",
            confidence="High",
            complexity="Medium",
            ranges={"frontend": HoursRange(2, 4, 6), "backend": HoursRange(1, 2, 3)},
        ),
        ResultRecord(
            feature_index=2,
            feature_name="Logout",
            confidence="Low",
            ranges={"frontend": HoursRange(1, 2, 3)},
        ),
    ]


@pytest.fixture()
def scenario_workbook() -> bytes:
    # cover sheet first, feature table (after 2 blank rows) second
    return build_workbook({
        "Cover": [["Estimate request"], ["Acme"]],
        "Features": [
            [],
            [],
            ["Sr No", "Feature", "Notes"],
            [1, "Login", "-"],
            [2, "Logout", "-"],
        ],
    })


@pytest.fixture()
def sample_config_yaml() -> str:
    return """departments:
  - tag: frontend
    label: Frontend
  - tag: backend
    label: Backend
output_suffix: _estimated
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "annotate.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def status_payload() -> dict[str, Any]:
    return {
        "sessionId": "sess-1",
        "status": "COMPLETED",
        "progress": "done",
        "result": [
            {
                "featureIndex": 1,
                "featureName": "Login",
                "confidence": "High",
                "complexity": "Medium",
                "frontendHoursRange": {"min": 2, "mostLikely": 4, "max": 6},
                "backendHours": 3,
            },
            {
                "featureIndex": 2,
                "featureName": "Logout",
                "batchConfidenceDelta": "Low",
                "frontendHoursRange": {"min": 1, "mostLikely": 2, "max": 3},
            },
        ],
    }


@pytest.fixture()
def write_status(temp_workdir: Path, status_payload: dict[str, Any]) -> Path:
    path = temp_workdir / "data" / "status.json"
    path.write_text(json.dumps(status_payload), encoding="utf-8")
    return path
