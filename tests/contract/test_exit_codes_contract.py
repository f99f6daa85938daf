from __future__ import annotations

import json
import re
from pathlib import Path

from sheet_annotator.cli import main as cli_main
from sheet_annotator.logging.init import reset_logging

"""Exit code + SUMMARY / error log contract tests."""

SUMMARY_RE = re.compile(
    r"^SUMMARY file=\S+ sheet=\S+ rows=\d+ matched=\d+ by_index=\d+ by_name=\d+ "
    r"by_position=\d+ unmatched=\d+ elapsed_sec=[0-9.]+$",
    re.MULTILINE,
)
ERROR_LOG_KEYS = {"timestamp", "file", "sheet", "row", "error_type", "message"}


def _write_results(path: Path, items: list[dict]) -> Path:
    path.write_text(json.dumps(items), encoding="utf-8")
    return path


def test_exit_code_all_matched(temp_workdir: Path, make_workbook, capsys):
    reset_logging()
    wb = temp_workdir / "a.xlsx"
    wb.write_bytes(make_workbook({"S": [["Feature"], ["A"], ["B"]]}))
    res = _write_results(temp_workdir / "r.json", [{"featureName": "A"}, {"featureName": "B"}])
    assert cli_main(["annotate", str(wb), str(res)]) == 0
    out = capsys.readouterr().out
    assert SUMMARY_RE.search(out)
    assert not list((temp_workdir / "logs").glob("errors-*.log"))


def test_exit_code_partial(temp_workdir: Path, make_workbook, capsys):
    reset_logging()
    wb = temp_workdir / "a.xlsx"
    wb.write_bytes(make_workbook({"S": [["Sr No"], [1], [2], [3]]}))
    res = _write_results(temp_workdir / "r.json", [{"featureIndex": 1}])
    assert cli_main(["annotate", str(wb), str(res)]) == 2
    assert SUMMARY_RE.search(capsys.readouterr().out)
    [log] = list((temp_workdir / "logs").glob("errors-*.log"))
    lines = log.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw)) == ERROR_LOG_KEYS


def test_exit_code_fatal_missing_key_column(temp_workdir: Path, make_workbook, capsys):
    reset_logging()
    wb = temp_workdir / "a.xlsx"
    wb.write_bytes(make_workbook({"S": [["Foo", "Bar"], [1, 2]]}))
    res = _write_results(temp_workdir / "r.json", [{"featureIndex": 1}])
    assert cli_main(["annotate", str(wb), str(res)]) == 1
    out = capsys.readouterr().out
    assert "ERROR annotate: could not find" in out
    assert not SUMMARY_RE.search(out)
    assert not (temp_workdir / "a_with_estimates.xlsx").exists()
    [log] = list((temp_workdir / "logs").glob("errors-*.log"))
    entry = json.loads(log.read_text(encoding="utf-8"))
    assert entry["error_type"] == "MISSING_KEY_COLUMN"
    assert entry["sheet"] == "<FILE_LEVEL>"
    assert set(entry) == ERROR_LOG_KEYS


def test_exit_code_fatal_bad_results(temp_workdir: Path, make_workbook, capsys):
    reset_logging()
    wb = temp_workdir / "a.xlsx"
    wb.write_bytes(make_workbook({"S": [["Feature"], ["A"]]}))
    res = temp_workdir / "r.yaml"
    res.write_text("x", encoding="utf-8")
    assert cli_main(["annotate", str(wb), str(res)]) == 1
    assert "ERROR annotate: unsupported results file type" in capsys.readouterr().out
