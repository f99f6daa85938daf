from __future__ import annotations

from pathlib import Path

import pytest

from sheet_annotator.config import AnnotatorConfig, ConfigError, load_config
from sheet_annotator.models import DEFAULT_DEPARTMENTS, Department


def test_defaults_when_no_config(temp_workdir: Path):
    cfg = load_config()
    assert cfg == AnnotatorConfig()
    assert cfg.departments == DEFAULT_DEPARTMENTS
    assert cfg.output_suffix == "_with_estimates"
    assert cfg.source is None


def test_load_default_location(write_config: Path):
    cfg = load_config()
    assert cfg.departments == (Department("frontend", "Frontend"), Department("backend", "Backend"))
    assert cfg.output_suffix == "_estimated"
    assert cfg.error_log_dir == "./logs"
    assert cfg.source == Path("config/annotate.yml")


def test_partial_config_keeps_defaults(temp_workdir: Path):
    p = temp_workdir / "only_suffix.yml"
    p.write_text("output_suffix: _ai\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.output_suffix == "_ai"
    assert cfg.departments == DEFAULT_DEPARTMENTS


def test_empty_file_is_defaults(temp_workdir: Path):
    p = temp_workdir / "empty.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p).departments == DEFAULT_DEPARTMENTS


def test_explicit_missing_path(temp_workdir: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(temp_workdir / "nope.yml")


@pytest.mark.parametrize(
    "text,match",
    [
        ("unknown_key: 1\n", "validation failed"),
        ("departments:\n  - tag: frontend\n", "validation failed"),
        ("departments: []\n", "validation failed"),
        ("departments:\n  - tag: 'bad tag'\n    label: X\n", "validation failed"),
        ("- just\n- a list\n", "mapping"),
        ("a: [unclosed\n", "invalid yaml"),
        (
            "departments:\n  - tag: qa\n    label: QA\n  - tag: qa\n    label: QA2\n",
            "duplicate department tags",
        ),
    ],
)
def test_invalid_configs(temp_workdir: Path, text: str, match: str):
    p = temp_workdir / "bad.yml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match=match):
        load_config(p)
