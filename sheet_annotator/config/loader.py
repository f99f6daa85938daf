from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..excel.writer import OUTPUT_SUFFIX
from ..models.department import DEFAULT_DEPARTMENTS, Department

"""Config loader.

Responsibilities:
- Load YAML config (default ``config/annotate.yml``)
- Validate against the bundled JSON schema (unknown keys rejected)
- Apply defaults for anything not configured
"""

SCHEMA_PATH = Path(__file__).with_name("annotate_schema.json")
DEFAULT_CONFIG_PATH = Path("config/annotate.yml")
DEFAULT_ERROR_LOG_DIR = "./logs"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AnnotatorConfig:
    departments: tuple[Department, ...] = DEFAULT_DEPARTMENTS
    output_suffix: str = OUTPUT_SUFFIX
    error_log_dir: str = DEFAULT_ERROR_LOG_DIR
    source: Path | None = field(default=None, compare=False)  # None = defaults only


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing / invalid or the config
            data fails validation (wrong types, unknown keys, ...).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> AnnotatorConfig:
    """Load the annotator config.

    An explicitly given path must exist; when ``path`` is None the default
    location is used if present, otherwise built-in defaults apply.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return AnnotatorConfig()
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    raw_departments = data.get("departments")
    departments = (
        tuple(Department(tag=d["tag"], label=d["label"]) for d in raw_departments)
        if raw_departments
        else DEFAULT_DEPARTMENTS
    )
    tags = [d.tag for d in departments]
    if len(set(tags)) != len(tags):
        raise ConfigError(f"duplicate department tags: {tags}")

    return AnnotatorConfig(
        departments=departments,
        output_suffix=data.get("output_suffix", OUTPUT_SUFFIX),
        error_log_dir=data.get("error_log_dir", DEFAULT_ERROR_LOG_DIR),
        source=path,
    )
