from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..excel.columns import COLUMN_ALIASES, merge_aliases
from ..services.normalization import (
    REFERENCE_BOUNDS,
    HeartValueBounds,
    NormalizationMode,
)

"""Config loader.

Responsibilities:
- Load YAML (default ``config/heart.yml``)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults
- ``HEART_SOURCE_FILE`` environment variable overrides ``source_file``
  (the CLI loads ``.env`` before calling load_config)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/heart.yml")
SOURCE_FILE_ENV = "HEART_SOURCE_FILE"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class HeartConfig:
    source_file: Path
    sheet_name: str | None = None  # None -> first sheet
    header_row: int = 1  # 1-based spreadsheet row holding the headers
    aggregate_country: str = "WORLD"
    percent_scale: str = "fraction"  # how bare percent numbers are stored
    normalization_mode: NormalizationMode = NormalizationMode.DATASET
    reference_bounds: HeartValueBounds = REFERENCE_BOUNDS
    null_sentinels: frozenset[str] = frozenset()
    column_aliases: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(COLUMN_ALIASES))


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data fails validation
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


def build_config(data: dict[str, Any], base_dir: Path | None = None) -> HeartConfig:
    """Validated mapping -> HeartConfig. Relative source paths resolve against base_dir."""
    _validate_config_schema(data)

    source = os.getenv(SOURCE_FILE_ENV) or data["source_file"]
    source_path = Path(source)
    if base_dir is not None and not source_path.is_absolute():
        source_path = base_dir / source_path

    norm = data.get("normalization") or {}
    mode = NormalizationMode(norm.get("mode", NormalizationMode.DATASET.value))
    lo, hi = norm.get("reference_bounds", [REFERENCE_BOUNDS.lo, REFERENCE_BOUNDS.hi])
    if lo > hi:
        raise ConfigError(f"normalization.reference_bounds must be ascending: {[lo, hi]}")

    try:
        aliases = merge_aliases(data.get("column_aliases"))
    except KeyError as e:
        raise ConfigError(str(e.args[0])) from e

    return HeartConfig(
        source_file=source_path,
        sheet_name=data.get("sheet_name"),
        header_row=data.get("header_row", 1),
        aggregate_country=data.get("aggregate_country", "WORLD"),
        percent_scale=data.get("percent_scale", "fraction"),
        normalization_mode=mode,
        reference_bounds=HeartValueBounds(lo=float(lo), hi=float(hi), mode=NormalizationMode.REFERENCE),
        null_sentinels=frozenset(s.strip().upper() for s in data.get("null_sentinels", [])),
        column_aliases=aliases,
    )


def load_config(path: Path) -> HeartConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return build_config(data)
