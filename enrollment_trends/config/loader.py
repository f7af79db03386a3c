from __future__ import annotations

import json
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    AGGREGATE_ABSENT_AS_ZERO,
    DisplayConfig,
    OutputConfig,
    PipelineConfig,
    SourceConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/pipeline.yml)
- Validate against config_schema.json (unknown keys rejected)
- Apply defaults for everything optional
- Apply environment overrides (ENROLLMENT_SOURCE / ENROLLMENT_OUTPUT_DIR)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/pipeline.yml")

ENV_SOURCE = "ENROLLMENT_SOURCE"
ENV_OUTPUT_DIR = "ENROLLMENT_OUTPUT_DIR"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or the data violates it
            (missing required keys, wrong types, unknown keys).
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


def _build_config(data: dict[str, Any]) -> PipelineConfig:
    src_raw = data.get("source") or {}
    source = SourceConfig(**{k: v for k, v in src_raw.items() if k != "null_tokens"})
    if "null_tokens" in src_raw:
        source = replace(source, null_tokens=tuple(src_raw["null_tokens"]))

    agg_raw = data.get("aggregate") or {}
    display = DisplayConfig(**(data.get("display") or {}))
    if display.y_min >= display.y_max:
        raise ConfigError(f"display.y_min ({display.y_min}) must be below y_max ({display.y_max})")

    return PipelineConfig(
        universities=tuple(data["universities"]),
        source=source,
        aggregate_label=agg_raw.get("label", "Uni Total"),
        aggregate_policy=agg_raw.get("policy", AGGREGATE_ABSENT_AS_ZERO),
        display=display,
        output=OutputConfig(**(data.get("output") or {})),
    )


def apply_env_overrides(cfg: PipelineConfig, environ: dict[str, str] | None = None) -> PipelineConfig:
    """Environment variables (.env 読み込み後) take precedence over the YAML values."""
    env = os.environ if environ is None else environ
    location = env.get(ENV_SOURCE)
    if location:
        cfg = replace(cfg, source=replace(cfg.source, location=location))
    out_dir = env.get(ENV_OUTPUT_DIR)
    if out_dir:
        cfg = replace(cfg, output=replace(cfg.output, directory=out_dir))
    return cfg


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> PipelineConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)
    return _build_config(data)
