from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pluggable_runner.config.models import RunnerConfig


# ConfigError is raised for invalid configuration (fail fast).
class ConfigError(ValueError):
    pass


def load_yaml_config(path: Path) -> dict[str, Any]:
    # Raw YAML mapping; an empty file is an empty mapping.
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def parse_config(raw: dict[str, Any]) -> RunnerConfig:
    try:
        return RunnerConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_config(path: Path) -> RunnerConfig:
    return parse_config(load_yaml_config(path))
