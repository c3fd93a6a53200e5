"""
config.py

Typed configuration loading and validation for the hit-object converter.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- A missing config file is not an error: conversion runs on defaults
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If HITCONVERT_CONFIG_PATH is set, that file is used (and must exist).
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./hitconvert_config.json (current working directory)
  2) <user config dir>/HitConvert/hitconvert_config.json
  3) <user config dir>/HitConvert/config.json
- If none exists, defaults are used.

Example config file (hitconvert_config.json)
{
  "converter": {
    "playfield_width": 512,
    "playfield_height": 384,
    "legacy_tick_version_cutoff": 8
  },
  "logging": {
    "level": "INFO",
    "log_to_file": false,
    "file_name": "hitconvert.log"
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

import paths

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class ConverterConfig(BaseModel):
    playfield_width: float = Field(default=512.0, gt=0, description="Playfield width in osu!pixels.")
    playfield_height: float = Field(default=384.0, gt=0, description="Playfield height in osu!pixels.")
    legacy_tick_version_cutoff: int = Field(
        default=8,
        ge=0,
        description="Beatmaps with a format version below this cancel the speed multiplier when spacing ticks.",
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Minimum loguru level for console and file sinks.")
    log_to_file: bool = Field(default=False, description="Also write logs to a rotating file in the user log dir.")
    file_name: str = Field(default="hitconvert.log", description="Log file name inside the user log dir.")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError("level must be one of: " + ", ".join(sorted(_LOG_LEVELS)))
        return normalized

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, value: str) -> str:
        trimmed = (value or "").strip()
        if not trimmed:
            raise ValueError("file_name must be a non-empty string")
        return trimmed


class AppConfig(BaseModel):
    converter: ConverterConfig = Field(default_factory=ConverterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("HITCONVERT_CONFIG_PATH", "").strip()
    if explicit_path_text:
        explicit_path = Path(explicit_path_text)
        if not explicit_path.exists():
            raise FileNotFoundError(f"HITCONVERT_CONFIG_PATH points to a missing file: {explicit_path}")
        return explicit_path

    for candidate_path in paths.config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - HITCONVERT_LOG_LEVEL
    - HITCONVERT_LOG_TO_FILE
    - HITCONVERT_PLAYFIELD_WIDTH
    - HITCONVERT_PLAYFIELD_HEIGHT
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            return section
        section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    converter_section = ensure_nested(updated_config, "converter")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            return

    def override_bool(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip().lower()
        if not value_text:
            return
        truthy = {"1", "true", "yes", "on"}
        falsy = {"0", "false", "no", "off"}
        if value_text in truthy:
            target_dict[key_name] = True
        elif value_text in falsy:
            target_dict[key_name] = False

    override_string("HITCONVERT_LOG_LEVEL", logging_section, "level")
    override_bool("HITCONVERT_LOG_TO_FILE", logging_section, "log_to_file")

    override_float("HITCONVERT_PLAYFIELD_WIDTH", converter_section, "playfield_width")
    override_float("HITCONVERT_PLAYFIELD_HEIGHT", converter_section, "playfield_height")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict = _read_json_file_utf8(resolved_path) if resolved_path is not None else {}
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        source = str(resolved_path) if resolved_path is not None else "defaults and environment"
        raise ValueError(f"Config validation failed for {source}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
