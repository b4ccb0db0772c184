"""Settings loading and validation.

This module provides a minimal, type-safe configuration loader for the project.

Design principles:
- Fail-fast: missing required fields raise a readable error that includes field path
- No side effects: this module only parses/validates configuration; no network/IO init
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_FILENAME = "__buildInfo.txt"
BASE_URL_ENV_VAR = "BUILD_INFO_BASE_URL"
SUPPORTED_SOURCES = ("file", "http", "fixed")


class SettingsError(ValueError):
    """Raised when settings are missing or invalid."""


@dataclass(frozen=True)
class BuildInfoSettings:
    source: str
    filename: str
    base_dir: str
    base_url: str | None
    timeout: float | None


@dataclass(frozen=True)
class FixedSettings:
    id: str
    bundle_version: str
    distribution: str | None
    include_start_time: bool


@dataclass(frozen=True)
class ObservabilitySettings:
    log_level: str


@dataclass(frozen=True)
class Settings:
    build_info: BuildInfoSettings
    fixed: FixedSettings
    observability: ObservabilitySettings


def _require_section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None or not isinstance(value, Mapping):
        raise SettingsError(f"Missing required section: {key}")
    return value


def _optional_section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SettingsError(f"Invalid section type: {key}")
    return value


def _require(raw: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in raw:
        raise SettingsError(f"Missing required field: {path}")
    return raw[key]


def _as_str(value: Any, path: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise SettingsError(f"Invalid value for {path}: expected non-empty string")
    return value


def _as_text(value: Any, path: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SettingsError(f"Invalid value for {path}: expected string")
    return value


def _as_optional_str(value: Any, path: str) -> str | None:
    if value is None:
        return None
    return _as_str(value, path)


def _as_bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise SettingsError(f"Invalid value for {path}: expected bool")
    return value


def _as_optional_float(value: Any, path: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"Invalid value for {path}: expected float")
    if value <= 0:
        raise SettingsError(f"Invalid value for {path}: expected positive number")
    return float(value)


def validate_settings(settings: Settings) -> None:
    """Validate required fields and basic invariants."""

    source = settings.build_info.source
    if source not in SUPPORTED_SOURCES:
        raise SettingsError(
            f"Invalid value for build_info.source: '{source}' "
            f"(expected one of: {', '.join(SUPPORTED_SOURCES)})"
        )
    if source == "http" and not (settings.build_info.base_url or os.environ.get(BASE_URL_ENV_VAR)):
        raise SettingsError(
            f"Missing required field: build_info.base_url (or environment variable {BASE_URL_ENV_VAR})"
        )


def load_settings(path: str | Path) -> Settings:
    """Load settings from a YAML file."""

    settings_path = Path(path)
    if not settings_path.exists():
        raise SettingsError(f"Settings file not found: {settings_path}")

    try:
        raw_obj = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in settings file: {settings_path}") from e

    if raw_obj is None or not isinstance(raw_obj, Mapping):
        raise SettingsError(f"Invalid settings root: expected mapping in {settings_path}")

    build_info_raw = _require_section(raw_obj, "build_info")
    fixed_raw = _optional_section(raw_obj, "fixed")
    observability_raw = _require_section(raw_obj, "observability")

    build_info = BuildInfoSettings(
        source=_as_str(
            _require(build_info_raw, "source", "build_info.source"),
            "build_info.source",
        ).strip().lower(),
        filename=_as_str(
            build_info_raw.get("filename", DEFAULT_FILENAME),
            "build_info.filename",
        ),
        base_dir=_as_str(build_info_raw.get("base_dir", "."), "build_info.base_dir"),
        base_url=_as_optional_str(build_info_raw.get("base_url"), "build_info.base_url"),
        timeout=_as_optional_float(build_info_raw.get("timeout"), "build_info.timeout"),
    )

    fixed = FixedSettings(
        id=_as_str(fixed_raw.get("id", "EDITOR"), "fixed.id"),
        bundle_version=_as_text(fixed_raw.get("bundle_version"), "fixed.bundle_version"),
        distribution=_as_optional_str(fixed_raw.get("distribution"), "fixed.distribution"),
        include_start_time=_as_bool(
            fixed_raw.get("include_start_time", True),
            "fixed.include_start_time",
        ),
    )

    observability = ObservabilitySettings(
        log_level=_as_str(
            _require(observability_raw, "log_level", "observability.log_level"),
            "observability.log_level",
        ),
    )

    settings = Settings(
        build_info=build_info,
        fixed=fixed,
        observability=observability,
    )

    validate_settings(settings)
    return settings
