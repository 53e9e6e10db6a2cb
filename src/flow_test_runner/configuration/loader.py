"""Configuration loader service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any, Protocol

import yaml

from .runtime_settings import (
    OUTPUT_FORMATS,
    HtmlReportSettings,
    ReportingSettings,
    RunnerConfiguration,
)

DEFAULT_CONFIG_FILENAME = "flow-test.config.yml"

_LOGGER = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


class ConfigurationProvider(Protocol):
    """Supplies the resolved configuration for a workspace."""

    def get_config(self, workspace: Path) -> RunnerConfiguration: ...


class CachedConfigurationProvider:
    """Loads configuration once per workspace and reuses it afterwards."""

    def __init__(self, config_path: Path | str | None = None) -> None:
        self._config_path = Path(config_path) if config_path else None
        self._cache: dict[Path, RunnerConfiguration] = {}

    def get_config(self, workspace: Path) -> RunnerConfiguration:
        key = Path(workspace).resolve()
        cached = self._cache.get(key)
        if cached is None:
            cached = load_configuration(key, self._config_path)
            self._cache[key] = cached
        return cached

    def clear(self) -> None:
        self._cache.clear()


def load_configuration(
    workspace: Path | str, config_path: Path | str | None = None
) -> RunnerConfiguration:
    """Merge defaults with the workspace configuration file.

    Args:
      workspace: Directory the suites live in; used as the default working directory.
      config_path: Explicit configuration file. When omitted the workspace's
        `flow-test.config.yml` is used if it exists.

    Returns:
      The resolved configuration.

    Raises:
      ConfigurationError: If an explicit file is missing or any file is invalid.
    """
    workspace_path = Path(workspace).resolve()
    defaults = RunnerConfiguration(working_directory=workspace_path)
    path = _find_config_file(workspace_path, config_path)
    if path is None:
        return defaults

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file {path}: {exc}") from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    _LOGGER.debug("Loaded runner configuration from %s", path)
    return _merge_configuration(defaults, parsed, path)


def _find_config_file(workspace: Path, config_path: Path | str | None) -> Path | None:
    if config_path is not None:
        candidate = Path(config_path)
        if not candidate.is_absolute():
            candidate = (workspace / candidate).resolve()
        if not candidate.exists():
            raise ConfigurationError(f"Configuration file not found: {candidate}")
        return candidate
    default_path = workspace / DEFAULT_CONFIG_FILENAME
    return default_path if default_path.exists() else None


def _merge_configuration(
    defaults: RunnerConfiguration, section: Mapping[str, Any], path: Path
) -> RunnerConfiguration:
    changes: dict[str, Any] = {"config_file": path}

    command = _first_present(section, "command")
    if command is not None:
        changes["command"] = _require_non_empty_string(command, "command")

    output_format = _first_present(section, "outputFormat", "output_format")
    if output_format is not None:
        normalized = _require_non_empty_string(output_format, "outputFormat").lower()
        if normalized not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"outputFormat must be one of {', '.join(OUTPUT_FORMATS)}."
            )
        changes["output_format"] = normalized

    timeout = _first_present(section, "timeout", "timeout_ms")
    if timeout is not None:
        changes["timeout_ms"] = _require_positive_int(timeout, "timeout")

    retry_count = _first_present(section, "retryCount", "retry_count")
    if retry_count is not None:
        changes["retry_count"] = _require_non_negative_int(retry_count, "retryCount")

    working_directory = _first_present(section, "workingDirectory", "working_directory")
    if working_directory is not None:
        changes["working_directory"] = _resolve_path(
            path.parent, _require_non_empty_string(working_directory, "workingDirectory")
        )

    reporting = section.get("reporting")
    if reporting is not None:
        changes["reporting"] = _parse_reporting_section(reporting, defaults.reporting)

    return replace(defaults, **changes)


def _parse_reporting_section(value: Any, defaults: ReportingSettings) -> ReportingSettings:
    section = _require_mapping(value, "reporting")
    output_dir = defaults.output_dir
    output_dir_value = _first_present(section, "outputDir", "output_dir")
    if output_dir_value is not None:
        output_dir = _require_non_empty_string(output_dir_value, "reporting.output_dir")

    html = defaults.html
    html_value = section.get("html")
    if html_value is not None:
        html_section = _require_mapping(html_value, "reporting.html")
        subdir = _first_present(html_section, "outputSubdir", "output_subdir")
        per_suite = _first_present(html_section, "perSuite", "per_suite")
        aggregate = html_section.get("aggregate")
        html = HtmlReportSettings(
            output_subdir=(
                _require_non_empty_string(subdir, "reporting.html.output_subdir")
                if subdir is not None
                else html.output_subdir
            ),
            per_suite=(
                _require_bool(per_suite, "reporting.html.per_suite")
                if per_suite is not None
                else html.per_suite
            ),
            aggregate=(
                _require_bool(aggregate, "reporting.html.aggregate")
                if aggregate is not None
                else html.aggregate
            ),
        )
    return ReportingSettings(output_dir=output_dir, html=html)


def _first_present(section: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = section.get(key)
        if value is not None:
            return value
    return None


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value


def _require_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value < 0:
        raise ConfigurationError(f"{field_name} must not be negative.")
    return value
