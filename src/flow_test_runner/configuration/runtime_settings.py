"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

OUTPUT_FORMATS: tuple[str, ...] = ("json", "html", "both")


@dataclass(frozen=True)
class HtmlReportSettings:
    """HTML report layout passed through to the engine."""

    output_subdir: str = "html"
    per_suite: bool = True
    aggregate: bool = True


@dataclass(frozen=True)
class ReportingSettings:
    """Where the engine writes its report artifacts."""

    output_dir: str | None = "results"
    html: HtmlReportSettings = field(default_factory=HtmlReportSettings)


@dataclass(frozen=True)
class RunnerConfiguration:  # pylint: disable=too-many-instance-attributes
    """Resolved settings for launching the test engine."""

    command: str = "flow-test-engine"
    output_format: str = "both"
    timeout_ms: int = 30000
    retry_count: int = 0
    working_directory: Path | None = None
    config_file: Path | None = None
    reporting: ReportingSettings = field(default_factory=ReportingSettings)

    @property
    def timeout_seconds(self) -> float | None:
        """Wall-clock timeout in seconds, or None when disabled."""
        if self.timeout_ms <= 0:
            return None
        return self.timeout_ms / 1000.0

    @property
    def wants_html_output(self) -> bool:
        return self.output_format in {"html", "both"}


def configuration_to_mapping(configuration: RunnerConfiguration) -> dict[str, Any]:
    """Serialise a configuration into JSON-compatible primitives."""
    payload = asdict(configuration)
    for key in ("working_directory", "config_file"):
        value = payload[key]
        payload[key] = str(value) if value is not None else None
    return payload


def configuration_from_mapping(payload: Mapping[str, Any]) -> RunnerConfiguration:
    """Rebuild a configuration previously produced by `configuration_to_mapping`."""
    reporting_payload = payload.get("reporting") or {}
    html_payload = reporting_payload.get("html") or {}
    working_directory = payload.get("working_directory")
    config_file = payload.get("config_file")
    return RunnerConfiguration(
        command=str(payload.get("command", "flow-test-engine")),
        output_format=str(payload.get("output_format", "both")),
        timeout_ms=int(payload.get("timeout_ms", 30000)),
        retry_count=int(payload.get("retry_count", 0)),
        working_directory=Path(working_directory) if working_directory else None,
        config_file=Path(config_file) if config_file else None,
        reporting=ReportingSettings(
            output_dir=reporting_payload.get("output_dir"),
            html=HtmlReportSettings(
                output_subdir=str(html_payload.get("output_subdir", "html")),
                per_suite=bool(html_payload.get("per_suite", True)),
                aggregate=bool(html_payload.get("aggregate", True)),
            ),
        ),
    )
