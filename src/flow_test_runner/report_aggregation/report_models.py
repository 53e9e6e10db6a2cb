"""Aggregated report entities."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

AGGREGATED_REPORT_FILENAME = "latest.json"
_FAILED_SUITE_STATUSES = frozenset({"failure", "failed"})


@dataclass(frozen=True)
class SuiteReportEntry:
    """One entry of the report's `suites_results` array."""

    suite_name: str | None = None
    node_id: str | None = None
    name: str | None = None
    status: str | None = None
    steps_failed: int = 0
    file_path: str | None = None

    @property
    def failed(self) -> bool:
        return (self.status or "").lower() in _FAILED_SUITE_STATUSES or self.steps_failed > 0


@dataclass(frozen=True)
class AggregatedReport:
    """Engine's consolidated post-run summary."""

    suites: tuple[SuiteReportEntry, ...]
    failed_tests: int | None
    source_path: Path | None = None


def parse_aggregated_report(
    document: Mapping[str, Any], source_path: Path | None = None
) -> AggregatedReport:
    """Build a report from decoded JSON, ignoring fields of unexpected types."""
    raw_suites = document.get("suites_results")
    suites: list[SuiteReportEntry] = []
    if isinstance(raw_suites, Sequence) and not isinstance(raw_suites, str):
        suites = [_parse_suite_entry(entry) for entry in raw_suites if isinstance(entry, Mapping)]
    return AggregatedReport(
        suites=tuple(suites),
        failed_tests=_optional_count(document.get("failed_tests")),
        source_path=source_path,
    )


def _parse_suite_entry(entry: Mapping[str, Any]) -> SuiteReportEntry:
    return SuiteReportEntry(
        suite_name=_optional_string(entry.get("suite_name")),
        node_id=_optional_string(entry.get("node_id")),
        name=_optional_string(entry.get("name")),
        status=_optional_string(entry.get("status")),
        steps_failed=_optional_count(entry.get("steps_failed")) or 0,
        file_path=_optional_string(entry.get("file_path")),
    )


def _optional_string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _optional_count(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)
