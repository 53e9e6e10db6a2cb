"""Locates and interprets the engine's aggregated report artifact."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path, PurePath

from flow_test_runner.configuration.runtime_settings import RunnerConfiguration
from flow_test_runner.result_events.result_models import SuiteResult, TestStatus, first_label

from .report_models import AGGREGATED_REPORT_FILENAME, AggregatedReport, parse_aggregated_report

_LOGGER = logging.getLogger(__name__)


def report_candidate_directories(
    configuration: RunnerConfiguration, cwd: Path | str
) -> tuple[Path, ...]:
    """Directories searched for the report, most specific first, without duplicates."""
    cwd_path = Path(cwd)
    working_dir = configuration.working_directory or cwd_path
    candidates: list[Path] = []

    output_dir = configuration.reporting.output_dir
    if output_dir:
        reporting_dir = Path(output_dir)
        if not reporting_dir.is_absolute():
            reporting_dir = working_dir / reporting_dir
        candidates.append(reporting_dir)
    candidates.append(working_dir / "results")
    candidates.append(cwd_path / "results")

    unique: list[Path] = []
    for candidate in candidates:
        normalized = candidate.resolve()
        if normalized not in unique:
            unique.append(normalized)
    return tuple(unique)


def load_aggregated_report(
    configuration: RunnerConfiguration, cwd: Path | str
) -> AggregatedReport | None:
    """Return the first readable aggregated report, or None when there is none."""
    for directory in report_candidate_directories(configuration, cwd):
        report_path = directory / AGGREGATED_REPORT_FILENAME
        if not report_path.is_file():
            continue
        try:
            document = json.loads(report_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            _LOGGER.warning("Failed to parse aggregated report %s: %s", report_path, exc)
            continue
        if not isinstance(document, Mapping):
            _LOGGER.warning("Ignoring aggregated report %s: root is not an object", report_path)
            continue
        return parse_aggregated_report(document, source_path=report_path)
    return None


def suite_results_from_report(
    report: AggregatedReport, fallback_suite: str | None
) -> tuple[SuiteResult, ...]:
    """Derive one suite result per report entry."""
    if not report.suites:
        if not fallback_suite:
            return ()
        failed = report.failed_tests is not None and report.failed_tests > 0
        return (
            SuiteResult(
                suite=fallback_suite,
                status=TestStatus.FAILED if failed else TestStatus.PASSED,
            ),
        )
    return tuple(
        SuiteResult(
            suite=first_label(
                entry.suite_name,
                entry.node_id,
                entry.name,
                fallback_suite,
                PurePath(entry.file_path).name if entry.file_path else None,
            ),
            status=TestStatus.FAILED if entry.failed else TestStatus.PASSED,
            file_path=entry.file_path,
        )
        for entry in report.suites
    )


def report_signals_failure(report: AggregatedReport | None) -> bool:
    """True when the report shows failed tests or any failing suite."""
    if report is None:
        return False
    return (report.failed_tests or 0) > 0 or any(entry.failed for entry in report.suites)
