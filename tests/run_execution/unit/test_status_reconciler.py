"""Status reconciler tests."""

from __future__ import annotations

import pytest
from flow_test_runner.report_aggregation import AggregatedReport, SuiteReportEntry
from flow_test_runner.run_execution import reconcile_exit

_FAILED_REPORT = AggregatedReport(suites=(), failed_tests=2)
_CLEAN_REPORT = AggregatedReport(suites=(SuiteReportEntry(status="success"),), failed_tests=0)
_FAILED_SUITE_REPORT = AggregatedReport(
    suites=(SuiteReportEntry(status="failure", steps_failed=1),), failed_tests=0
)


@pytest.mark.parametrize(
    ("exit_code", "had_failures", "report", "expected"),
    [
        (0, False, None, True),
        (0, True, _FAILED_REPORT, True),
        (1, False, None, True),
        (1, False, _CLEAN_REPORT, True),
        (1, True, None, False),
        (1, False, _FAILED_REPORT, False),
        (1, False, _FAILED_SUITE_REPORT, False),
        (-9, False, None, True),
    ],
)
def test_non_zero_exit_fails_only_when_corroborated(
    exit_code: int, had_failures: bool, report: AggregatedReport | None, expected: bool
) -> None:
    assert reconcile_exit(exit_code, had_failures, report) is expected
