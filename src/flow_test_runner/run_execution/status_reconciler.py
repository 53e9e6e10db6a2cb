"""Decides whether an engine run passed."""

from __future__ import annotations

from flow_test_runner.report_aggregation.report_aggregator import report_signals_failure
from flow_test_runner.report_aggregation.report_models import AggregatedReport


def reconcile_exit(exit_code: int, had_failures: bool, report: AggregatedReport | None) -> bool:
    """Return True when the run counts as a success.

    Exit code 0 always passes. A non-zero exit only fails when a parsed step
    failed or the aggregated report shows failures.
    """
    if exit_code == 0:
        return True
    return not (had_failures or report_signals_failure(report))
