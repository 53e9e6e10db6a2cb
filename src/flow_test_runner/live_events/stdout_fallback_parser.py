"""Best-effort step results from raw engine stdout."""

from __future__ import annotations

from collections.abc import Callable

from flow_test_runner.result_events.result_models import (
    DispatchSummary,
    TestResult,
    TestStatus,
    first_label,
)

from .event_messages import decode_stdout_record


def parse_stdout_results(
    output: str,
    *,
    fallback_suite: str | None,
    step_filter: str | None,
    publish: Callable[[TestResult], None],
) -> DispatchSummary:
    """Publish a result for each JSON `test` record found in `output`."""
    dispatched = False
    had_failures = False
    for line in output.splitlines():
        record = decode_stdout_record(line)
        if record is None:
            continue
        if step_filter and record.name != step_filter:
            continue
        status = TestStatus.PASSED if record.passed else TestStatus.FAILED
        publish(
            TestResult(
                suite=first_label(record.suite, fallback_suite, record.suite_name),
                step=record.name,
                status=status,
                error=record.error,
                duration=record.duration,
            )
        )
        dispatched = True
        had_failures = had_failures or status is TestStatus.FAILED
    return DispatchSummary(dispatched=dispatched, had_failures=had_failures)
