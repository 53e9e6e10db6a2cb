"""Turns the live events channel into step results after the engine exits."""

from __future__ import annotations

import logging
from collections.abc import Callable

from flow_test_runner.result_events.result_models import (
    DispatchSummary,
    TestResult,
    TestStatus,
    first_label,
)

from .event_messages import decode_live_event
from .event_source import LiveEventSource

_LOGGER = logging.getLogger(__name__)


def read_live_events(
    source: LiveEventSource,
    *,
    fallback_suite: str | None,
    step_filter: str | None,
    publish: Callable[[TestResult], None],
) -> DispatchSummary:
    """Publish one result per `step_completed` line, in file order.

    The source is discarded afterwards whatever happens.
    """
    try:
        content = source.read_text()
        if content is None or not content.strip():
            return DispatchSummary()

        dispatched = False
        had_failures = False
        for line in content.splitlines():
            if not line.strip():
                continue
            event = decode_live_event(line)
            if event is None:
                _LOGGER.debug("Skipping live event line: %.120s", line)
                continue
            if step_filter and event.step_name != step_filter:
                continue
            status = TestStatus.PASSED if event.succeeded else TestStatus.FAILED
            publish(
                TestResult(
                    suite=first_label(event.suite_name, fallback_suite, event.node_id),
                    step=event.step_name,
                    status=status,
                    error=event.failure_detail if status is TestStatus.FAILED else None,
                    duration=event.duration_ms,
                )
            )
            dispatched = True
            had_failures = had_failures or status is TestStatus.FAILED
        return DispatchSummary(dispatched=dispatched, had_failures=had_failures)
    finally:
        source.discard()
