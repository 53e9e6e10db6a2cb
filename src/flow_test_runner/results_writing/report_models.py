"""Results writing entities."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from flow_test_runner.result_events.result_bus import ResultBus
from flow_test_runner.result_events.result_models import SuiteResult, TestResult


@dataclass(frozen=True)
class RunMetadata:
    """Metadata rendered into the RunInfo sheet."""

    run_start: datetime
    workspace: Path
    output_path: Path
    command: str
    verdict: str
    exit_code: int | None
    process_key: str


class ResultCollector:
    """Gathers results published on a bus until it is closed."""

    def __init__(self, bus: ResultBus) -> None:
        self._lock = threading.Lock()
        self._test_results: list[TestResult] = []
        self._suite_results: list[SuiteResult] = []
        self._unsubscribers = [
            bus.test_results.subscribe(self._on_test_result),
            bus.suite_results.subscribe(self._on_suite_result),
        ]

    @property
    def test_results(self) -> tuple[TestResult, ...]:
        with self._lock:
            return tuple(self._test_results)

    @property
    def suite_results(self) -> tuple[SuiteResult, ...]:
        with self._lock:
            return tuple(self._suite_results)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _on_test_result(self, result: TestResult) -> None:
        with self._lock:
            self._test_results.append(result)

    def _on_suite_result(self, result: SuiteResult) -> None:
        with self._lock:
            self._suite_results.append(result)
