"""Live event reader tests."""

from __future__ import annotations

import json
from pathlib import Path

from flow_test_runner.live_events import FileEventSource, read_live_events
from flow_test_runner.result_events import DispatchSummary, TestResult, TestStatus


def _event(**payload) -> str:
    return json.dumps({"type": "step_completed", "payload": payload})


def _source_with(tmp_path: Path, *lines: str) -> FileEventSource:
    source = FileEventSource.for_run(tmp_path)
    source.prepare()
    source.path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return source


def test_for_run_creates_unique_empty_files_under_state_directory(tmp_path: Path) -> None:
    first = FileEventSource.for_run(tmp_path)
    second = FileEventSource.for_run(tmp_path)
    first.prepare()

    assert first.path != second.path
    assert first.path.parent == tmp_path / ".flow-test-runner" / "live-events"
    assert first.path.name.startswith("run-")
    assert first.path.suffix == ".jsonl"
    assert first.read_text() == ""
    assert first.engine_arguments() == ("--live-events", str(first.path))


def test_dispatches_events_in_file_order_and_discards_file(tmp_path: Path) -> None:
    source = _source_with(
        tmp_path,
        _event(step_name="Login", suite_name="Auth", status="success", duration_ms=10),
        "garbage line",
        json.dumps({"type": "progress", "payload": {}}),
        _event(step_name="Logout", status="failure", error="timeout"),
    )
    published: list[TestResult] = []

    summary = read_live_events(
        source, fallback_suite="auth.yaml", step_filter=None, publish=published.append
    )

    assert summary == DispatchSummary(dispatched=True, had_failures=True)
    assert published == [
        TestResult(suite="Auth", step="Login", status=TestStatus.PASSED, duration=10),
        TestResult(suite="auth.yaml", step="Logout", status=TestStatus.FAILED, error="timeout"),
    ]
    assert not source.path.exists()


def test_suite_label_falls_back_to_node_id_then_unknown(tmp_path: Path) -> None:
    source = _source_with(
        tmp_path,
        _event(step_name="A", node_id="node-1", status="success"),
        _event(step_name="B", status="success"),
    )
    published: list[TestResult] = []

    read_live_events(source, fallback_suite=None, step_filter=None, publish=published.append)

    assert [result.suite for result in published] == ["node-1", "unknown-suite"]


def test_failed_assertion_takes_precedence_over_error(tmp_path: Path) -> None:
    source = _source_with(
        tmp_path,
        _event(step_name="A", status="failure", failed_assertion="body.ok", error="x"),
    )
    published: list[TestResult] = []

    read_live_events(source, fallback_suite="s", step_filter=None, publish=published.append)

    assert published[0].error == "body.ok"


def test_step_filter_skips_other_steps(tmp_path: Path) -> None:
    source = _source_with(
        tmp_path,
        _event(step_name="Login", status="failure"),
        _event(step_name="Search", status="success"),
    )
    published: list[TestResult] = []

    summary = read_live_events(
        source, fallback_suite="s", step_filter="Search", publish=published.append
    )

    assert [result.step for result in published] == ["Search"]
    assert summary.had_failures is False


def test_missing_or_empty_file_dispatches_nothing(tmp_path: Path) -> None:
    empty = FileEventSource.for_run(tmp_path)
    empty.prepare()
    missing = FileEventSource(tmp_path / "never-created.jsonl")
    published: list[TestResult] = []

    for source in (empty, missing):
        summary = read_live_events(
            source, fallback_suite="s", step_filter=None, publish=published.append
        )
        assert summary == DispatchSummary()

    assert published == []
    assert not empty.path.exists()
