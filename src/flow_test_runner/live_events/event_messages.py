"""Decoding of engine JSON lines into typed events."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

STEP_COMPLETED_EVENT = "step_completed"
STDOUT_TEST_RECORD = "test"


@dataclass(frozen=True)
class StepCompletedEvent:
    """A `step_completed` record from the live events file."""

    step_name: str
    status: str
    suite_name: str | None = None
    node_id: str | None = None
    duration_ms: float | None = None
    failed_assertion: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @property
    def failure_detail(self) -> str | None:
        return self.failed_assertion or self.error


@dataclass(frozen=True)
class StdoutTestRecord:
    """A `{"type": "test"}` record printed by the engine on stdout."""

    name: str
    status: str
    suite: str | None = None
    suite_name: str | None = None
    error: str | None = None
    duration: float | None = None

    @property
    def passed(self) -> bool:
        return self.status == "pass"


def decode_live_event(line: str) -> StepCompletedEvent | None:
    """Decode one live events line; None means "skip this line"."""
    document = _load_object(line)
    if document is None or document.get("type") != STEP_COMPLETED_EVENT:
        return None
    payload = document.get("payload")
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        return None
    return StepCompletedEvent(
        step_name=_optional_text(payload.get("step_name")) or "Unknown",
        status=str(payload.get("status", "")),
        suite_name=_optional_text(payload.get("suite_name")),
        node_id=_optional_text(payload.get("node_id")),
        duration_ms=_optional_number(payload.get("duration_ms")),
        failed_assertion=_optional_text(payload.get("failed_assertion")),
        error=_optional_text(payload.get("error")),
    )


def decode_stdout_record(line: str) -> StdoutTestRecord | None:
    """Decode one stdout line; None means "not a test record"."""
    document = _load_object(line)
    if document is None or document.get("type") != STDOUT_TEST_RECORD:
        return None
    return StdoutTestRecord(
        name=_optional_text(document.get("name")) or "Unknown",
        status=str(document.get("status", "")),
        suite=_optional_text(document.get("suite")),
        suite_name=_optional_text(document.get("suiteName")),
        error=_optional_text(document.get("error")),
        duration=_optional_number(document.get("duration")),
    )


def _load_object(line: str) -> Mapping[str, Any] | None:
    text = line.strip()
    if not text:
        return None
    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        return None
    return document if isinstance(document, Mapping) else None


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, (Mapping, list)):
        return None
    text = str(value)
    return text if text.strip() else None


def _optional_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value
