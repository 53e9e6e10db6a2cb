"""Single-slot memory of the last execution, used by retest."""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from flow_test_runner.configuration.runtime_settings import (
    RunnerConfiguration,
    configuration_from_mapping,
    configuration_to_mapping,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionState:
    """Snapshot of the last run attempt that got past input preparation."""

    suite_path: Path
    step_name: str | None
    step_id: str | None
    configuration: RunnerConfiguration
    user_inputs: Mapping[str, str] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


class ExecutionStateCache:
    """Holds one ExecutionState, optionally mirrored to a JSON file."""

    def __init__(self, storage_path: Path | str | None = None) -> None:
        self._storage_path = Path(storage_path) if storage_path else None
        self._lock = threading.Lock()
        self._state: ExecutionState | None = None
        if self._storage_path is not None:
            self._state = _read_state_file(self._storage_path)

    def record(self, state: ExecutionState) -> None:
        with self._lock:
            self._state = state
            if self._storage_path is not None:
                self._storage_path.parent.mkdir(parents=True, exist_ok=True)
                self._storage_path.write_text(
                    json.dumps(_state_to_mapping(state), indent=2), encoding="utf-8"
                )
                # recorded inputs may include masked values
                os.chmod(self._storage_path, 0o600)

    def latest(self) -> ExecutionState | None:
        with self._lock:
            return self._state

    def clear(self) -> None:
        with self._lock:
            self._state = None
            if self._storage_path is not None:
                self._storage_path.unlink(missing_ok=True)


def _state_to_mapping(state: ExecutionState) -> dict[str, Any]:
    return {
        "suite_path": str(state.suite_path),
        "step_name": state.step_name,
        "step_id": state.step_id,
        "configuration": configuration_to_mapping(state.configuration),
        "user_inputs": dict(state.user_inputs),
        "timestamp": state.timestamp,
    }


def _read_state_file(path: Path) -> ExecutionState | None:
    if not path.exists():
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return ExecutionState(
            suite_path=Path(payload["suite_path"]),
            step_name=payload.get("step_name"),
            step_id=payload.get("step_id"),
            configuration=configuration_from_mapping(payload.get("configuration") or {}),
            user_inputs={
                str(key): str(value) for key, value in (payload.get("user_inputs") or {}).items()
            },
            timestamp=float(payload.get("timestamp", 0.0)),
        )
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as exc:
        _LOGGER.warning("Ignoring unreadable execution state %s: %s", path, exc)
        return None
