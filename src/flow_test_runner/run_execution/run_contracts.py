"""Run execution entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from flow_test_runner.configuration.runtime_settings import RunnerConfiguration


class ExecutionError(Exception):
    """Base class for errors raised while executing a run."""


class EngineSpawnError(ExecutionError):
    """Raised when the engine process cannot be started."""


class ExecutionVerdict(str, Enum):
    """Final decision for one execution request."""

    PASSED = "passed"
    FAILED = "failed"
    ALREADY_RUNNING = "already_running"


@dataclass(frozen=True)
class ExecutionRequest:
    """Input contract for launching the engine once."""

    suite_path: Path | None
    step_name: str | None
    step_id: str | None
    configuration: RunnerConfiguration
    submissions: tuple[str, ...] = ()
    user_inputs: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutionOutcome:
    """Output contract for one execution request."""

    process_key: str
    verdict: ExecutionVerdict
    exit_code: int | None = None
    message: str = ""
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.verdict is not ExecutionVerdict.FAILED
