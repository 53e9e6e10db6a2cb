"""Suite definition entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class StepDefinition:
    """One step of a suite as declared in the suite file."""

    name: str
    step_id: str | None = None
    request: Mapping[str, Any] | None = None
    call: Mapping[str, Any] | None = None
    inputs: tuple[Any, ...] = ()

    def matches(self, step_filter: str) -> bool:
        """Return True when the filter names this step by id or by name."""
        return step_filter in {self.step_id, self.name}


@dataclass(frozen=True)
class SuiteDefinition:
    """Read-only snapshot of a suite file."""

    suite_id: str
    file_path: Path
    steps: tuple[StepDefinition, ...]

    @property
    def file_name(self) -> str:
        return self.file_path.name
