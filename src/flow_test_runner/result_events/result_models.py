"""Result event entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

UNKNOWN_SUITE_LABEL = "unknown-suite"


class TestStatus(str, Enum):
    """Status of a step or suite as seen by listeners."""

    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    RUNNING = "running"
    PENDING = "pending"


@dataclass(frozen=True)
class TestResult:
    """Outcome of one step."""

    __test__ = False

    suite: str
    step: str
    status: TestStatus
    error: str | None = None
    duration: float | None = None


@dataclass(frozen=True)
class SuiteResult:
    """Outcome of one suite."""

    suite: str
    status: TestStatus
    file_path: str | None = None


@dataclass(frozen=True)
class DispatchSummary:
    """What a result source published during reconciliation."""

    dispatched: bool = False
    had_failures: bool = False

    def merge(self, other: DispatchSummary) -> DispatchSummary:
        return DispatchSummary(
            dispatched=self.dispatched or other.dispatched,
            had_failures=self.had_failures or other.had_failures,
        )


def first_label(*candidates: object) -> str:
    """Return the first non-blank string candidate, else the unknown-suite label."""
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate
    return UNKNOWN_SUITE_LABEL
