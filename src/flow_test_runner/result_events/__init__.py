"""Result event exports."""

from .result_bus import EventChannel, ResultBus
from .result_models import (
    UNKNOWN_SUITE_LABEL,
    DispatchSummary,
    SuiteResult,
    TestResult,
    TestStatus,
    first_label,
)

__all__ = [
    "EventChannel",
    "ResultBus",
    "DispatchSummary",
    "SuiteResult",
    "TestResult",
    "TestStatus",
    "UNKNOWN_SUITE_LABEL",
    "first_label",
]
