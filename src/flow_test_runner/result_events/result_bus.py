"""Typed publish/subscribe channels for execution events."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from flow_test_runner.input_resolution.input_models import UserInputRequest

from .result_models import SuiteResult, TestResult

EventT = TypeVar("EventT")

_LOGGER = logging.getLogger(__name__)


class EventChannel(Generic[EventT]):
    """Delivers each published event to every listener, in subscription order.

    Delivery is synchronous on the publishing thread. A listener that raises is
    logged and skipped; it never stops delivery to the remaining listeners.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._lock = threading.Lock()
        self._listeners: list[Callable[[EventT], None]] = []

    def subscribe(self, listener: Callable[[EventT], None]) -> Callable[[], None]:
        """Register a listener and return a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: EventT) -> None:
        with self._lock:
            listeners = tuple(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:  # pylint: disable=broad-exception-caught
                _LOGGER.exception("Listener on %s channel failed", self._name)


class ResultBus:
    """Channels for step results, suite results and input requests."""

    def __init__(self) -> None:
        self.test_results: EventChannel[TestResult] = EventChannel("test-result")
        self.suite_results: EventChannel[SuiteResult] = EventChannel("suite-result")
        self.input_requests: EventChannel[UserInputRequest] = EventChannel("input-request")
