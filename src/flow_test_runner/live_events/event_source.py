"""Transport for the engine's live step events."""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path
from typing import Protocol

LIVE_EVENTS_FLAG = "--live-events"
STATE_DIRECTORY_NAME = ".flow-test-runner"

_LOGGER = logging.getLogger(__name__)


class LiveEventSource(Protocol):
    """Channel the engine writes step events to during one run."""

    def prepare(self) -> None:
        """Create a fresh, empty channel before the engine is spawned."""

    def engine_arguments(self) -> tuple[str, ...]:
        """Arguments telling the engine where to write events."""

    def read_text(self) -> str | None:
        """Return everything written so far, or None when nothing exists."""

    def discard(self) -> None:
        """Remove the channel; safe to call more than once."""


class FileEventSource:
    """Line-delimited JSON file under `<cwd>/.flow-test-runner/live-events/`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @classmethod
    def for_run(cls, cwd: Path | str) -> FileEventSource:
        """Build a source with a unique, run-scoped file name."""
        events_dir = Path(cwd) / STATE_DIRECTORY_NAME / "live-events"
        stamp = format(time.time_ns() // 1_000_000, "x")
        return cls(events_dir / f"run-{stamp}-{secrets.token_hex(3)}.jsonl")

    @property
    def path(self) -> Path:
        return self._path

    def prepare(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text("", encoding="utf-8")

    def engine_arguments(self) -> tuple[str, ...]:
        return (LIVE_EVENTS_FLAG, str(self._path))

    def read_text(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None

    def discard(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            _LOGGER.warning("Could not delete live events file %s: %s", self._path, exc)
