"""Input cache implementations."""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

_LOGGER = logging.getLogger(__name__)


class InputCache(Protocol):
    """Remembers answers per (step key, input name)."""

    def get(self, step_key: str, input_name: str) -> str | None: ...

    def set(self, step_key: str, input_name: str, value: str) -> None: ...

    def clear(self) -> None: ...

    def clear_step(self, step_key: str) -> None: ...

    def entries(self) -> dict[str, str]: ...

    def load(self, values: Mapping[str, str]) -> None: ...


def cache_key(step_key: str, input_name: str) -> str:
    return f"{step_key}:{input_name}"


def split_cache_key(key: str) -> tuple[str, str]:
    """Split a cache key back into (step key, input name)."""
    step_key, _, input_name = key.rpartition(":")
    return step_key, input_name


class InMemoryInputCache:
    """Process-local input cache."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._values: dict[str, str] = dict(values or {})

    def get(self, step_key: str, input_name: str) -> str | None:
        with self._lock:
            return self._values.get(cache_key(step_key, input_name))

    def set(self, step_key: str, input_name: str, value: str) -> None:
        with self._lock:
            self._values[cache_key(step_key, input_name)] = value
        self._changed()

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
        self._changed()

    def clear_step(self, step_key: str) -> None:
        prefix = f"{step_key}:"
        with self._lock:
            for key in [key for key in self._values if key.startswith(prefix)]:
                del self._values[key]
        self._changed()

    def entries(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)

    def load(self, values: Mapping[str, str]) -> None:
        with self._lock:
            self._values.update({str(key): str(value) for key, value in values.items()})
        self._changed()

    def _changed(self) -> None:
        """Hook for persistent subclasses."""


class JsonFileInputCache(InMemoryInputCache):
    """Input cache mirrored to a JSON file so answers survive between runs."""

    def __init__(self, storage_path: Path | str) -> None:
        self._storage_path = Path(storage_path)
        super().__init__(_read_cache_file(self._storage_path))

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    def _changed(self) -> None:
        snapshot = self.entries()
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._storage_path.write_text(
            json.dumps(snapshot, indent=2, sort_keys=True), encoding="utf-8"
        )
        # cached answers may include masked values
        os.chmod(self._storage_path, 0o600)


def _read_cache_file(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        _LOGGER.warning("Ignoring unreadable input cache %s: %s", path, exc)
        return {}
    if not isinstance(parsed, Mapping):
        _LOGGER.warning("Ignoring input cache %s: root is not an object", path)
        return {}
    return {str(key): str(value) for key, value in parsed.items()}
