"""Spawns the engine process and captures its output."""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from flow_test_runner.configuration.runtime_settings import RunnerConfiguration

from .run_contracts import EngineSpawnError

STEP_FLAG = "--step"
HTML_OUTPUT_FLAG = "--html-output"

_LOGGER = logging.getLogger(__name__)

OutputListener = Callable[[str, str], None]

# engine descendants can keep the output pipes open after the engine itself is gone
_DRAIN_GRACE_SECONDS = 5.0


def process_key(suite_path: Path | str, step_id: str | None, step_name: str | None) -> str:
    """Key identifying one in-flight execution."""
    return f"{suite_path}:{step_id or step_name or 'all'}"


def all_suites_process_key(cwd: Path | str) -> str:
    return f"{cwd}:all-suites"


def build_engine_arguments(
    suite_argument: str | None,
    event_arguments: Sequence[str],
    step_id: str | None,
    configuration: RunnerConfiguration,
) -> tuple[str, ...]:
    """Arguments appended to the configured engine command."""
    arguments: list[str] = []
    if suite_argument:
        arguments.append(suite_argument)
    arguments.extend(event_arguments)
    if step_id:
        arguments.extend((STEP_FLAG, step_id))
    if configuration.wants_html_output:
        arguments.append(HTML_OUTPUT_FLAG)
    return tuple(arguments)


@dataclass(frozen=True)
class LaunchSpec:
    """Everything needed to start the engine once."""

    command: str
    arguments: tuple[str, ...]
    cwd: Path
    submissions: tuple[str, ...] = ()
    timeout_seconds: float | None = None

    @property
    def argv(self) -> list[str]:
        return [*shlex.split(self.command), *self.arguments]


@dataclass(frozen=True)
class ProcessCompletion:
    """Exit status and captured streams of a finished engine process."""

    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False


class ProcessLauncher:
    """Runs at most one engine process per execution key."""

    def __init__(self, output_listener: OutputListener | None = None) -> None:
        self._output_listener = output_listener
        self._lock = threading.Lock()
        self._running: dict[str, subprocess.Popen[str] | None] = {}

    def is_running(self, key: str) -> bool:
        with self._lock:
            return key in self._running

    def launch(self, key: str, spec: LaunchSpec) -> ProcessCompletion | None:
        """Run the engine to completion.

        Returns:
          The completion, or None when `key` already has a process in flight.

        Raises:
          EngineSpawnError: If the process cannot be started.
        """
        with self._lock:
            if key in self._running:
                return None
            self._running[key] = None

        try:
            process = self._spawn(spec)
            with self._lock:
                self._running[key] = process
            return self._supervise(process, spec)
        finally:
            with self._lock:
                self._running.pop(key, None)

    def stop(self, key: str) -> bool:
        """Kill the process running under `key`; True when one was found."""
        with self._lock:
            process = self._running.get(key)
        if process is None:
            return False
        _LOGGER.info("Stopping engine process for %s", key)
        _kill(process)
        return True

    def stop_all(self) -> None:
        with self._lock:
            processes = [process for process in self._running.values() if process is not None]
        for process in processes:
            _kill(process)

    @staticmethod
    def _spawn(spec: LaunchSpec) -> subprocess.Popen[str]:
        argv = spec.argv
        _LOGGER.info("Executing %s in %s", shlex.join(argv), spec.cwd)
        try:
            return subprocess.Popen(  # pylint: disable=consider-using-with
                argv,
                cwd=spec.cwd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                start_new_session=True,
            )
        except (OSError, ValueError) as exc:
            raise EngineSpawnError(f"Failed to start {argv[0] if argv else '<empty>'}: {exc}") from exc

    def _supervise(self, process: subprocess.Popen[str], spec: LaunchSpec) -> ProcessCompletion:
        stdout_lines: list[str] = []
        stderr_lines: list[str] = []
        readers = [
            threading.Thread(
                target=self._drain,
                args=(process.stdout, "stdout", stdout_lines),
                daemon=True,
            ),
            threading.Thread(
                target=self._drain,
                args=(process.stderr, "stderr", stderr_lines),
                daemon=True,
            ),
        ]
        for reader in readers:
            reader.start()

        _write_submissions(process, spec.submissions)

        timed_out = False
        try:
            process.wait(timeout=spec.timeout_seconds)
        except subprocess.TimeoutExpired:
            _LOGGER.warning(
                "Engine exceeded the %.1fs timeout and was killed", spec.timeout_seconds
            )
            timed_out = True
            _kill(process)
            process.wait()
        for reader in readers:
            reader.join(timeout=_DRAIN_GRACE_SECONDS)

        return ProcessCompletion(
            exit_code=process.returncode,
            stdout="".join(stdout_lines),
            stderr="".join(stderr_lines),
            timed_out=timed_out,
        )

    def _drain(self, stream: IO[str] | None, name: str, sink: list[str]) -> None:
        if stream is None:
            return
        with stream:
            for line in stream:
                sink.append(line)
                if self._output_listener is not None:
                    self._output_listener(name, line)


def _write_submissions(process: subprocess.Popen[str], submissions: Sequence[str]) -> None:
    if process.stdin is None:
        return
    try:
        for submission in submissions:
            process.stdin.write(f"{submission}\n")
        process.stdin.flush()
    except (BrokenPipeError, ValueError) as exc:
        _LOGGER.debug("Engine closed stdin before all inputs were written: %s", exc)
    finally:
        try:
            process.stdin.close()
        except BrokenPipeError:
            _LOGGER.debug("Engine stdin already closed")


def _kill(process: subprocess.Popen[str]) -> None:
    """Kill the engine and every process it started in its session."""
    try:
        if hasattr(os, "killpg"):
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        _LOGGER.debug("Process %s already exited", process.pid)
