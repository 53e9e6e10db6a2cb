"""Process launcher tests."""

from __future__ import annotations

import shlex
import sys
import threading
import time
from pathlib import Path

import pytest
from flow_test_runner.run_execution import (
    EngineSpawnError,
    LaunchSpec,
    ProcessCompletion,
    ProcessLauncher,
)

_PYTHON = shlex.quote(sys.executable)


def _spec(tmp_path: Path, code: str, **overrides) -> LaunchSpec:
    values = {
        "command": _PYTHON,
        "arguments": ("-c", code),
        "cwd": tmp_path,
    }
    values.update(overrides)
    return LaunchSpec(**values)


def _wait_until_running(launcher: ProcessLauncher, key: str) -> None:
    deadline = time.monotonic() + 10
    while not launcher.is_running(key):
        assert time.monotonic() < deadline, "process did not start"
        time.sleep(0.02)


def test_writes_submissions_and_captures_streams_separately(tmp_path: Path) -> None:
    forwarded: list[tuple[str, str]] = []
    launcher = ProcessLauncher(output_listener=lambda stream, line: forwarded.append((stream, line)))
    code = (
        "import sys\n"
        "lines = sys.stdin.read().splitlines()\n"
        "print('|'.join(lines))\n"
        "print('warning', file=sys.stderr)\n"
        "sys.exit(3)\n"
    )

    completion = launcher.launch("k", _spec(tmp_path, code, submissions=("alice", "y", "2")))

    assert completion == ProcessCompletion(
        exit_code=3, stdout="alice|y|2\n", stderr="warning\n", timed_out=False
    )
    assert ("stdout", "alice|y|2\n") in forwarded
    assert ("stderr", "warning\n") in forwarded
    assert launcher.is_running("k") is False


def test_runs_in_requested_working_directory(tmp_path: Path) -> None:
    completion = ProcessLauncher().launch(
        "cwd", _spec(tmp_path, "import os; print(os.getcwd())")
    )

    assert completion is not None
    assert Path(completion.stdout.strip()).resolve() == tmp_path.resolve()


def test_second_launch_for_busy_key_is_rejected(tmp_path: Path) -> None:
    launcher = ProcessLauncher()
    results: list[ProcessCompletion | None] = []
    worker = threading.Thread(
        target=lambda: results.append(
            launcher.launch("busy", _spec(tmp_path, "import time; time.sleep(1.5)"))
        )
    )
    worker.start()
    _wait_until_running(launcher, "busy")

    assert launcher.launch("busy", _spec(tmp_path, "print('second')")) is None
    other = launcher.launch("other", _spec(tmp_path, "print('independent')"))

    worker.join(timeout=10)
    assert other is not None and other.stdout == "independent\n"
    assert results[0] is not None and results[0].exit_code == 0


def test_timeout_kills_the_process(tmp_path: Path) -> None:
    completion = ProcessLauncher().launch(
        "slow", _spec(tmp_path, "import time; time.sleep(30)", timeout_seconds=0.5)
    )

    assert completion is not None
    assert completion.timed_out is True
    assert completion.exit_code != 0


def test_stop_kills_running_process(tmp_path: Path) -> None:
    launcher = ProcessLauncher()
    results: list[ProcessCompletion | None] = []
    worker = threading.Thread(
        target=lambda: results.append(
            launcher.launch("stoppable", _spec(tmp_path, "import time; time.sleep(30)"))
        )
    )
    worker.start()
    _wait_until_running(launcher, "stoppable")
    # the slot is reserved before the process object is registered
    deadline = time.monotonic() + 10
    while not launcher.stop("stoppable"):
        assert time.monotonic() < deadline
        time.sleep(0.02)

    worker.join(timeout=10)
    assert not worker.is_alive()
    assert results[0] is not None and results[0].exit_code != 0
    assert launcher.stop("stoppable") is False


def test_missing_executable_raises_spawn_error(tmp_path: Path) -> None:
    launcher = ProcessLauncher()

    with pytest.raises(EngineSpawnError, match="Failed to start"):
        launcher.launch("missing", LaunchSpec("no-such-engine-xyz", (), tmp_path))

    assert launcher.is_running("missing") is False


_SPAWNS_GRANDCHILD = (
    "import subprocess, sys, time\n"
    "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(30)'])\n"
    "print('started', flush=True)\n"
    "time.sleep(30)\n"
)


@pytest.mark.skipif(sys.platform == "win32", reason="process groups are POSIX only")
def test_timeout_kills_descendants_holding_the_output_pipes(tmp_path: Path) -> None:
    launcher = ProcessLauncher()
    started = time.monotonic()

    completion = launcher.launch(
        "wrapped", _spec(tmp_path, _SPAWNS_GRANDCHILD, timeout_seconds=0.5)
    )

    assert time.monotonic() - started < 10
    assert completion is not None
    assert completion.timed_out is True
    assert completion.stdout == "started\n"
    assert launcher.is_running("wrapped") is False


@pytest.mark.skipif(sys.platform == "win32", reason="process groups are POSIX only")
def test_stop_releases_key_when_engine_has_descendants(tmp_path: Path) -> None:
    launcher = ProcessLauncher()
    results: list[ProcessCompletion | None] = []
    worker = threading.Thread(
        target=lambda: results.append(
            launcher.launch("wrapped", _spec(tmp_path, _SPAWNS_GRANDCHILD))
        )
    )
    worker.start()
    _wait_until_running(launcher, "wrapped")
    deadline = time.monotonic() + 10
    while not launcher.stop("wrapped"):
        assert time.monotonic() < deadline
        time.sleep(0.02)

    worker.join(timeout=10)

    assert not worker.is_alive()
    assert results[0] is not None and results[0].exit_code != 0
    assert launcher.is_running("wrapped") is False
