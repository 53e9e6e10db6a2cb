"""CLI error-handling tests."""

from __future__ import annotations

from pathlib import Path

from flow_test_runner.cli import main


def test_missing_suite_argument_returns_clean_click_error(capsys) -> None:
    exit_code = main(["run"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "Missing argument" in captured.err
    assert "Traceback" not in captured.err


def test_unknown_option_returns_clean_click_error(capsys) -> None:
    exit_code = main(["run-all", "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "No such option: --bogus" in captured.err
    assert "Traceback" not in captured.err


def test_invalid_configuration_is_reported_in_one_line(tmp_path: Path, capsys) -> None:
    (tmp_path / "flow-test.config.yml").write_text("outputFormat: pdf\n", encoding="utf-8")
    suite_path = tmp_path / "suite.yaml"
    suite_path.write_text("steps: []\n", encoding="utf-8")

    exit_code = main(["run", str(suite_path), "--workspace", str(tmp_path), "--no-prompt"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "outputFormat must be one of" in captured.err
    assert "Traceback" not in captured.err


def test_retest_without_history_fails_cleanly(tmp_path: Path, capsys) -> None:
    exit_code = main(["retest", "--workspace", str(tmp_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "No previous test execution" in captured.err
