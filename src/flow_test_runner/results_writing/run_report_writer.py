"""Results workbook writer service."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from flow_test_runner.result_events.result_models import SuiteResult, TestResult, TestStatus

from .report_models import RunMetadata

STEPS_SHEET_NAME = "Steps"
SUITES_SHEET_NAME = "Suites"
RUN_INFO_SHEET_NAME = "RunInfo"

STEP_COLUMNS = ("suite", "step", "status", "duration_ms", "error")
SUITE_COLUMNS = ("suite", "status", "file_path")


def write_results_workbook(
    output_path: Path | str,
    test_results: Sequence[TestResult],
    suite_results: Sequence[SuiteResult],
    run_metadata: RunMetadata,
) -> Path:
    """Write step results, suite results and run metadata to an xlsx workbook."""
    workbook = Workbook()
    steps_sheet = workbook.active
    steps_sheet.title = STEPS_SHEET_NAME
    _write_header(steps_sheet, STEP_COLUMNS)
    for row, result in enumerate(test_results, start=2):
        values = (
            result.suite,
            result.step,
            _status_value(result.status),
            result.duration,
            result.error,
        )
        for column, value in enumerate(values, start=1):
            steps_sheet.cell(row=row, column=column, value=value)
    steps_sheet.column_dimensions[get_column_letter(len(STEP_COLUMNS))].width = 60

    suites_sheet = workbook.create_sheet(SUITES_SHEET_NAME)
    _write_header(suites_sheet, SUITE_COLUMNS)
    for row, suite_result in enumerate(suite_results, start=2):
        values = (suite_result.suite, _status_value(suite_result.status), suite_result.file_path)
        for column, value in enumerate(values, start=1):
            suites_sheet.cell(row=row, column=column, value=value)

    _write_run_info_sheet(workbook, run_metadata, test_results, suite_results)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    return output.resolve()


def _write_header(sheet, columns: Sequence[str]) -> None:
    for column, name in enumerate(columns, start=1):
        sheet.cell(row=1, column=column, value=name)
        sheet.cell(row=1, column=column).style = "Headline 1"
        sheet.column_dimensions[get_column_letter(column)].width = max(12, len(name) + 6)
    sheet.freeze_panes = "A2"


def _status_value(status: TestStatus | str) -> str:
    return status.value if isinstance(status, TestStatus) else str(status)


def _write_run_info_sheet(
    workbook,
    run_metadata: RunMetadata,
    test_results: Sequence[TestResult],
    suite_results: Sequence[SuiteResult],
) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    failed_steps = sum(1 for result in test_results if result.status == TestStatus.FAILED)
    failed_suites = sum(1 for result in suite_results if result.status == TestStatus.FAILED)
    entries = (
        ("run_start", run_metadata.run_start.isoformat()),
        ("workspace", str(run_metadata.workspace)),
        ("output_path", str(run_metadata.output_path)),
        ("command", run_metadata.command),
        ("process_key", run_metadata.process_key),
        ("verdict", run_metadata.verdict),
        ("exit_code", run_metadata.exit_code),
        ("steps_total", len(test_results)),
        ("steps_failed", failed_steps),
        ("suites_total", len(suite_results)),
        ("suites_failed", failed_suites),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)
    sheet.column_dimensions["A"].width = 16
    sheet.column_dimensions["B"].width = 60
