"""Results writing domain exports."""

from .report_models import ResultCollector, RunMetadata
from .run_report_writer import (
    RUN_INFO_SHEET_NAME,
    STEPS_SHEET_NAME,
    SUITES_SHEET_NAME,
    write_results_workbook,
)

__all__ = [
    "ResultCollector",
    "RunMetadata",
    "write_results_workbook",
    "STEPS_SHEET_NAME",
    "SUITES_SHEET_NAME",
    "RUN_INFO_SHEET_NAME",
]
