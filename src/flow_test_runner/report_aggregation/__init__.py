"""Report aggregation exports."""

from .report_aggregator import (
    load_aggregated_report,
    report_candidate_directories,
    report_signals_failure,
    suite_results_from_report,
)
from .report_models import (
    AGGREGATED_REPORT_FILENAME,
    AggregatedReport,
    SuiteReportEntry,
    parse_aggregated_report,
)

__all__ = [
    "AGGREGATED_REPORT_FILENAME",
    "AggregatedReport",
    "SuiteReportEntry",
    "parse_aggregated_report",
    "load_aggregated_report",
    "report_candidate_directories",
    "report_signals_failure",
    "suite_results_from_report",
]
