"""Run execution domain exports."""

from .execution_orchestrator import ExecutionOrchestrator
from .execution_state import ExecutionState, ExecutionStateCache
from .process_launcher import (
    HTML_OUTPUT_FLAG,
    STEP_FLAG,
    LaunchSpec,
    ProcessCompletion,
    ProcessLauncher,
    all_suites_process_key,
    build_engine_arguments,
    process_key,
)
from .run_contracts import (
    EngineSpawnError,
    ExecutionError,
    ExecutionOutcome,
    ExecutionRequest,
    ExecutionVerdict,
)
from .status_reconciler import reconcile_exit

__all__ = [
    "ExecutionOrchestrator",
    "ExecutionState",
    "ExecutionStateCache",
    "ExecutionRequest",
    "ExecutionOutcome",
    "ExecutionVerdict",
    "ExecutionError",
    "EngineSpawnError",
    "LaunchSpec",
    "ProcessCompletion",
    "ProcessLauncher",
    "process_key",
    "all_suites_process_key",
    "build_engine_arguments",
    "STEP_FLAG",
    "HTML_OUTPUT_FLAG",
    "reconcile_exit",
]
