"""Execution orchestrator use-case service."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

from flow_test_runner.configuration.loader import ConfigurationProvider
from flow_test_runner.configuration.runtime_settings import RunnerConfiguration
from flow_test_runner.input_resolution.input_cache import InputCache
from flow_test_runner.input_resolution.input_prompters import InputPrompter
from flow_test_runner.input_resolution.input_resolver import InputResolver
from flow_test_runner.live_events.event_source import FileEventSource, LiveEventSource
from flow_test_runner.live_events.live_event_reader import read_live_events
from flow_test_runner.live_events.stdout_fallback_parser import parse_stdout_results
from flow_test_runner.report_aggregation.report_aggregator import (
    load_aggregated_report,
    suite_results_from_report,
)
from flow_test_runner.result_events.result_bus import ResultBus
from flow_test_runner.result_events.result_models import (
    UNKNOWN_SUITE_LABEL,
    SuiteResult,
    TestResult,
    TestStatus,
)
from flow_test_runner.suite_definitions.suite_models import SuiteDefinition
from flow_test_runner.suite_definitions.suite_reader import read_suite_definition

from .execution_state import ExecutionState, ExecutionStateCache
from .process_launcher import (
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

_LOGGER = logging.getLogger(__name__)

EventSourceFactory = Callable[[Path], LiveEventSource]
OutcomeT = TypeVar("OutcomeT")


class ExecutionOrchestrator:  # pylint: disable=too-many-instance-attributes
    """Prepares inputs, runs the engine and reconciles its results.

    Collaborators are injected so several orchestrators can coexist and tests
    can replace the prompter, the caches or the event transport.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        configuration_provider: ConfigurationProvider,
        input_cache: InputCache,
        prompter: InputPrompter,
        *,
        bus: ResultBus | None = None,
        state_cache: ExecutionStateCache | None = None,
        launcher: ProcessLauncher | None = None,
        event_source_factory: EventSourceFactory = FileEventSource.for_run,
        max_workers: int = 4,
    ) -> None:
        self._configuration_provider = configuration_provider
        self.bus = bus or ResultBus()
        self.state_cache = state_cache or ExecutionStateCache()
        self._launcher = launcher or ProcessLauncher()
        self._event_source_factory = event_source_factory
        self._resolver = InputResolver(input_cache, prompter, self.bus.input_requests.publish)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="flow-test-run"
        )

    def run_suite(
        self,
        suite_path: Path | str,
        *,
        workspace: Path | str | None = None,
        use_cached_inputs: bool = False,
    ) -> ExecutionOutcome:
        """Run every step of one suite."""
        suite_file = Path(suite_path).resolve()
        configuration = self._configuration_for(workspace, suite_file)
        return self._execute(suite_file, None, None, configuration, use_cached_inputs)

    def run_step(  # pylint: disable=too-many-arguments
        self,
        suite_path: Path | str,
        step_name: str | None = None,
        step_id: str | None = None,
        *,
        workspace: Path | str | None = None,
        use_cached_inputs: bool = False,
    ) -> ExecutionOutcome:
        """Run one step; a missing name or id is looked up in the suite file.

        Raises:
          ExecutionError: If neither a step name nor a step id is given.
        """
        if not step_name and not step_id:
            raise ExecutionError("A step name or step id is required to run a single step.")
        suite_file = Path(suite_path).resolve()
        configuration = self._configuration_for(workspace, suite_file)
        step_name, step_id = _complete_step_identity(
            read_suite_definition(suite_file), step_name, step_id
        )
        return self._execute(suite_file, step_name, step_id, configuration, use_cached_inputs)

    def run_all(self, workspace: Path | str) -> ExecutionOutcome:
        """Let the engine discover and run every suite under the working directory."""
        configuration = self._configuration_provider.get_config(Path(workspace))
        cwd = _working_directory(configuration, workspace)
        _LOGGER.info("Running all suites in %s", cwd)
        request = ExecutionRequest(
            suite_path=None, step_name=None, step_id=None, configuration=configuration
        )
        return self._launch(
            request,
            key=all_suites_process_key(cwd),
            cwd=cwd,
            suite_argument=None,
            fallback_suite=None,
        )

    def retest_last(self) -> ExecutionOutcome | None:
        """Replay the last recorded suite or step using cached inputs.

        Returns None when there is nothing to replay.
        """
        state = self.state_cache.latest()
        if state is None:
            _LOGGER.warning("No previous test execution found")
            return None
        if state.step_name and not state.step_id:
            _LOGGER.warning(
                "Cannot retest step %s because its step_id is not available", state.step_name
            )
            return None
        _LOGGER.info("Retesting %s", state.suite_path.name)
        return self._execute(
            state.suite_path,
            state.step_name,
            state.step_id,
            state.configuration,
            use_cached_inputs=True,
        )

    def stop(
        self,
        suite_path: Path | str,
        step_id: str | None = None,
        step_name: str | None = None,
    ) -> bool:
        """Kill the engine process running for the given suite or step."""
        return self._launcher.stop(process_key(Path(suite_path).resolve(), step_id, step_name))

    def submit(
        self, operation: Callable[..., OutcomeT], /, *args: object, **kwargs: object
    ) -> Future[OutcomeT]:
        """Run one of the orchestrator operations on the background pool."""
        return self._executor.submit(operation, *args, **kwargs)

    def dispose(self) -> None:
        """Kill every running engine process and release the worker pool."""
        self._launcher.stop_all()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _configuration_for(
        self, workspace: Path | str | None, suite_file: Path
    ) -> RunnerConfiguration:
        return self._configuration_provider.get_config(
            Path(workspace) if workspace else suite_file.parent
        )

    def _execute(  # pylint: disable=too-many-arguments
        self,
        suite_file: Path,
        step_name: str | None,
        step_id: str | None,
        configuration: RunnerConfiguration,
        use_cached_inputs: bool,
    ) -> ExecutionOutcome:
        key = process_key(suite_file, step_id, step_name)
        # checked before input preparation so a rejected request leaves no state behind
        if self._launcher.is_running(key):
            return _already_running(key)

        suite = read_suite_definition(suite_file)
        prepared = self._resolver.prepare_inputs(suite, step_id, use_cache=use_cached_inputs)
        if prepared.user_inputs:
            _LOGGER.info("Collected %d inputs", len(prepared.user_inputs))

        self.state_cache.record(
            ExecutionState(
                suite_path=suite_file,
                step_name=step_name,
                step_id=step_id,
                configuration=configuration,
                user_inputs=dict(prepared.user_inputs),
            )
        )

        cwd = _working_directory(configuration, suite_file.parent)
        request = ExecutionRequest(
            suite_path=suite_file,
            step_name=step_name,
            step_id=step_id,
            configuration=configuration,
            submissions=prepared.submissions,
            user_inputs=prepared.user_inputs,
        )
        return self._launch(
            request,
            key=key,
            cwd=cwd,
            suite_argument=os.path.relpath(suite_file, cwd),
            fallback_suite=suite_file.name,
        )

    def _launch(  # pylint: disable=too-many-arguments
        self,
        request: ExecutionRequest,
        *,
        key: str,
        cwd: Path,
        suite_argument: str | None,
        fallback_suite: str | None,
    ) -> ExecutionOutcome:
        if self._launcher.is_running(key):
            return _already_running(key)

        configuration = request.configuration
        source = self._event_source_factory(cwd)
        source.prepare()
        spec = LaunchSpec(
            command=configuration.command,
            arguments=build_engine_arguments(
                suite_argument, source.engine_arguments(), request.step_id, configuration
            ),
            cwd=cwd,
            submissions=request.submissions,
            timeout_seconds=configuration.timeout_seconds,
        )
        try:
            completion = self._launcher.launch(key, spec)
        except EngineSpawnError as exc:
            source.discard()
            self._publish_spawn_failure(request, fallback_suite, str(exc))
            raise
        if completion is None:
            source.discard()
            return _already_running(key)

        return self._reconcile(request, key, cwd, source, completion, fallback_suite)

    def _reconcile(  # pylint: disable=too-many-arguments
        self,
        request: ExecutionRequest,
        key: str,
        cwd: Path,
        source: LiveEventSource,
        completion: ProcessCompletion,
        fallback_suite: str | None,
    ) -> ExecutionOutcome:
        publish_test = self.bus.test_results.publish
        summary = read_live_events(
            source,
            fallback_suite=fallback_suite,
            step_filter=request.step_name,
            publish=publish_test,
        )
        if not summary.dispatched and completion.stdout.strip():
            summary = summary.merge(
                parse_stdout_results(
                    completion.stdout,
                    fallback_suite=fallback_suite,
                    step_filter=request.step_name,
                    publish=publish_test,
                )
            )

        report = load_aggregated_report(request.configuration, cwd)
        if report is not None:
            for suite_result in suite_results_from_report(report, fallback_suite):
                self.bus.suite_results.publish(suite_result)

        passed = reconcile_exit(completion.exit_code, summary.had_failures, report)
        failure_detail = completion.stderr or f"Exited with code {completion.exit_code}"

        if request.step_name and not summary.dispatched and fallback_suite:
            publish_test(
                TestResult(
                    suite=fallback_suite,
                    step=request.step_name,
                    status=TestStatus.PASSED if passed else TestStatus.FAILED,
                    error=None if passed else failure_detail,
                )
            )

        if passed:
            _LOGGER.info("Run %s completed successfully (exit code %s)", key, completion.exit_code)
            message = "Test completed successfully"
        else:
            _LOGGER.info("Run %s failed (exit code %s)", key, completion.exit_code)
            message = f"Test failed with exit code {completion.exit_code}"
        if completion.timed_out:
            message = f"{message} after timing out"

        return ExecutionOutcome(
            process_key=key,
            verdict=ExecutionVerdict.PASSED if passed else ExecutionVerdict.FAILED,
            exit_code=completion.exit_code,
            message=message,
            stdout=completion.stdout,
            stderr=completion.stderr,
        )

    def _publish_spawn_failure(
        self, request: ExecutionRequest, fallback_suite: str | None, detail: str
    ) -> None:
        if request.step_name:
            self.bus.test_results.publish(
                TestResult(
                    suite=fallback_suite or UNKNOWN_SUITE_LABEL,
                    step=request.step_name,
                    status=TestStatus.FAILED,
                    error=detail,
                )
            )
        elif fallback_suite:
            self.bus.suite_results.publish(
                SuiteResult(
                    suite=fallback_suite,
                    status=TestStatus.FAILED,
                    file_path=str(request.suite_path) if request.suite_path else None,
                )
            )


def _working_directory(configuration: RunnerConfiguration, default: Path | str) -> Path:
    return Path(configuration.working_directory or default).resolve()


def _already_running(key: str) -> ExecutionOutcome:
    _LOGGER.warning("Test is already running: %s", key)
    return ExecutionOutcome(
        process_key=key,
        verdict=ExecutionVerdict.ALREADY_RUNNING,
        message="Test is already running",
    )


def _complete_step_identity(
    suite: SuiteDefinition, step_name: str | None, step_id: str | None
) -> tuple[str | None, str | None]:
    for step in suite.steps:
        if (step_id and step.step_id == step_id) or (step_name and step.name == step_name):
            return step_name or step.name, step_id or step.step_id
    return step_name or step_id, step_id
