"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import click

from flow_test_runner.configuration import (
    DEFAULT_CONFIG_FILENAME,
    CachedConfigurationProvider,
    ConfigurationError,
    write_placeholder_configuration,
)
from flow_test_runner.input_resolution import (
    ClickInputPrompter,
    InputRequiredError,
    JsonFileInputCache,
    NonInteractivePrompter,
)
from flow_test_runner.live_events import STATE_DIRECTORY_NAME
from flow_test_runner.result_events import SuiteResult, TestResult, TestStatus
from flow_test_runner.results_writing import ResultCollector, RunMetadata, write_results_workbook
from flow_test_runner.run_execution import (
    ExecutionError,
    ExecutionOrchestrator,
    ExecutionOutcome,
    ExecutionStateCache,
    ExecutionVerdict,
    ProcessLauncher,
)
from flow_test_runner.suite_definitions import SuiteDefinitionError

INPUT_CACHE_FILENAME = "inputs.json"
EXECUTION_STATE_FILENAME = "last-execution.json"

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DOMAIN_ERRORS = (ConfigurationError, SuiteDefinitionError, InputRequiredError, ExecutionError)


class CliError(Exception):
    """Custom CLI error."""


def _workspace_option(command):
    return click.option(
        "--workspace",
        "workspace",
        default=".",
        show_default=True,
        type=click.Path(file_okay=False, path_type=Path),
        help="Workspace holding the suites, the configuration and runner state",
    )(command)


def _config_option(command):
    return click.option(
        "--config",
        "config_path",
        required=False,
        type=click.Path(dir_okay=False, path_type=Path),
        help=f"Runner configuration file (default: <workspace>/{DEFAULT_CONFIG_FILENAME})",
    )(command)


def _workbook_option(command):
    return click.option(
        "--results-workbook",
        "workbook_path",
        required=False,
        type=click.Path(dir_okay=False, path_type=Path),
        help="Also write step and suite results to this xlsx workbook",
    )(command)


def _no_prompt_option(command):
    return click.option(
        "--no-prompt",
        is_flag=True,
        default=False,
        help=(
            "Never prompt; declared defaults are used instead. Combine with "
            "--use-cached-inputs to answer from the input cache first."
        ),
    )(command)


def _verbose_option(command):
    return click.option(
        "-v",
        "--verbose",
        is_flag=True,
        default=False,
        expose_value=False,
        is_eager=True,
        callback=_configure_logging,
        help="Enable debug logging.",
    )(command)


def _configure_logging(_ctx: click.Context, _param: click.Parameter, verbose: bool) -> None:
    logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger("flow_test_runner").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="flow-test-runner")
def cli() -> None:
    """Runs flow test suites through the external test engine."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML runner configuration to write",
)
def generate_config(output_path: str) -> None:
    """Generate a runner configuration with the default values and guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run")
@click.argument("suite_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--step-id", "step_id", required=False, help="Run only the step with this id")
@click.option("--step-name", "step_name", required=False, help="Run only the step with this name")
@_workspace_option
@_config_option
@click.option(
    "--use-cached-inputs",
    is_flag=True,
    default=False,
    help="Answer inputs from the input cache before prompting.",
)
@_no_prompt_option
@_workbook_option
@_verbose_option
def run_suite(  # pylint: disable=too-many-arguments
    suite_path: Path,
    step_id: str | None,
    step_name: str | None,
    workspace: Path,
    config_path: Path | None,
    use_cached_inputs: bool,
    no_prompt: bool,
    workbook_path: Path | None,
) -> None:
    """Run one suite, or one of its steps."""
    orchestrator = _build_orchestrator(workspace, config_path, no_prompt)
    if step_id or step_name:

        def operation() -> ExecutionOutcome:
            return orchestrator.run_step(
                suite_path,
                step_name,
                step_id,
                workspace=workspace,
                use_cached_inputs=use_cached_inputs,
            )

    else:

        def operation() -> ExecutionOutcome:
            return orchestrator.run_suite(
                suite_path, workspace=workspace, use_cached_inputs=use_cached_inputs
            )

    _execute(orchestrator, operation, workspace, workbook_path)


@cli.command(name="run-all")
@_workspace_option
@_config_option
@_workbook_option
@_verbose_option
def run_all(workspace: Path, config_path: Path | None, workbook_path: Path | None) -> None:
    """Let the engine run every suite in the working directory."""
    orchestrator = _build_orchestrator(workspace, config_path, no_prompt=True)
    _execute(orchestrator, lambda: orchestrator.run_all(workspace), workspace, workbook_path)


@cli.command(name="retest")
@_workspace_option
@_no_prompt_option
@_workbook_option
@_verbose_option
def retest(workspace: Path, no_prompt: bool, workbook_path: Path | None) -> None:
    """Repeat the last run with the inputs it used."""
    orchestrator = _build_orchestrator(workspace, None, no_prompt)
    _execute(orchestrator, orchestrator.retest_last, workspace, workbook_path)


@cli.group(name="inputs")
def inputs() -> None:
    """Inspect or edit the cached input answers."""


@inputs.command(name="show")
@_workspace_option
@click.option("--keys-only", is_flag=True, default=False, help="Hide the cached values.")
def show_inputs(workspace: Path, keys_only: bool) -> None:
    """List cached answers as `<step key>:<input> = <value>`."""
    for key, value in sorted(_input_cache(workspace).entries().items()):
        click.echo(key if keys_only else f"{key} = {value}")


@inputs.command(name="clear")
@_workspace_option
@click.option("--step", "step_key", required=False, help="Only clear answers of this step key")
def clear_inputs(workspace: Path, step_key: str | None) -> None:
    """Forget cached answers."""
    cache = _input_cache(workspace)
    if step_key:
        cache.clear_step(step_key)
    else:
        cache.clear()


@inputs.command(name="set")
@click.argument("step_key")
@click.argument("input_name")
@click.argument("value")
@_workspace_option
def set_input(step_key: str, input_name: str, value: str, workspace: Path) -> None:
    """Store an answer so later runs can reuse it."""
    _input_cache(workspace).set(step_key, input_name, value)


def _state_directory(workspace: Path) -> Path:
    return workspace.resolve() / STATE_DIRECTORY_NAME


def _input_cache(workspace: Path) -> JsonFileInputCache:
    return JsonFileInputCache(_state_directory(workspace) / INPUT_CACHE_FILENAME)


def _build_orchestrator(
    workspace: Path, config_path: Path | None, no_prompt: bool
) -> ExecutionOrchestrator:
    return ExecutionOrchestrator(
        CachedConfigurationProvider(config_path),
        _input_cache(workspace),
        NonInteractivePrompter() if no_prompt else ClickInputPrompter(),
        state_cache=ExecutionStateCache(_state_directory(workspace) / EXECUTION_STATE_FILENAME),
        launcher=ProcessLauncher(output_listener=_echo_engine_output),
    )


def _execute(
    orchestrator: ExecutionOrchestrator,
    operation: Callable[[], ExecutionOutcome | None],
    workspace: Path,
    workbook_path: Path | None,
) -> None:
    collector = ResultCollector(orchestrator.bus)
    orchestrator.bus.test_results.subscribe(_echo_test_result)
    orchestrator.bus.suite_results.subscribe(_echo_suite_result)
    run_start = datetime.now(UTC)
    try:
        outcome = operation()
    except _DOMAIN_ERRORS as exc:
        raise CliError(str(exc)) from exc
    finally:
        orchestrator.dispose()
        collector.close()

    if outcome is None:
        raise CliError("No previous test execution can be repeated.")
    if workbook_path is not None:
        written = write_results_workbook(
            workbook_path,
            collector.test_results,
            collector.suite_results,
            RunMetadata(
                run_start=run_start,
                workspace=workspace.resolve(),
                output_path=workbook_path.resolve(),
                command=_engine_command(orchestrator),
                verdict=outcome.verdict.value,
                exit_code=outcome.exit_code,
                process_key=outcome.process_key,
            ),
        )
        click.echo(f"Results workbook: {written}")

    if outcome.verdict is ExecutionVerdict.FAILED:
        raise CliError(outcome.message)
    click.echo(outcome.message)


def _engine_command(orchestrator: ExecutionOrchestrator) -> str:
    state = orchestrator.state_cache.latest()
    return state.configuration.command if state is not None else ""


def _echo_engine_output(stream: str, line: str) -> None:
    if stream == "stderr":
        click.echo(f"[ERROR] {line}", nl=False, err=True)
    else:
        click.echo(line, nl=False)


def _echo_test_result(result: TestResult) -> None:
    line = f"{result.status.value.upper():<7} {result.suite} > {result.step}"
    if result.status is TestStatus.FAILED and result.error:
        line = f"{line}: {result.error.strip()}"
    click.echo(line)


def _echo_suite_result(result: SuiteResult) -> None:
    click.echo(f"{result.status.value.upper():<7} suite {result.suite}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
