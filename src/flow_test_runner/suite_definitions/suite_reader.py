"""Suite file reader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .suite_models import StepDefinition, SuiteDefinition


class SuiteDefinitionError(Exception):
    """Raised when a suite file cannot be read or parsed."""


def read_suite_definition(suite_path: Path | str) -> SuiteDefinition:
    """Read a YAML suite file into a `SuiteDefinition`.

    Steps that are not mappings are skipped; a file without a `steps` list yields a
    suite with no steps.
    """
    path = Path(suite_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SuiteDefinitionError(f"Could not read suite file ({path}): {exc}") from exc

    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SuiteDefinitionError(f"Failed to parse suite file {path}: {exc}") from exc

    document: Mapping[str, Any] = parsed if isinstance(parsed, Mapping) else {}
    raw_steps = document.get("steps")
    steps: list[StepDefinition] = []
    if isinstance(raw_steps, Sequence) and not isinstance(raw_steps, str):
        for raw_step in raw_steps:
            if isinstance(raw_step, Mapping):
                steps.append(_parse_step(raw_step, position=len(steps) + 1))

    return SuiteDefinition(
        suite_id=_suite_identifier(document, path),
        file_path=path,
        steps=tuple(steps),
    )


def _parse_step(raw_step: Mapping[str, Any], *, position: int) -> StepDefinition:
    step_id = raw_step.get("step_id")
    name = raw_step.get("name")
    request = raw_step.get("request")
    call = raw_step.get("call")
    return StepDefinition(
        name=str(name) if name is not None else str(step_id or f"Step {position}"),
        step_id=str(step_id) if step_id is not None else None,
        request=request if isinstance(request, Mapping) else None,
        call=call if isinstance(call, Mapping) else None,
        inputs=_raw_inputs(raw_step.get("input")),
    )


def _raw_inputs(value: Any) -> tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, Sequence) and not isinstance(value, str):
        return tuple(value)
    return (value,)


def _suite_identifier(document: Mapping[str, Any], path: Path) -> str:
    for key in ("node_id", "suite_name"):
        value = document.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return path.stem
