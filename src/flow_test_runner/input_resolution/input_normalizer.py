"""Turns raw input declarations into typed input configs."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from flow_test_runner.suite_definitions.suite_models import StepDefinition

from .input_models import InputOption, InputType, NormalizedInputConfig


def normalize_step_inputs(
    step: StepDefinition, suite_path: Path | str
) -> tuple[NormalizedInputConfig, ...]:
    """Return the step's input declarations in declaration order.

    Never raises: unusable declarations degrade to text inputs with generated names.
    """
    suite_file_name = Path(suite_path).name
    step_key = f"{suite_file_name}::{step.step_id or step.name}"
    step_label = step.name or step.step_id or "Step"
    return tuple(
        _normalize_input(raw_input, index, step_key=step_key, step_label=step_label)
        for index, raw_input in enumerate(step.inputs)
    )


def _normalize_input(
    raw_input: Any, index: int, *, step_key: str, step_label: str
) -> NormalizedInputConfig:
    declaration: Mapping[str, Any] = raw_input if isinstance(raw_input, Mapping) else {}
    variable = str(
        _first_present(declaration, "variable", "name") or f"input_{index + 1}"
    )
    masked_flag = declaration.get("masked") is True
    raw_type = declaration.get("type")
    if raw_type is None:
        raw_type = InputType.PASSWORD.value if masked_flag else InputType.TEXT.value
    input_type = str(raw_type).lower()
    prompt = str(
        _first_present(declaration, "prompt", "label") or f"Enter a value for {variable}"
    )
    return NormalizedInputConfig(
        step_key=step_key,
        step_label=step_label,
        variable=variable,
        prompt=prompt,
        input_type=input_type,
        required=declaration.get("required") is not False,
        masked=masked_flag or input_type == InputType.PASSWORD.value,
        default_value=_normalize_default(declaration, input_type),
        options=_normalize_options(declaration.get("options")),
    )


def _normalize_default(declaration: Mapping[str, Any], input_type: str) -> str | None:
    raw_default = _first_present(declaration, "default", "default_value", "ci_default")
    if raw_default is None:
        return None
    if input_type == InputType.CONFIRM.value:
        if isinstance(raw_default, str):
            return "y" if raw_default.strip().lower() in {"y", "yes", "true", "1"} else "n"
        return "y" if raw_default else "n"
    if isinstance(raw_default, bool):
        return "true" if raw_default else "false"
    return str(raw_default)


def _normalize_options(raw_options: Any) -> tuple[InputOption, ...]:
    if not isinstance(raw_options, Sequence) or isinstance(raw_options, str):
        return ()
    options: list[InputOption] = []
    for index, option in enumerate(raw_options):
        if isinstance(option, Mapping):
            label = _first_present(option, "label", "text", "name", "value")
            if label is None:
                label = f"Option {index + 1}"
            value = option.get("value")
            options.append(
                InputOption(
                    label=str(label),
                    value=str(value if value is not None else label),
                    index=index,
                )
            )
        else:
            options.append(InputOption(label=str(option), value=str(option), index=index))
    return tuple(options)


def _first_present(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None
