"""Resolves declared suite inputs into stdin submissions."""

from __future__ import annotations

import logging
from collections.abc import Callable

from flow_test_runner.suite_definitions.suite_models import SuiteDefinition

from .input_cache import InputCache
from .input_models import (
    InputType,
    NormalizedInputConfig,
    PreparedInputs,
    UserInputRequest,
)
from .input_normalizer import normalize_step_inputs
from .input_prompters import InputPrompter

_LOGGER = logging.getLogger(__name__)

_AFFIRMATIVE_ANSWERS = frozenset({"y", "yes", "true", "1", "s", "sim", "on"})

InputRequestListener = Callable[[UserInputRequest], None]


class InputRequiredError(Exception):
    """Raised when a required input is declined and has no default."""

    def __init__(self, variable: str) -> None:
        super().__init__(f"Required input was not provided: {variable}")
        self.variable = variable


class InputResolver:
    """Resolves every input of a suite, in order, before the engine starts."""

    def __init__(
        self,
        cache: InputCache,
        prompter: InputPrompter,
        publish_request: InputRequestListener | None = None,
    ) -> None:
        self._cache = cache
        self._prompter = prompter
        self._publish_request = publish_request or (lambda request: None)

    def prepare_inputs(
        self,
        suite: SuiteDefinition,
        step_id: str | None = None,
        *,
        use_cache: bool = False,
    ) -> PreparedInputs:
        """Resolve the inputs of the suite (or of the steps matching `step_id`).

        Raises:
          InputRequiredError: If a required input without default is declined.
        """
        steps = suite.steps
        if step_id:
            steps = tuple(step for step in steps if step.matches(step_id))

        submissions: list[str] = []
        user_inputs: dict[str, str] = {}
        for step in steps:
            for config in normalize_step_inputs(step, suite.file_path):
                submission, stored = self.resolve_input(config, use_cache=use_cache)
                submissions.append(submission)
                user_inputs[config.variable] = stored
        return PreparedInputs(submissions=tuple(submissions), user_inputs=user_inputs)

    def resolve_input(
        self, config: NormalizedInputConfig, *, use_cache: bool = False
    ) -> tuple[str, str]:
        """Return (submission, stored value) for one input."""
        request = build_user_input_request(config)
        self._publish_request(request)

        answer = self._cache.get(config.step_key, config.variable) if use_cache else None
        if answer is not None:
            _LOGGER.debug("Using cached input for %s", config.variable)
        else:
            answer = self._prompter.ask(request)

        if answer is None:
            answer = self._fallback_answer(config)

        submission = to_submission_value(config, answer)
        stored = to_stored_value(config, answer)
        self._cache.set(config.step_key, config.variable, stored)
        return submission, stored

    @staticmethod
    def _fallback_answer(config: NormalizedInputConfig) -> str:
        if config.default_value is not None:
            return config.default_value
        if config.required:
            raise InputRequiredError(config.variable)
        if config.input_type == InputType.CONFIRM.value:
            return "n"
        return ""


def build_user_input_request(config: NormalizedInputConfig) -> UserInputRequest:
    return UserInputRequest(
        step_name=config.step_key,
        input_name=config.variable,
        prompt=f"{config.prompt} (Step: {config.step_label})",
        required=config.required,
        masked=config.masked,
        input_type=config.input_type,
        options=tuple((option.label, option.value) for option in config.options),
        default_value=config.default_value,
    )


def to_submission_value(config: NormalizedInputConfig, raw_value: str | None) -> str:
    """Encode an answer as the literal line written to the engine's stdin."""
    if config.input_type == InputType.SELECT.value:
        return _select_submission(config, raw_value)
    if config.input_type == InputType.CONFIRM.value:
        return "y" if _is_affirmative(raw_value) else "n"
    return raw_value if raw_value is not None else ""


def to_stored_value(config: NormalizedInputConfig, raw_value: str | None) -> str:
    """Encode an answer as the value remembered for retest."""
    if config.input_type == InputType.CONFIRM.value:
        return "true" if _is_affirmative(raw_value) else "false"
    return raw_value if raw_value is not None else ""


def _select_submission(config: NormalizedInputConfig, raw_value: str | None) -> str:
    if not config.options:
        return "1"
    value = (raw_value or "").strip()
    for option in config.options:
        if option.value == value:
            return str(option.index + 1)
    for option in config.options:
        if option.label == value:
            return str(option.index + 1)
    if value.isdigit() and 1 <= int(value) <= len(config.options):
        return str(int(value))
    return str(config.options[0].index + 1)


def _is_affirmative(raw_value: str | None) -> bool:
    normalized = (raw_value or "").strip().lower()
    return normalized in _AFFIRMATIVE_ANSWERS or normalized.startswith("y")
