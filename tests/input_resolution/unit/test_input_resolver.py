"""Input resolver tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from flow_test_runner.input_resolution import (
    InMemoryInputCache,
    InputRequiredError,
    InputResolver,
    NonInteractivePrompter,
    NormalizedInputConfig,
    UserInputRequest,
    normalize_step_inputs,
    to_stored_value,
    to_submission_value,
)
from flow_test_runner.suite_definitions import StepDefinition, SuiteDefinition


class _ScriptedPrompter:
    """Answers by input name and records every request."""

    def __init__(self, answers: dict[str, str | None] | None = None) -> None:
        self._answers = answers or {}
        self.requests: list[UserInputRequest] = []

    def ask(self, request: UserInputRequest) -> str | None:
        self.requests.append(request)
        return self._answers.get(request.input_name)


class _FailingPrompter:
    def ask(self, request: UserInputRequest) -> str | None:
        raise AssertionError(f"unexpected prompt for {request.input_name}")


def _suite(*steps: StepDefinition, file_name: str = "login.yaml") -> SuiteDefinition:
    return SuiteDefinition(suite_id="suite", file_path=Path("suites") / file_name, steps=steps)


def _login_suite(default: str | None = None) -> SuiteDefinition:
    declaration = {"variable": "username", "type": "text", "required": True}
    if default is not None:
        declaration["default"] = default
    return _suite(StepDefinition(name="Login", step_id="login", inputs=(declaration,)))


def _config(input_type: str, options: int = 0, **overrides) -> NormalizedInputConfig:
    declaration = {"variable": "value", "type": input_type, **overrides}
    if options:
        declaration["options"] = [f"option-{index}" for index in range(options)]
    (config,) = normalize_step_inputs(
        StepDefinition(name="Step", step_id="step", inputs=(declaration,)), "suite.yaml"
    )
    return config


def test_suite_without_inputs_never_prompts() -> None:
    resolver = InputResolver(InMemoryInputCache(), _FailingPrompter())
    suite = _suite(StepDefinition(name="Ping"), StepDefinition(name="Pong", step_id="pong"))

    prepared = resolver.prepare_inputs(suite)

    assert prepared.submissions == ()
    assert dict(prepared.user_inputs) == {}


def test_answer_from_interactive_layer_is_submitted() -> None:
    resolver = InputResolver(InMemoryInputCache(), _ScriptedPrompter({"username": "alice"}))

    prepared = resolver.prepare_inputs(_login_suite())

    assert prepared.submissions == ("alice",)
    assert dict(prepared.user_inputs) == {"username": "alice"}


def test_cancelled_prompt_falls_back_to_declared_default() -> None:
    resolver = InputResolver(InMemoryInputCache(), _ScriptedPrompter({"username": None}))

    prepared = resolver.prepare_inputs(_login_suite(default="guest"))

    assert prepared.submissions == ("guest",)
    assert dict(prepared.user_inputs) == {"username": "guest"}


def test_declined_required_input_without_default_raises() -> None:
    resolver = InputResolver(InMemoryInputCache(), NonInteractivePrompter())

    with pytest.raises(InputRequiredError, match="username") as excinfo:
        resolver.prepare_inputs(_login_suite())

    assert excinfo.value.variable == "username"


def test_declined_optional_inputs_use_type_fallbacks() -> None:
    suite = _suite(
        StepDefinition(
            name="Options",
            inputs=(
                {"variable": "note", "required": False},
                {"variable": "agree", "type": "confirm", "required": False},
            ),
        )
    )
    resolver = InputResolver(InMemoryInputCache(), NonInteractivePrompter())

    prepared = resolver.prepare_inputs(suite)

    assert prepared.submissions == ("", "n")
    assert dict(prepared.user_inputs) == {"note": "", "agree": "false"}


def test_every_input_publishes_a_request_with_step_suffix() -> None:
    published: list[UserInputRequest] = []
    cache = InMemoryInputCache()
    cache.set("login.yaml::login", "username", "cached-alice")
    resolver = InputResolver(cache, _FailingPrompter(), published.append)

    resolver.prepare_inputs(_login_suite(), use_cache=True)

    assert len(published) == 1
    assert published[0].step_name == "login.yaml::login"
    assert published[0].input_name == "username"
    assert published[0].prompt == "Enter a value for username (Step: Login)"


def test_cached_value_is_used_without_prompting() -> None:
    cache = InMemoryInputCache({"login.yaml::login:username": "bob"})
    resolver = InputResolver(cache, _FailingPrompter())

    prepared = resolver.prepare_inputs(_login_suite(), use_cache=True)

    assert prepared.submissions == ("bob",)


def test_cache_is_ignored_unless_requested_and_updated_after_answer() -> None:
    cache = InMemoryInputCache({"login.yaml::login:username": "bob"})
    prompter = _ScriptedPrompter({"username": "carol"})
    resolver = InputResolver(cache, prompter)

    prepared = resolver.prepare_inputs(_login_suite())

    assert prepared.submissions == ("carol",)
    assert cache.get("login.yaml::login", "username") == "carol"


def test_step_filter_limits_resolution_to_matching_steps() -> None:
    suite = _suite(
        StepDefinition(name="Login", step_id="login", inputs=({"variable": "user"},)),
        StepDefinition(name="Search", step_id="search", inputs=({"variable": "query"},)),
    )
    prompter = _ScriptedPrompter({"user": "alice", "query": "shoes"})
    resolver = InputResolver(InMemoryInputCache(), prompter)

    by_id = resolver.prepare_inputs(suite, "search")
    by_name = resolver.prepare_inputs(suite, "Login")

    assert by_id.submissions == ("shoes",)
    assert by_name.submissions == ("alice",)


@pytest.mark.parametrize(
    "raw_value",
    ["y", "Y", "yes", "true", "1", "s", "sim", "on", "yep", "n", "no", "false", "0", "", None, "x"],
)
def test_confirm_values_are_normalized_in_both_encodings(raw_value: str | None) -> None:
    config = _config("confirm")

    submission = to_submission_value(config, raw_value)
    stored = to_stored_value(config, raw_value)

    assert submission in {"y", "n"}
    assert stored in {"true", "false"}
    assert (submission == "y") == (stored == "true")
    assert to_submission_value(config, stored) == submission
    assert to_stored_value(config, stored) == stored


@pytest.mark.parametrize(
    "raw_value", ["option-0", "option-2", "1", "3", "0", "4", "-1", "banana", "", None]
)
def test_select_submissions_stay_within_option_range(raw_value: str | None) -> None:
    config = _config("select", options=3)

    submission = to_submission_value(config, raw_value)

    assert submission.isdigit()
    assert 1 <= int(submission) <= 3


def test_select_matches_value_then_label() -> None:
    (config,) = normalize_step_inputs(
        StepDefinition(
            name="Env",
            inputs=(
                {
                    "variable": "env",
                    "type": "select",
                    "options": [
                        {"label": "Development", "value": "dev"},
                        {"label": "Staging", "value": "stg"},
                    ],
                },
            ),
        ),
        "suite.yaml",
    )

    assert to_submission_value(config, "stg") == "2"
    assert to_submission_value(config, "Development") == "1"
    assert to_submission_value(config, "unknown") == "1"


def test_select_without_options_submits_first_position() -> None:
    assert to_submission_value(_config("select"), "anything") == "1"


def test_replaying_stored_values_reproduces_submissions() -> None:
    suite = _suite(
        StepDefinition(
            name="Checkout",
            step_id="checkout",
            inputs=(
                {"variable": "user"},
                {"variable": "remember", "type": "confirm"},
                {"variable": "env", "type": "select", "options": ["dev", "stg", "prd"]},
                {"variable": "pin", "masked": True},
            ),
        )
    )
    cache = InMemoryInputCache()
    first = InputResolver(
        cache, _ScriptedPrompter({"user": "alice", "remember": "Sim", "env": "stg", "pin": "1234"})
    ).prepare_inputs(suite)

    replay = InputResolver(cache, _FailingPrompter()).prepare_inputs(suite, use_cache=True)

    assert first.submissions == ("alice", "y", "2", "1234")
    assert replay.submissions == first.submissions
    assert dict(replay.user_inputs) == dict(first.user_inputs)
    assert first.user_inputs["remember"] == "true"
