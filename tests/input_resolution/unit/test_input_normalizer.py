"""Input normalizer tests."""

from __future__ import annotations

from flow_test_runner.input_resolution import InputOption, normalize_step_inputs
from flow_test_runner.suite_definitions import StepDefinition


def _step(*inputs, name: str = "Login", step_id: str | None = "login") -> StepDefinition:
    return StepDefinition(name=name, step_id=step_id, inputs=tuple(inputs))


def test_step_without_inputs_normalizes_to_nothing() -> None:
    assert normalize_step_inputs(_step(), "suites/login.yaml") == ()


def test_applies_defaults_for_minimal_declaration() -> None:
    (config,) = normalize_step_inputs(_step({}), "suites/login.yaml")

    assert config.step_key == "login.yaml::login"
    assert config.step_label == "Login"
    assert config.variable == "input_1"
    assert config.prompt == "Enter a value for input_1"
    assert config.input_type == "text"
    assert config.required is True
    assert config.masked is False
    assert config.default_value is None
    assert config.options == ()


def test_step_key_falls_back_to_step_name() -> None:
    (config,) = normalize_step_inputs(
        _step({"name": "user"}, step_id=None), "/abs/path/login.yaml"
    )

    assert config.step_key == "login.yaml::Login"
    assert config.variable == "user"


def test_reads_alternate_keys() -> None:
    (config,) = normalize_step_inputs(
        _step({"name": "token", "label": "API token", "ci_default": 42, "required": False}),
        "login.yaml",
    )

    assert config.variable == "token"
    assert config.prompt == "API token"
    assert config.default_value == "42"
    assert config.required is False


def test_masked_inputs_default_to_password_type() -> None:
    masked, password = normalize_step_inputs(
        _step({"variable": "secret", "masked": True}, {"variable": "pin", "type": "PASSWORD"}),
        "login.yaml",
    )

    assert masked.input_type == "password"
    assert masked.masked is True
    assert password.input_type == "password"
    assert password.masked is True


def test_confirm_defaults_are_normalized_to_y_or_n() -> None:
    configs = normalize_step_inputs(
        _step(
            {"variable": "a", "type": "confirm", "default": True},
            {"variable": "b", "type": "confirm", "default": "no"},
            {"variable": "c", "type": "confirm", "default_value": "Yes"},
            {"variable": "d", "type": "text", "default": False},
        ),
        "login.yaml",
    )

    assert [config.default_value for config in configs] == ["y", "n", "y", "false"]


def test_options_accept_strings_and_mappings() -> None:
    (config,) = normalize_step_inputs(
        _step(
            {
                "variable": "env",
                "type": "select",
                "options": [
                    "dev",
                    {"label": "Staging", "value": "stg"},
                    {"text": "Production"},
                    {"value": "qa"},
                    {},
                ],
            }
        ),
        "login.yaml",
    )

    assert config.options == (
        InputOption(label="dev", value="dev", index=0),
        InputOption(label="Staging", value="stg", index=1),
        InputOption(label="Production", value="Production", index=2),
        InputOption(label="qa", value="qa", index=3),
        InputOption(label="Option 5", value="Option 5", index=4),
    )


def test_non_mapping_declaration_degrades_to_text_input() -> None:
    (config,) = normalize_step_inputs(_step("username"), "login.yaml")

    assert config.variable == "input_1"
    assert config.input_type == "text"
