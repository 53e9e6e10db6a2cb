"""Interactive answer providers for user input requests."""

from __future__ import annotations

from typing import Protocol

import click

from .input_models import InputType, UserInputRequest


class InputPrompter(Protocol):  # pylint: disable=too-few-public-methods
    """Answers one input request; None means the request was declined."""

    def ask(self, request: UserInputRequest) -> str | None: ...


class NonInteractivePrompter:  # pylint: disable=too-few-public-methods
    """Declines every request so declared defaults and fallbacks apply."""

    def ask(self, request: UserInputRequest) -> str | None:
        return None


class ClickInputPrompter:  # pylint: disable=too-few-public-methods
    """Terminal prompts built on click."""

    def ask(self, request: UserInputRequest) -> str | None:
        try:
            if request.input_type == InputType.SELECT.value and request.options:
                return self._ask_select(request)
            if request.input_type == InputType.CONFIRM.value:
                return self._ask_confirm(request)
            return self._ask_text(request)
        except click.Abort:
            return None

    @staticmethod
    def _ask_select(request: UserInputRequest) -> str:
        click.echo(request.prompt)
        default_index = None
        for position, (label, value) in enumerate(request.options, start=1):
            click.echo(f"  {position}) {label}")
            if request.default_value is not None and value == request.default_value:
                default_index = position
        choice = click.prompt(
            "Select an option",
            type=click.IntRange(1, len(request.options)),
            default=default_index,
        )
        return request.options[choice - 1][1]

    @staticmethod
    def _ask_confirm(request: UserInputRequest) -> str:
        default = None if request.default_value is None else request.default_value == "y"
        return "y" if click.confirm(request.prompt, default=default) else "n"

    @staticmethod
    def _ask_text(request: UserInputRequest) -> str | None:
        while True:
            value = click.prompt(
                request.prompt,
                default=request.default_value if request.default_value is not None else "",
                hide_input=request.masked,
                show_default=not request.masked and request.default_value is not None,
                type=click.STRING,
            )
            if not value.strip():
                return None
            if request.input_type == InputType.NUMBER.value and not _is_number(value):
                click.echo("Please enter a valid number.", err=True)
                continue
            return value


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True
