"""Input resolution entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class InputType(str, Enum):
    """Declared kind of a suite input."""

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    CONFIRM = "confirm"
    PASSWORD = "password"


@dataclass(frozen=True)
class InputOption:
    """One choice of a select-style input."""

    label: str
    value: str
    index: int


@dataclass(frozen=True)
class NormalizedInputConfig:  # pylint: disable=too-many-instance-attributes
    """Typed view of one raw input declaration."""

    step_key: str
    step_label: str
    variable: str
    prompt: str
    input_type: str
    required: bool
    masked: bool
    default_value: str | None = None
    options: tuple[InputOption, ...] = ()


@dataclass(frozen=True)
class UserInputRequest:  # pylint: disable=too-many-instance-attributes
    """What the interactive layer is asked to answer."""

    step_name: str
    input_name: str
    prompt: str
    required: bool
    masked: bool = False
    input_type: str = InputType.TEXT.value
    options: tuple[tuple[str, str], ...] = ()
    default_value: str | None = None


@dataclass(frozen=True)
class PreparedInputs:
    """Literal stdin submissions plus the values remembered for retest."""

    submissions: tuple[str, ...] = ()
    user_inputs: Mapping[str, str] = field(default_factory=dict)
