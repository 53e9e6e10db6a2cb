"""Input resolution exports."""

from .input_cache import (
    InMemoryInputCache,
    InputCache,
    JsonFileInputCache,
    cache_key,
    split_cache_key,
)
from .input_models import (
    InputOption,
    InputType,
    NormalizedInputConfig,
    PreparedInputs,
    UserInputRequest,
)
from .input_normalizer import normalize_step_inputs
from .input_prompters import ClickInputPrompter, InputPrompter, NonInteractivePrompter
from .input_resolver import (
    InputRequiredError,
    InputResolver,
    build_user_input_request,
    to_stored_value,
    to_submission_value,
)

__all__ = [
    "InputCache",
    "InMemoryInputCache",
    "JsonFileInputCache",
    "cache_key",
    "split_cache_key",
    "InputOption",
    "InputType",
    "NormalizedInputConfig",
    "PreparedInputs",
    "UserInputRequest",
    "normalize_step_inputs",
    "InputPrompter",
    "ClickInputPrompter",
    "NonInteractivePrompter",
    "InputRequiredError",
    "InputResolver",
    "build_user_input_request",
    "to_submission_value",
    "to_stored_value",
]
