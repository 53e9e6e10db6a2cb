"""Suite definition exports."""

from .suite_models import StepDefinition, SuiteDefinition
from .suite_reader import SuiteDefinitionError, read_suite_definition

__all__ = [
    "StepDefinition",
    "SuiteDefinition",
    "SuiteDefinitionError",
    "read_suite_definition",
]
