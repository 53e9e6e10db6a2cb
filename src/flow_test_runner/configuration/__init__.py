"""Configuration domain exports."""

from .config_scaffold_builder import (
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import (
    DEFAULT_CONFIG_FILENAME,
    CachedConfigurationProvider,
    ConfigurationError,
    ConfigurationProvider,
    load_configuration,
)
from .runtime_settings import (
    OUTPUT_FORMATS,
    HtmlReportSettings,
    ReportingSettings,
    RunnerConfiguration,
    configuration_from_mapping,
    configuration_to_mapping,
)

__all__ = [
    "RunnerConfiguration",
    "ReportingSettings",
    "HtmlReportSettings",
    "OUTPUT_FORMATS",
    "configuration_to_mapping",
    "configuration_from_mapping",
    "ConfigurationError",
    "ConfigurationProvider",
    "CachedConfigurationProvider",
    "load_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
