"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

from .loader import DEFAULT_CONFIG_FILENAME

_CONFIG_SCAFFOLD_TEMPLATE = """# Runner configuration for flow-test-runner.
# Every key is optional; the values below are the built-in defaults.

# Executable (and leading arguments) used to run suites.
command: flow-test-engine

# json, html or both. html and both add --html-output to the engine call.
outputFormat: both

# Wall-clock limit for one engine process, in milliseconds.
timeout: 30000
retryCount: 0

# Optional working directory, relative to this file.
# workingDirectory: ./tests

# Where the engine writes results/latest.json.
reporting:
  output_dir: ./results
  html:
    output_subdir: html
    per_suite: true
    aggregate: true
"""


def build_placeholder_configuration() -> str:
    """Build the default runner configuration with inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str = DEFAULT_CONFIG_FILENAME) -> Path:
    """Write the default runner configuration to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Runner configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
