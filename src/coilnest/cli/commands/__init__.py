"""CLI command implementations for the coilnest application.

This package contains subcommands for the coilnest CLI, including:
- validate: Validate a request file and part list without optimizing
"""

from coilnest.cli.commands.validate import (
    display_load_error,
    load_inputs,
    validate_command,
)

__all__ = ["display_load_error", "load_inputs", "validate_command"]
