"""
Validation and error handling for the iomonitor package.

This module provides input validation for configuration values and
the shared error handling helpers used by the config layer and the CLI.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
)

# Validation functions
from .validators import (
    validate_block_device_name,
    validate_boolean,
    validate_enum_choice,
    validate_path,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_file_error",
    "handle_cli_error",
    # Validators
    "validate_block_device_name",
    "validate_boolean",
    "validate_enum_choice",
    "validate_path",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_regex_pattern",
]
