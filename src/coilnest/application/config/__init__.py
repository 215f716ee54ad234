"""Request loading and validation for coil nesting runs.

This package provides JSON-based request loading, CSV part list import,
Pydantic models for schema validation, conversion into domain objects, and
pre-flight advisory checks.

Example:
    >>> from pathlib import Path
    >>> from coilnest.application.config import load_request, ConfigError
    >>>
    >>> try:
    ...     request = load_request(Path("order-42.json"))
    ...     print(f"{len(request.parts)} parts")
    ... except ConfigError as e:
    ...     print(f"Error: {e}")
"""

from coilnest.application.config.adapter import config_to_parameters, config_to_parts
from coilnest.application.config.loader import (
    CSV_COLUMNS,
    ConfigError,
    load_parts_csv,
    load_request,
    load_request_from_dict,
)
from coilnest.application.config.schema import (
    SUPPORTED_VERSIONS,
    NestingParametersSchema,
    NestingRequestSchema,
    PartSchema,
    RollWeightRangeSchema,
)
from coilnest.application.config.validator import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate_request,
)

__all__ = [
    "CSV_COLUMNS",
    "SUPPORTED_VERSIONS",
    "ConfigError",
    "NestingParametersSchema",
    "NestingRequestSchema",
    "PartSchema",
    "RollWeightRangeSchema",
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "config_to_parameters",
    "config_to_parts",
    "load_parts_csv",
    "load_request",
    "load_request_from_dict",
    "validate_request",
]
