"""Request and part list loading with comprehensive error handling.

This module loads optimization requests from JSON files and part lists from
CSV files. It handles file system errors, JSON and CSV parsing errors, and
Pydantic validation errors with clear, actionable error messages.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from coilnest.application.config.schema import NestingRequestSchema, PartSchema

logger = logging.getLogger(__name__)

# Columns of the part list CSV format, in export order
CSV_COLUMNS: tuple[str, ...] = (
    "id",
    "width",
    "length",
    "quantity",
    "thickness",
    "grade",
    "projectName",
)

# Columns a part list CSV must carry; projectName may be omitted
REQUIRED_CSV_COLUMNS: frozenset[str] = frozenset(CSV_COLUMNS[:-1])


class ConfigError(Exception):
    """Exception raised for configuration-related errors.

    Attributes:
        message: The primary error message
        error_type: Category of error (file_not_found, permission_denied,
            file_read_error, json_parse, csv_parse, validation)
        path: Path to the file (if applicable)
        details: Additional error details (line/column for JSON, line for
            CSV, validation errors, etc.)
    """

    def __init__(
        self,
        message: str,
        error_type: str = "unknown",
        path: Path | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message
        self.error_type = error_type
        self.path = path
        self.details = details or []
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


def _format_json_path(loc: tuple[str | int, ...]) -> str:
    """Format a Pydantic location tuple as a JSON path string.

    Examples:
        >>> _format_json_path(("parameters", "kerf"))
        'parameters.kerf'
        >>> _format_json_path(("parts", 2, "width"))
        'parts[2].width'
    """
    parts: list[str] = []
    for segment in loc:
        if isinstance(segment, int):
            # Array index - append to last part with brackets
            if parts:
                parts[-1] = f"{parts[-1]}[{segment}]"
            else:
                parts.append(f"[{segment}]")
        else:
            parts.append(str(segment))
    return ".".join(parts)


def _extract_validation_errors(
    error: PydanticValidationError,
    prefix: tuple[str | int, ...] = (),
) -> list[dict[str, Any]]:
    """Extract and format validation errors from a Pydantic ValidationError.

    Args:
        error: The Pydantic ValidationError to process
        prefix: Location segments prepended to every error location

    Returns:
        List of error dictionaries with path, message, value, and error_type
    """
    details: list[dict[str, Any]] = []
    for err in error.errors():
        details.append(
            {
                "path": _format_json_path(prefix + tuple(err["loc"])),
                "message": err["msg"],
                "value": err.get("input"),
                "error_type": err["type"],
            }
        )
    return details


def _format_validation_error_message(
    details: list[dict[str, Any]],
    heading: str = "Request validation failed:",
) -> str:
    lines = [heading]
    for detail in details:
        path = detail["path"]
        message = detail["message"]
        value = detail.get("value")
        if value is not None and not isinstance(value, (dict, list)):
            lines.append(f"  - {path}: {message} (got: {value!r})")
        else:
            lines.append(f"  - {path}: {message}")
    return "\n".join(lines)


def _read_text(path: Path, kind: str) -> str:
    if not path.exists():
        raise ConfigError(
            message=f"{kind} file not found: {path}",
            error_type="file_not_found",
            path=path,
        )
    try:
        # utf-8-sig tolerates the byte order mark spreadsheet tools write
        return path.read_text(encoding="utf-8-sig")
    except PermissionError:
        raise ConfigError(
            message=f"Permission denied reading {kind.lower()} file: {path}",
            error_type="permission_denied",
            path=path,
        )
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(
            message=f"Error reading {kind.lower()} file: {path}: {e}",
            error_type="file_read_error",
            path=path,
        )


def load_request(path: Path) -> NestingRequestSchema:
    """Load and validate an optimization request from a JSON file.

    Args:
        path: Path to the JSON request file

    Returns:
        A validated NestingRequestSchema instance

    Raises:
        ConfigError: If the file cannot be loaded or validated.
            The error_type attribute indicates the specific error category:
            - "file_not_found": File does not exist
            - "permission_denied" / "file_read_error": File cannot be read
            - "json_parse": Invalid JSON syntax
            - "validation": Schema validation failed

    Example:
        >>> try:
        ...     request = load_request(Path("order-42.json"))
        ... except ConfigError as e:
        ...     for detail in e.details:
        ...         print(f"  {detail['path']}: {detail['message']}")
    """
    content = _read_text(path, "Request")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(
            message=(
                f"Invalid JSON in request file: {path} "
                f"(line {e.lineno}, column {e.colno}): {e.msg}"
            ),
            error_type="json_parse",
            path=path,
            details=[{"line": e.lineno, "column": e.colno, "message": e.msg}],
        )

    try:
        request = NestingRequestSchema.model_validate(data)
    except PydanticValidationError as e:
        details = _extract_validation_errors(e)
        raise ConfigError(
            message=_format_validation_error_message(details),
            error_type="validation",
            path=path,
            details=details,
        )

    logger.debug("Loaded request %s with %d part(s)", path, len(request.parts))
    return request


def load_request_from_dict(data: dict[str, Any]) -> NestingRequestSchema:
    """Load and validate an optimization request from a dictionary.

    Args:
        data: Dictionary containing request data

    Returns:
        A validated NestingRequestSchema instance

    Raises:
        ConfigError: If the data fails validation.
    """
    try:
        return NestingRequestSchema.model_validate(data)
    except PydanticValidationError as e:
        details = _extract_validation_errors(e)
        raise ConfigError(
            message=_format_validation_error_message(details),
            error_type="validation",
            details=details,
        )


def load_parts_csv(path: Path) -> list[PartSchema]:
    """Load a part list from a CSV file.

    The file starts with a header row naming the columns
    ``id,width,length,quantity,thickness,grade,projectName`` in any order;
    ``projectName`` may be omitted. Blank lines are skipped. A row with a
    blank id is given the id ``row-<line number>``.

    Args:
        path: Path to the CSV file

    Returns:
        Part records in file order.

    Raises:
        ConfigError: With error_type "csv_parse" for a malformed file or
            missing columns, and "validation" for values of the wrong type.
    """
    content = _read_text(path, "Parts")
    reader = csv.DictReader(io.StringIO(content, newline=""), skipinitialspace=True)

    try:
        header = [name.strip() for name in (reader.fieldnames or [])]
        missing = sorted(REQUIRED_CSV_COLUMNS - set(header))
        if missing:
            raise ConfigError(
                message=f"Parts file {path} is missing column(s): {', '.join(missing)}",
                error_type="csv_parse",
                path=path,
                details=[{"line": 1, "message": f"missing column {name}"} for name in missing],
            )
        unknown = [name for name in header if name not in CSV_COLUMNS]
        if unknown:
            raise ConfigError(
                message=f"Parts file {path} has unknown column(s): {', '.join(unknown)}",
                error_type="csv_parse",
                path=path,
                details=[{"line": 1, "message": f"unknown column {name}"} for name in unknown],
            )
        reader.fieldnames = header

        parts: list[PartSchema] = []
        details: list[dict[str, Any]] = []
        index = 0
        for row in reader:
            values = {
                key: (value or "").strip()
                for key, value in row.items()
                if key is not None
            }
            if not any(values.values()):
                continue
            if None in row:
                raise ConfigError(
                    message=f"Too many fields on line {reader.line_num} of {path}",
                    error_type="csv_parse",
                    path=path,
                    details=[{"line": reader.line_num, "message": "too many fields"}],
                )
            if not values.get("id"):
                values["id"] = f"row-{reader.line_num}"
            try:
                parts.append(PartSchema.model_validate(values))
            except PydanticValidationError as e:
                details.extend(
                    dict(detail, line=reader.line_num)
                    for detail in _extract_validation_errors(e, ("parts", index))
                )
            index += 1
    except csv.Error as e:
        raise ConfigError(
            message=f"Invalid CSV in parts file: {path} (line {reader.line_num}): {e}",
            error_type="csv_parse",
            path=path,
            details=[{"line": reader.line_num, "message": str(e)}],
        )

    if details:
        raise ConfigError(
            message=_format_validation_error_message(details, "Parts file validation failed:"),
            error_type="validation",
            path=path,
            details=details,
        )

    logger.debug("Loaded %d part(s) from %s", len(parts), path)
    return parts
