"""Validate command for checking request files and part lists.

This module provides the `validate` command that checks a JSON request file,
and optionally a CSV part list, for errors and advisories.
"""

from pathlib import Path
from typing import Annotated

import typer

from coilnest.application.config import (
    ConfigError,
    NestingRequestSchema,
    PartSchema,
    ValidationResult,
    load_parts_csv,
    load_request,
    validate_request,
)


def load_inputs(
    request_file: Path,
    parts_file: Path | None,
) -> tuple[NestingRequestSchema, list[PartSchema]]:
    """Load a request and the parts to nest.

    Parts from ``parts_file`` replace the parts listed in the request.

    Raises:
        ConfigError: If either file cannot be loaded or validated.
    """
    request = load_request(request_file)
    if parts_file is None:
        return request, list(request.parts)
    return request, load_parts_csv(parts_file)


def display_load_error(error: ConfigError) -> None:
    """Display a request or part list loading error.

    Args:
        error: The ConfigError to display
    """
    typer.echo("Errors:", err=True)
    if error.error_type == "file_not_found":
        typer.echo(f"  File not found: {error.path}", err=True)
    elif error.error_type == "json_parse":
        typer.echo("  Invalid JSON syntax", err=True)
        for detail in error.details:
            line = detail.get("line", "?")
            column = detail.get("column", "?")
            message = detail.get("message", "Unknown error")
            typer.echo(f"    Line {line}, Column {column}: {message}", err=True)
    elif error.error_type == "csv_parse":
        typer.echo(f"  Invalid part list: {error.path}", err=True)
        for detail in error.details:
            line = detail.get("line", "?")
            message = detail.get("message", "Unknown error")
            typer.echo(f"    Line {line}: {message}", err=True)
    elif error.error_type == "validation":
        for detail in error.details:
            path = detail.get("path", "unknown")
            message = detail.get("message", "Unknown error")
            value = detail.get("value")
            typer.echo(f"  {path}: {message}", err=True)
            if value is not None:
                typer.echo(f"    Value: {value!r}", err=True)
    else:
        typer.echo(f"  {error.message}", err=True)


def _display_validation_result(result: ValidationResult) -> None:
    if result.errors:
        typer.echo("Errors:", err=True)
        for error in result.errors:
            typer.echo(f"  {error.path}: {error.message}", err=True)
            if error.value is not None:
                typer.echo(f"    Value: {error.value!r}", err=True)
        typer.echo()

    if result.warnings:
        typer.echo("Warnings:")
        for warning in result.warnings:
            typer.echo(f"  {warning.path}: {warning.message}")
            if warning.suggestion:
                typer.echo(f"    Suggestion: {warning.suggestion}")
        typer.echo()

    if result.errors:
        typer.echo(
            f"Validation failed: {len(result.errors)} error(s), "
            f"{len(result.warnings)} warning(s)",
            err=True,
        )
    elif result.warnings:
        typer.echo(f"Validation passed with {len(result.warnings)} warning(s)")
    else:
        typer.echo("Validation passed. Request is valid.")


def validate_command(
    request_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON request file to validate"),
    ],
    parts_file: Annotated[
        Path | None,
        typer.Option("--parts", "-p", help="CSV part list replacing the request's parts"),
    ] = None,
) -> None:
    """Validate a request file without optimizing.

    Checks for:
    - JSON and CSV syntax errors
    - Schema validation errors (missing fields, wrong types, bad parameters)
    - Invalid part values (non-positive sizes, quantities, empty grades)
    - Advisories (parts that cannot fit any coil, unreachable roll weights)

    Exit codes:
        0 - Request is valid with no warnings
        1 - Request has errors (cannot be optimized)
        2 - Request is valid but has warnings

    Example:
        coilnest validate order-42.json --parts parts.csv
    """
    typer.echo(f"Validating {request_file}...")
    typer.echo()

    try:
        request, parts = load_inputs(request_file, parts_file)
    except ConfigError as e:
        display_load_error(e)
        typer.echo()
        typer.echo("Validation failed.", err=True)
        raise typer.Exit(code=1)

    result = validate_request(request, parts)
    _display_validation_result(result)
    raise typer.Exit(code=result.exit_code)
