"""Validation results and pre-flight advisories for optimization requests.

Errors block an optimization run. Warnings flag requests that will run but
are certain to leave parts unplaced or sheets underweight.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Sequence

from coilnest.application.config.adapter import config_to_parameters, config_to_parts
from coilnest.application.config.schema import NestingRequestSchema, PartSchema
from coilnest.domain.validation import validate_parts
from coilnest.domain.value_objects import Part, steel_weight
from coilnest.infrastructure.bin_packing import NestingParameters


@dataclass
class ValidationError:
    """Represents a blocking validation error.

    Attributes:
        path: JSON path to the invalid field (e.g., "parts[2].width")
        message: Human-readable description of the error
        value: The invalid value that caused the error
    """

    path: str
    message: str
    value: Any = None


@dataclass
class ValidationWarning:
    """Represents a non-blocking validation warning.

    Attributes:
        path: JSON path to the concerning field
        message: Human-readable description of the concern
        suggestion: Optional suggested remediation
    """

    path: str
    message: str
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Container for validation errors and warnings.

    Attributes:
        errors: List of blocking validation errors
        warnings: List of non-blocking validation warnings
    """

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def exit_code(self) -> int:
        """Get the CLI exit code based on validation status.

        Returns:
            0 if valid with no warnings
            1 if there are errors
            2 if valid but has warnings
        """
        if self.errors:
            return 1
        if self.warnings:
            return 2
        return 0

    def add_error(
        self, path: str, message: str, value: Any = None
    ) -> "ValidationResult":
        self.errors.append(ValidationError(path=path, message=message, value=value))
        return self

    def add_warning(
        self, path: str, message: str, suggestion: str | None = None
    ) -> "ValidationResult":
        self.warnings.append(
            ValidationWarning(path=path, message=message, suggestion=suggestion)
        )
        return self


def check_part_values(parts: Sequence[Part]) -> ValidationResult:
    """Report every invalid part value as an error."""
    result = ValidationResult()
    for index, part in enumerate(parts):
        for issue in validate_parts([part]):
            result.add_error(
                path=f"parts[{index}].{issue.field}",
                message=f"Part {issue.part_id}: {issue.message}",
                value=getattr(part, issue.field, None),
            )
    return result


def check_part_advisories(
    parts: Sequence[Part],
    parameters: NestingParameters,
) -> ValidationResult:
    """Warn about parts the engine is certain to leave unplaced.

    Only parts with valid values are checked.
    """
    result = ValidationResult()
    widest = parameters.candidate_coil_widths[-1]

    counts = Counter(part.id for part in parts)
    reported: set[str] = set()
    for index, part in enumerate(parts):
        if counts[part.id] > 1 and part.id not in reported:
            reported.add(part.id)
            result.add_warning(
                path=f"parts[{index}].id",
                message=f"Part id {part.id} is used by {counts[part.id]} parts",
                suggestion="Give every part a unique id so nested pieces can be told apart",
            )

        if validate_parts([part]):
            continue
        if part.length > parameters.max_sheet_length:
            result.add_warning(
                path=f"parts[{index}].length",
                message=(
                    f"Part {part.id} is {part.length:g} mm long, more than the "
                    f"maximum sheet length of {parameters.max_sheet_length:g} mm"
                ),
                suggestion="Split the part or raise the maximum sheet length",
            )
        elif min(part.width, part.length) > widest:
            result.add_warning(
                path=f"parts[{index}].width",
                message=(
                    f"Part {part.id} ({part.width:g} x {part.length:g} mm) is "
                    f"wider than every candidate coil width in both orientations"
                ),
                suggestion=f"Add a candidate coil width of at least {min(part.width, part.length):g} mm",
            )
    return result


def check_weight_advisories(
    parts: Sequence[Part],
    parameters: NestingParameters,
) -> ValidationResult:
    """Warn about thicknesses whose full sheets can never reach the minimum weight."""
    result = ValidationResult()
    widest = parameters.candidate_coil_widths[-1]
    minimum = parameters.roll_weight_range.min

    seen: set[float] = set()
    for part in parts:
        if validate_parts([part]) or part.thickness in seen:
            continue
        seen.add(part.thickness)
        heaviest = steel_weight(widest, parameters.max_sheet_length, part.thickness)
        if heaviest < minimum:
            result.add_warning(
                path="parameters.rollWeightRange.min",
                message=(
                    f"A {widest:g} x {parameters.max_sheet_length:g} mm sheet of "
                    f"{part.thickness:g} mm plate weighs {heaviest:.1f} kg, below the "
                    f"minimum roll weight of {minimum:g} kg"
                ),
                suggestion="Sheets of this thickness will be flagged underweight",
            )
    return result


def validate_request(
    request: NestingRequestSchema,
    parts: Sequence[PartSchema] | None = None,
) -> ValidationResult:
    """Perform full validation of an optimization request.

    Args:
        request: A schema-validated request.
        parts: Part records replacing the request's own (from a CSV file,
            for example).

    Returns:
        ValidationResult containing any errors or warnings
    """
    result = ValidationResult()
    domain_parts = config_to_parts(request.parts if parts is None else parts)

    if not domain_parts:
        result.add_warning(path="parts", message="The request contains no parts")

    errors = check_part_values(domain_parts)
    result.errors.extend(errors.errors)

    try:
        parameters = config_to_parameters(request.parameters)
    except ValueError as e:
        return result.add_error(path="parameters", message=str(e))

    advisories = [
        check_part_advisories(domain_parts, parameters),
        check_weight_advisories(domain_parts, parameters),
    ]
    for advisory in advisories:
        result.warnings.extend(advisory.warnings)
    return result
