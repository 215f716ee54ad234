"""Conversion of configuration models into domain objects."""

from __future__ import annotations

from typing import Sequence

from coilnest.application.config.schema import NestingParametersSchema, PartSchema
from coilnest.domain.value_objects import Part, WeightRange
from coilnest.infrastructure.bin_packing import NestingParameters


def config_to_parts(parts: Sequence[PartSchema]) -> list[Part]:
    """Convert part records to domain parts, keeping their order.

    Values are passed through unchecked; the engine validates them
    collectively.
    """
    return [
        Part(
            id=record.id,
            width=record.width,
            length=record.length,
            quantity=record.quantity,
            thickness=record.thickness,
            grade=record.grade.strip(),
            project_name=record.project_name,
        )
        for record in parts
    ]


def config_to_parameters(
    config: NestingParametersSchema,
    **overrides: object,
) -> NestingParameters:
    """Convert Pydantic nesting parameters to the domain dataclass.

    Args:
        config: Validated parameter schema.
        **overrides: Field values that replace the configured ones when not
            None (command line options, for example).

    Returns:
        NestingParameters ready for the engine.

    Raises:
        ValueError: If an override makes the parameters invalid.
    """
    values: dict[str, object] = {
        "max_sheet_length": config.max_sheet_length,
        "kerf": config.kerf,
        "candidate_coil_widths": tuple(config.candidate_coil_widths),
        "roll_weight_range": WeightRange(
            min=config.roll_weight_range.min,
            max=config.roll_weight_range.max,
        ),
        "algorithm": config.algorithm,
        "target_utilization": config.target_utilization,
        "length_margin": config.length_margin,
        "max_balancing_passes": config.max_balancing_passes,
        "max_width_evaluations": config.max_width_evaluations,
        "seed": config.seed,
        "ordering_iterations": config.ordering_iterations,
        "workers": config.workers,
    }
    unknown = set(overrides) - set(values)
    if unknown:
        raise TypeError(f"Unknown parameter override(s): {', '.join(sorted(unknown))}")
    values.update({key: value for key, value in overrides.items() if value is not None})
    return NestingParameters(**values)  # type: ignore[arg-type]
