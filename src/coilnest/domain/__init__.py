"""Domain layer - parts, materials and grouping."""

from .grouping import MaterialGroup, group_parts, sort_instances
from .validation import InputInvalidError, PartIssue, ensure_valid_parts, validate_parts
from .value_objects import (
    STEEL_DENSITY_KG_PER_MM3,
    MaterialKey,
    NestingAlgorithm,
    NestingWarning,
    Part,
    PartInstance,
    UnplaceablePart,
    WarningCode,
    WeightRange,
    steel_weight,
)

__all__ = [
    "STEEL_DENSITY_KG_PER_MM3",
    "InputInvalidError",
    "MaterialGroup",
    "MaterialKey",
    "NestingAlgorithm",
    "NestingWarning",
    "Part",
    "PartInstance",
    "PartIssue",
    "UnplaceablePart",
    "WarningCode",
    "WeightRange",
    "ensure_valid_parts",
    "group_parts",
    "sort_instances",
    "steel_weight",
    "validate_parts",
]
