"""Pydantic response schemas for the REST API.

Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NestedPartSchema(_CamelModel):
    """A part instance placed on a sheet."""

    part_id: str = Field(..., description="Source part id")
    instance_id: str = Field(..., description="Piece id, '<part id>#<n>' for quantities above 1")
    project_name: str = Field(default="", description="Project label of the source part")
    x: float = Field(..., description="Lower-left corner across the coil width in mm")
    y: float = Field(..., description="Lower-left corner along the coil length in mm")
    width: float = Field(..., description="Part width in mm")
    length: float = Field(..., description="Part length in mm")
    rotated: bool = Field(default=False, description="Turned 90 degrees")


class SheetLayoutSchema(_CamelModel):
    """A cut sheet and the parts nested on it."""

    sheet_number: int = Field(..., description="1-based position within the group")
    width: float = Field(..., description="Coil width in mm")
    length: float = Field(..., description="Cut length in mm")
    weight_kg: float = Field(..., description="Sheet weight in kg")
    is_last_sheet: bool = Field(..., description="Waste buffer sheet of the group")
    underweight: bool = Field(default=False, description="Below the minimum roll weight")
    nested_parts: list[NestedPartSchema] = Field(default_factory=list)
    waste_percentage: float = Field(..., description="Unused area in percent")


class GroupResultSchema(_CamelModel):
    """Sheets produced for one grade and thickness."""

    material_key: str = Field(..., description="'<grade>_<thickness>mm'")
    thickness: float
    grade: str
    coil_width: float | None = Field(default=None, description="Selected coil width in mm")
    total_parts_nested: int
    total_sheets_used: int
    average_waste_percentage: float
    main_sheets_waste_percentage: float | None = None
    last_sheet_waste_percentage: float | None = None
    layouts: list[SheetLayoutSchema] = Field(default_factory=list)


class SummarySchema(_CamelModel):
    """Totals across all groups."""

    total_parts: int
    total_parts_nested: int
    number_of_groups: int
    overall_waste_percentage: float


class UnplaceablePartSchema(_CamelModel):
    """Pieces of a part that could not be nested."""

    part_id: str
    material_key: str
    instances: int
    reason: str


class NestingWarningSchema(_CamelModel):
    """A non-fatal condition met during optimization."""

    code: str
    message: str
    material_key: str | None = None
    part_id: str | None = None
    sheet_number: int | None = None


class OptimizationResponseSchema(_CamelModel):
    """Response for cutting plan optimization."""

    summary: SummarySchema
    results_by_group: list[GroupResultSchema] = Field(default_factory=list)
    unplaceable_parts: list[UnplaceablePartSchema] = Field(default_factory=list)
    warnings: list[NestingWarningSchema] = Field(default_factory=list)


class ValidationResultSchema(BaseModel):
    """Response for request validation."""

    is_valid: bool = Field(..., description="Whether the request can be optimized")
    errors: list[dict[str, str]] = Field(
        default_factory=list, description="Validation errors"
    )
    warnings: list[dict[str, str]] = Field(
        default_factory=list, description="Validation warnings"
    )


class ErrorResponseSchema(BaseModel):
    """Error response body."""

    error: str = Field(..., description="Error message")
    error_type: str = Field(..., description="Error category")
    details: list[dict] | None = Field(default=None, description="Error details")
