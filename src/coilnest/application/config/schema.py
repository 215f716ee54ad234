"""Pydantic models for optimization request files.

A request holds the nesting parameters and, optionally, the part list. Keys
are accepted in snake_case or in the camelCase used by the parts editor
(``maxSheetLength``, ``candidateCoilWidths``, ``rollWeightRange``,
``projectName``).

Part values are only checked for type here. Their ranges are validated by
the domain so that every invalid part is reported by its id.
"""

from __future__ import annotations

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from coilnest.domain.value_objects import NestingAlgorithm

# Supported schema versions for request files
# Version 1.0: Initial schema with parameters and parts
SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0"})


class PartSchema(BaseModel):
    """A part record.

    Attributes:
        id: Part identifier (generated by the loader when blank).
        width: Part width in mm.
        length: Part length in mm.
        quantity: Number of pieces.
        thickness: Plate thickness in mm.
        grade: Steel grade.
        project_name: Project label.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(..., description="Part identifier")
    width: float = Field(..., description="Part width in mm")
    length: float = Field(..., description="Part length in mm")
    quantity: int = Field(..., description="Number of pieces")
    thickness: float = Field(..., description="Plate thickness in mm")
    grade: str = Field(..., description="Steel grade")
    project_name: str = Field(
        default="", alias="projectName", description="Project label"
    )

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:
        """Accept numeric ids such as ``101`` from JSON part lists."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class RollWeightRangeSchema(BaseModel):
    """Inclusive roll weight window in kg."""

    model_config = ConfigDict(extra="forbid")

    min: float = Field(default=4000.0, gt=0, description="Minimum roll weight in kg")
    max: float = Field(default=5500.0, gt=0, description="Maximum roll weight in kg")

    @model_validator(mode="after")
    def validate_order(self) -> "RollWeightRangeSchema":
        """Ensure the maximum is not below the minimum."""
        if self.max < self.min:
            raise ValueError("max must be greater than or equal to min")
        return self


class NestingParametersSchema(BaseModel):
    """Machine and logistics constraints.

    Attributes:
        max_sheet_length: Hard ceiling on sheet length in mm.
        kerf: Minimum gap between nested parts in mm.
        candidate_coil_widths: Admissible widths, as a list or as a
            comma-separated string ("1200, 1250, 1300").
        roll_weight_range: Weight window for every sheet but the last.
        algorithm: Heuristic tuning selector.
        target_utilization: Balancing target for every sheet but the last.
        length_margin: Extra length after the furthest part in mm.
        max_balancing_passes: Pass cap for balancing.
        max_width_evaluations: Width search budget (None evaluates all).
        seed: Seed for genetic and annealing tuning.
        ordering_iterations: Ordering search iterations per width.
        workers: Worker threads, one per material group at most.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    max_sheet_length: float = Field(
        default=18000.0, gt=0, alias="maxSheetLength", description="Maximum sheet length in mm"
    )
    kerf: float = Field(default=5.0, ge=0, description="Kerf in mm")
    candidate_coil_widths: list[float] = Field(
        default_factory=lambda: [float(w) for w in range(1200, 2101, 50)],
        min_length=1,
        alias="candidateCoilWidths",
        description="Candidate coil widths in mm",
    )
    roll_weight_range: RollWeightRangeSchema = Field(
        default_factory=RollWeightRangeSchema,
        alias="rollWeightRange",
        description="Roll weight window in kg",
    )
    algorithm: NestingAlgorithm = Field(
        default=NestingAlgorithm.BZ12, description="Heuristic tuning selector"
    )
    target_utilization: float = Field(
        default=0.88, gt=0, le=1, alias="targetUtilization", description="Balancing target (0-1]"
    )
    length_margin: float = Field(
        default=0.0, ge=0, alias="lengthMargin", description="Margin after the last part in mm"
    )
    max_balancing_passes: int = Field(
        default=10, ge=1, alias="maxBalancingPasses", description="Balancing pass cap"
    )
    max_width_evaluations: int | None = Field(
        default=None, ge=1, alias="maxWidthEvaluations", description="Width search budget"
    )
    seed: int = Field(default=0, description="Seed for ordering search")
    ordering_iterations: int = Field(
        default=12, ge=0, alias="orderingIterations", description="Ordering search iterations"
    )
    workers: int = Field(default=1, ge=1, le=64, description="Worker threads")

    @field_validator("candidate_coil_widths", mode="before")
    @classmethod
    def split_widths(cls, v: object) -> object:
        """Accept a comma-separated string of widths."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("candidate_coil_widths")
    @classmethod
    def validate_widths(cls, v: list[float]) -> list[float]:
        """Ensure every width is positive."""
        if any(w <= 0 for w in v):
            raise ValueError("candidate coil widths must be positive")
        return v

    @field_validator("algorithm", mode="before")
    @classmethod
    def parse_algorithm(cls, v: object) -> object:
        """Accept descriptive labels such as "Genetic Algorithm"."""
        if isinstance(v, str):
            return NestingAlgorithm.parse(v)
        return v


class NestingRequestSchema(BaseModel):
    """Root model of an optimization request.

    Attributes:
        schema_version: Request file format version.
        parameters: Nesting parameters (defaults apply when omitted).
        parts: Part records; may be empty when parts come from a CSV file.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default="1.0", description="Schema version")
    parameters: NestingParametersSchema = Field(
        default_factory=NestingParametersSchema, description="Nesting parameters"
    )
    parts: list[PartSchema] = Field(default_factory=list, description="Parts to nest")

    @field_validator("schema_version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Ensure the schema version is supported."""
        if v not in SUPPORTED_VERSIONS:
            supported = ", ".join(sorted(SUPPORTED_VERSIONS))
            raise ValueError(f"Unsupported schema version '{v}'. Supported: {supported}")
        return v
