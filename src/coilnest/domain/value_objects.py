"""Core value objects for coil nesting.

All dimensions are in millimetres and all weights in kilograms.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Density of steel expressed in kg per cubic millimetre (7850 kg/m^3).
STEEL_DENSITY_KG_PER_MM3 = 0.00000785


def steel_weight(width: float, length: float, thickness: float) -> float:
    """Weight in kg of a steel sheet of the given dimensions in mm."""
    return width * length * thickness * STEEL_DENSITY_KG_PER_MM3


class NestingAlgorithm(str, Enum):
    """Heuristic tuning selector.

    Every algorithm honours the same placement and weight contract; they only
    differ in how hard the engine searches for a better layout.
    """

    STANDARD = "standard"
    GENETIC = "genetic"
    SIMULATED_ANNEALING = "simulated_annealing"
    BZ12 = "bz12"

    @classmethod
    def parse(cls, value: str | NestingAlgorithm) -> NestingAlgorithm:
        """Parse an enum value or one of the descriptive UI labels."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        aliases = {
            "standard simulation": cls.STANDARD,
            "genetic algorithm": cls.GENETIC,
            "simulated annealing": cls.SIMULATED_ANNEALING,
            "bz12-style": cls.BZ12,
            "bz12 style": cls.BZ12,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized.replace(" ", "_").replace("-", "_"))
        except ValueError:
            valid = ", ".join(a.value for a in cls)
            raise ValueError(
                f"Unknown algorithm '{value}'. Must be one of: {valid}"
            ) from None


@dataclass(frozen=True)
class WeightRange:
    """Inclusive window a finished roll's weight must fall into."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if self.min <= 0:
            raise ValueError("Minimum roll weight must be positive")
        if self.max < self.min:
            raise ValueError("Maximum roll weight must not be below the minimum")

    def contains(self, weight: float) -> bool:
        return self.min <= weight <= self.max


@dataclass(frozen=True)
class Part:
    """A flat steel part as ordered by a project.

    Values are not checked on construction so that a whole part list can be
    validated at once; see :func:`coilnest.domain.validation.validate_parts`.

    Attributes:
        id: Opaque identifier.
        width: Part width in mm.
        length: Part length in mm.
        quantity: Number of identical pieces required.
        thickness: Plate thickness in mm.
        grade: Steel grade, e.g. "SS400".
        project_name: Project label carried through for reporting.
    """

    id: str
    width: float
    length: float
    quantity: int
    thickness: float
    grade: str
    project_name: str = ""

    @property
    def area(self) -> float:
        """Area of a single piece in square mm."""
        return self.width * self.length

    @property
    def material_key(self) -> MaterialKey:
        return MaterialKey(grade=self.grade, thickness=self.thickness)


@dataclass(frozen=True)
class PartInstance:
    """One physical piece of a part (parts expand by quantity).

    Attributes:
        part: The source part.
        index: 1-based index of this piece among the part's quantity.
        exceeds_sheet_length: True if the piece is longer than the maximum
            sheet length and can therefore never be placed.
    """

    part: Part
    index: int = 1
    exceeds_sheet_length: bool = False

    @property
    def instance_id(self) -> str:
        if self.part.quantity == 1:
            return self.part.id
        return f"{self.part.id}#{self.index}"

    @property
    def width(self) -> float:
        return self.part.width

    @property
    def length(self) -> float:
        return self.part.length

    @property
    def area(self) -> float:
        return self.part.area


@dataclass(frozen=True)
class MaterialKey:
    """Grouping key: parts of one grade and thickness share coils."""

    grade: str
    thickness: float

    @property
    def label(self) -> str:
        """Key as displayed, e.g. ``SS400_2mm``."""
        return f"{self.grade}_{self.thickness:g}mm"

    def __str__(self) -> str:
        return self.label


class WarningCode(str, Enum):
    """Non-fatal conditions reported alongside a result."""

    UNPLACEABLE_PART = "unplaceable_part"
    SUB_MINIMUM_WEIGHT = "sub_minimum_weight"
    CONVERGENCE_LIMIT = "convergence_limit"


@dataclass(frozen=True)
class NestingWarning:
    """A structured warning attached to an optimization result."""

    code: WarningCode
    message: str
    material_key: str | None = None
    part_id: str | None = None
    sheet_number: int | None = None


@dataclass(frozen=True)
class UnplaceablePart:
    """Pieces of one part that could not be nested.

    Attributes:
        part_id: Source part identifier.
        material_key: Label of the material group.
        instances: Number of pieces left unplaced.
        reason: Machine-readable reason, one of ``exceeds_max_sheet_length``,
            ``exceeds_coil_width`` or ``exceeds_max_roll_weight``.
    """

    part_id: str
    material_key: str
    instances: int
    reason: str
