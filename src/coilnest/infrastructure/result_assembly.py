"""Result models and aggregation of per-group statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from coilnest.domain.value_objects import (
    MaterialKey,
    NestingWarning,
    UnplaceablePart,
)
from coilnest.infrastructure.bin_packing import NestedPart, SheetLayout


@dataclass(frozen=True)
class GroupResult:
    """Sheets produced for one material group.

    Attributes:
        material_key: Grade and thickness of the group.
        coil_width: Selected coil width in mm, None if nothing was packed.
        layouts: Sheets in order; the last one is the waste buffer.
        total_instances: Pieces in the group, placed or not.
    """

    material_key: MaterialKey
    coil_width: float | None
    layouts: tuple[SheetLayout, ...]
    total_instances: int

    @property
    def total_parts_nested(self) -> int:
        return sum(layout.piece_count for layout in self.layouts)

    @property
    def total_sheets_used(self) -> int:
        return len(self.layouts)

    @property
    def used_area(self) -> float:
        return sum(layout.used_area for layout in self.layouts)

    @property
    def sheet_area(self) -> float:
        return sum(layout.area for layout in self.layouts)

    @property
    def total_weight_kg(self) -> float:
        return sum(layout.weight_kg for layout in self.layouts)

    @property
    def average_waste_percentage(self) -> float:
        """Mean of the per-sheet waste percentages."""
        if not self.layouts:
            return 0.0
        return sum(layout.waste_percentage for layout in self.layouts) / len(self.layouts)

    @property
    def main_sheets_waste_percentage(self) -> float | None:
        """Mean waste of every sheet but the last, None with one sheet."""
        main = self.layouts[:-1]
        if not main:
            return None
        return sum(layout.waste_percentage for layout in main) / len(main)

    @property
    def last_sheet_waste_percentage(self) -> float | None:
        if not self.layouts:
            return None
        return self.layouts[-1].waste_percentage


@dataclass(frozen=True)
class OptimizationSummary:
    """Totals across all material groups."""

    total_parts: int
    total_parts_nested: int
    number_of_groups: int
    overall_waste_percentage: float


@dataclass(frozen=True)
class OptimizationResult:
    """Complete cutting plan for a part list.

    Attributes:
        summary: Totals across all groups.
        groups: One result per material group, in discovery order.
        unplaceable_parts: Pieces that could not be nested, per part.
        warnings: Non-fatal conditions met during the run.
    """

    summary: OptimizationSummary
    groups: tuple[GroupResult, ...]
    unplaceable_parts: tuple[UnplaceablePart, ...] = ()
    warnings: tuple[NestingWarning, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary.

        Nested parts reference their source part by id only. Values keep
        full precision; round for display only.
        """
        return {
            "summary": {
                "totalParts": self.summary.total_parts,
                "totalPartsNested": self.summary.total_parts_nested,
                "numberOfGroups": self.summary.number_of_groups,
                "overallWastePercentage": self.summary.overall_waste_percentage,
            },
            "resultsByGroup": [_group_to_dict(group) for group in self.groups],
            "unplaceableParts": [
                {
                    "partId": u.part_id,
                    "materialKey": u.material_key,
                    "instances": u.instances,
                    "reason": u.reason,
                }
                for u in self.unplaceable_parts
            ],
            "warnings": [
                {
                    "code": w.code.value,
                    "message": w.message,
                    "materialKey": w.material_key,
                    "partId": w.part_id,
                    "sheetNumber": w.sheet_number,
                }
                for w in self.warnings
            ],
        }


def _group_to_dict(group: GroupResult) -> dict[str, Any]:
    return {
        "materialKey": group.material_key.label,
        "thickness": group.material_key.thickness,
        "grade": group.material_key.grade,
        "coilWidth": group.coil_width,
        "totalPartsNested": group.total_parts_nested,
        "totalSheetsUsed": group.total_sheets_used,
        "averageWastePercentage": group.average_waste_percentage,
        "mainSheetsWastePercentage": group.main_sheets_waste_percentage,
        "lastSheetWastePercentage": group.last_sheet_waste_percentage,
        "layouts": [_layout_to_dict(layout) for layout in group.layouts],
    }


def _layout_to_dict(layout: SheetLayout) -> dict[str, Any]:
    return {
        "sheetNumber": layout.sheet_number,
        "width": layout.width,
        "length": layout.length,
        "weightKg": layout.weight_kg,
        "isLastSheet": layout.is_last,
        "underweight": layout.underweight,
        "nestedParts": [_placement_to_dict(p) for p in layout.placements],
        "wastePercentage": layout.waste_percentage,
    }


def _placement_to_dict(placement: NestedPart) -> dict[str, Any]:
    part = placement.instance.part
    return {
        "partId": part.id,
        "instanceId": placement.instance_id,
        "projectName": part.project_name,
        "x": placement.x,
        "y": placement.y,
        "width": part.width,
        "length": part.length,
        "rotated": placement.rotated,
    }


@dataclass
class GroupOutcome:
    """Everything the engine learned about one group."""

    result: GroupResult
    unplaceable: list[UnplaceablePart] = field(default_factory=list)
    warnings: list[NestingWarning] = field(default_factory=list)


class ResultAssembler:
    """Aggregates group outcomes into the final result."""

    def assemble(self, outcomes: Sequence[GroupOutcome]) -> OptimizationResult:
        """Build the result, keeping groups in the given order.

        The overall waste is area weighted across every sheet of every
        group, not a mean of the group percentages.
        """
        groups = tuple(o.result for o in outcomes)
        total_area = sum(g.sheet_area for g in groups)
        used_area = sum(g.used_area for g in groups)
        overall_waste = (1 - used_area / total_area) * 100 if total_area else 0.0

        summary = OptimizationSummary(
            total_parts=sum(g.total_instances for g in groups),
            total_parts_nested=sum(g.total_parts_nested for g in groups),
            number_of_groups=len(groups),
            overall_waste_percentage=overall_waste,
        )
        return OptimizationResult(
            summary=summary,
            groups=groups,
            unplaceable_parts=tuple(u for o in outcomes for u in o.unplaceable),
            warnings=tuple(w for o in outcomes for w in o.warnings),
        )
