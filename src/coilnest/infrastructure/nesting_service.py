"""Coordinates nesting across material groups.

Material groups never share a sheet, so each group is optimized on its own:
width selection, packing, balancing and cut-length decisions. Groups may be
processed by worker threads; results always come back in discovery order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from coilnest.domain.grouping import MaterialGroup
from coilnest.domain.value_objects import (
    NestingWarning,
    PartInstance,
    UnplaceablePart,
    WarningCode,
)
from coilnest.infrastructure.bin_packing import NestingParameters
from coilnest.infrastructure.result_assembly import GroupOutcome, GroupResult
from coilnest.infrastructure.width_selection import WidthSelection, WidthSelector

logger = logging.getLogger(__name__)


class CoilNestingService:
    """Optimizes material groups into sheet layouts.

    Attributes:
        parameters: Nesting parameters shared by every group.
    """

    def __init__(self, parameters: NestingParameters) -> None:
        self.parameters = parameters

    def optimize(self, groups: Sequence[MaterialGroup]) -> list[GroupOutcome]:
        """Optimize every group, one worker per group when configured.

        Args:
            groups: Material groups in discovery order.

        Returns:
            Group outcomes in the same order as ``groups``.
        """
        workers = min(self.parameters.workers, len(groups))
        if workers <= 1:
            return [self.optimize_group(group) for group in groups]

        logger.debug("Optimizing %d groups with %d workers", len(groups), workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.optimize_group, groups))

    def optimize_group(self, group: MaterialGroup) -> GroupOutcome:
        """Select a width for a group and turn its best plan into layouts."""
        # A selector per group keeps worker threads free of shared state
        selection = WidthSelector(self.parameters).select(group)
        plan = selection.plan
        label = group.key.label

        last_number = len(plan.sheets)
        layouts = tuple(
            sheet.to_layout(sheet_number=i, is_last=i == last_number)
            for i, sheet in enumerate(plan.sheets, start=1)
        )
        result = GroupResult(
            material_key=group.key,
            coil_width=plan.width if layouts else None,
            layouts=layouts,
            total_instances=group.total_instances,
        )

        unplaced = [(i, "exceeds_max_sheet_length") for i in group.oversize]
        unplaced.extend(plan.unplaced)
        unplaceable = _summarize_unplaced(label, unplaced)

        warnings = [
            NestingWarning(
                code=WarningCode.UNPLACEABLE_PART,
                message=(
                    f"{u.instances} piece(s) of part {u.part_id} could not be "
                    f"nested ({u.reason.replace('_', ' ')})"
                ),
                material_key=label,
                part_id=u.part_id,
            )
            for u in unplaceable
        ]
        for layout in layouts:
            if layout.underweight:
                logger.warning(
                    "%s sheet %d weighs %.1f kg, below the minimum roll weight",
                    label,
                    layout.sheet_number,
                    layout.weight_kg,
                )
                warnings.append(
                    NestingWarning(
                        code=WarningCode.SUB_MINIMUM_WEIGHT,
                        message=(
                            f"Sheet {layout.sheet_number} weighs "
                            f"{layout.weight_kg:.1f} kg, below the minimum of "
                            f"{self.parameters.roll_weight_range.min:g} kg; the "
                            f"maximum sheet length is reached first"
                        ),
                        material_key=label,
                        sheet_number=layout.sheet_number,
                    )
                )
        warnings.extend(_convergence_warnings(label, selection))

        logger.info(
            "%s: %d of %d pieces nested on %d sheet(s) at width %s",
            label,
            result.total_parts_nested,
            result.total_instances,
            result.total_sheets_used,
            result.coil_width,
        )
        return GroupOutcome(result=result, unplaceable=unplaceable, warnings=warnings)


def _summarize_unplaced(
    label: str,
    unplaced: Sequence[tuple[PartInstance, str]],
) -> list[UnplaceablePart]:
    counts: dict[tuple[str, str], int] = {}
    for instance, reason in unplaced:
        key = (instance.part.id, reason)
        counts[key] = counts.get(key, 0) + 1
    for (part_id, reason), count in counts.items():
        logger.warning("%s: %d piece(s) of part %s unplaceable: %s", label, count, part_id, reason)
    return [
        UnplaceablePart(part_id=part_id, material_key=label, instances=count, reason=reason)
        for (part_id, reason), count in counts.items()
    ]


def _convergence_warnings(label: str, selection: WidthSelection) -> list[NestingWarning]:
    warnings: list[NestingWarning] = []
    if selection.budget_exhausted:
        warnings.append(
            NestingWarning(
                code=WarningCode.CONVERGENCE_LIMIT,
                message=(
                    f"Width search evaluated {len(selection.evaluated_widths)} "
                    f"candidate width(s) before its budget ran out"
                ),
                material_key=label,
            )
        )
    if not selection.plan.balance.converged:
        warnings.append(
            NestingWarning(
                code=WarningCode.CONVERGENCE_LIMIT,
                message=(
                    f"Balancing stopped after {selection.plan.balance.passes} "
                    f"pass(es) before converging"
                ),
                material_key=label,
            )
        )
    return warnings
