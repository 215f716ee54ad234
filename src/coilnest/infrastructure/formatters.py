"""Plain-text formatting of cutting plans for terminal display."""

from __future__ import annotations

from coilnest.infrastructure.result_assembly import GroupResult, OptimizationResult


def _percent(value: float | None) -> str:
    return "-" if value is None else f"{value:.2f}%"


class CuttingPlanFormatter:
    """Formats an optimization result as tables.

    Figures are rounded to two decimals here and nowhere else.
    """

    def __init__(self, show_placements: bool = False) -> None:
        self._show_placements = show_placements

    def format(self, result: OptimizationResult) -> str:
        summary = result.summary
        lines = [
            "CUTTING PLAN",
            "=" * 72,
            f"Parts nested:  {summary.total_parts_nested} of {summary.total_parts}",
            f"Groups:        {summary.number_of_groups}",
            f"Overall waste: {summary.overall_waste_percentage:.2f}%",
        ]
        for group in result.groups:
            lines.append("")
            lines.extend(self._format_group(group))

        if result.unplaceable_parts:
            lines.append("")
            lines.append("UNPLACEABLE PARTS")
            lines.append("-" * 72)
            for unplaced in result.unplaceable_parts:
                lines.append(
                    f"{unplaced.part_id:<20} {unplaced.material_key:<16} "
                    f"x{unplaced.instances:<5} {unplaced.reason}"
                )

        if result.warnings:
            lines.append("")
            lines.append("WARNINGS")
            lines.append("-" * 72)
            for warning in result.warnings:
                lines.append(f"[{warning.code.value}] {warning.message}")

        return "\n".join(lines)

    def _format_group(self, group: GroupResult) -> list[str]:
        width = "-" if group.coil_width is None else f"{group.coil_width:.2f}"
        lines = [
            f"{group.material_key.label} (coil width {width} mm)",
            "-" * 72,
            f"{'Sheet':<7} {'Length (mm)':>12} {'Weight (kg)':>12} {'Parts':>6} {'Waste':>9}  Note",
        ]
        for layout in group.layouts:
            notes = []
            if layout.is_last:
                notes.append("last")
            if layout.underweight:
                notes.append("underweight")
            lines.append(
                f"{layout.sheet_number:<7} {layout.length:>12.2f} {layout.weight_kg:>12.2f} "
                f"{layout.piece_count:>6} {layout.waste_percentage:>8.2f}%  {', '.join(notes)}"
            )
            if self._show_placements:
                for placed in layout.placements:
                    turned = " rotated" if placed.rotated else ""
                    lines.append(
                        f"    {placed.instance_id:<20} at ({placed.x:.2f}, {placed.y:.2f}){turned}"
                    )
        lines.append(
            f"Main sheets waste: {_percent(group.main_sheets_waste_percentage)}   "
            f"Last sheet waste: {_percent(group.last_sheet_waste_percentage)}   "
            f"Total weight: {group.total_weight_kg:.2f} kg"
        )
        return lines
