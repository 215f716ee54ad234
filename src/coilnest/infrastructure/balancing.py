"""Inter-sheet balancing: pull parts off the last sheet.

The last sheet of a group is the waste buffer. After the initial pass, the
balancer moves parts from it into earlier sheets that are below the target
utilization, so that waste concentrates on the last sheet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from coilnest.domain.grouping import sort_instances
from coilnest.infrastructure.bin_packing import EPSILON, NestingParameters, SheetState

if TYPE_CHECKING:
    from coilnest.infrastructure.bin_packing import NestedPart, SheetPacker
    from coilnest.infrastructure.weight_governor import WeightLengthGovernor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceReport:
    """Outcome of a balancing run.

    Attributes:
        moves: Parts moved off the last sheet.
        passes: Passes performed.
        converged: False if the pass cap stopped balancing while moves
            were still being made.
        sheets_removed: Last sheets emptied and dropped.
    """

    moves: int = 0
    passes: int = 0
    converged: bool = True
    sheets_removed: int = 0


class InterSheetBalancer:
    """Moves parts from the last sheet into under-utilized earlier sheets.

    Each pass visits every sheet except the last whose utilization is below
    the target and offers it the last sheet's parts, largest first. A part
    moves if it fits the receiving sheet within its length ceiling, which
    keeps the sheet within the maximum roll weight. The part is first tried
    in the sheet's current arrangement; failing that the sheet is re-packed
    from scratch with the part included, and the move is accepted only when
    every piece fits. The last sheet is then re-packed so its cut length
    shrinks with its contents.

    Attributes:
        parameters: Nesting parameters (target utilization, pass cap).
        packer: Packer used to place parts on the receiving sheet.
        governor: Weight governor recomputing cut lengths.
    """

    def __init__(
        self,
        parameters: NestingParameters,
        packer: SheetPacker,
        governor: WeightLengthGovernor,
    ) -> None:
        self.parameters = parameters
        self.packer = packer
        self.governor = governor

    def balance(self, sheets: list[SheetState]) -> BalanceReport:
        """Balance a group's sheets in place.

        Args:
            sheets: Finalized sheets of one group; an emptied last sheet is
                removed from the list.

        Returns:
            BalanceReport describing what happened.
        """
        if len(sheets) < 2:
            return BalanceReport()

        target = self.parameters.target_utilization
        total_moves = 0
        removed = 0
        # (sheet index, placement count, part size) of moves known to fail
        failed: set[tuple[int, int, float, float]] = set()

        for pass_number in range(1, self.parameters.max_balancing_passes + 1):
            moves = 0
            for index, sheet in enumerate(sheets[:-1]):
                if index >= len(sheets) - 1:
                    break
                if sheet.utilization >= target:
                    continue
                last = sheets[-1]
                moved = self._fill_from(index, sheet, last, failed)
                if not moved:
                    continue
                moves += moved
                if last.placements:
                    self._compact(last)
                else:
                    sheets.pop()
                    removed += 1
                self.governor.finalize(sheets)

            total_moves += moves
            logger.debug("Balancing pass %d moved %d part(s)", pass_number, moves)
            if moves == 0:
                return BalanceReport(
                    moves=total_moves,
                    passes=pass_number,
                    converged=True,
                    sheets_removed=removed,
                )

        logger.debug(
            "Balancing stopped after %d passes with moves still possible",
            self.parameters.max_balancing_passes,
        )
        return BalanceReport(
            moves=total_moves,
            passes=self.parameters.max_balancing_passes,
            converged=False,
            sheets_removed=removed,
        )

    def _fill_from(
        self,
        index: int,
        sheet: SheetState,
        last: SheetState,
        failed: set[tuple[int, int, float, float]],
    ) -> int:
        ceiling = self.governor.length_ceiling(sheet.width, sheet.thickness)
        capacity = sheet.width * ceiling
        candidates = sorted(
            last.placements,
            key=lambda p: (-p.area, p.instance_id),
        )
        moves = 0
        for placed in candidates:
            instance = placed.instance
            attempt = (index, len(sheet.placements), instance.width, instance.length)
            if attempt in failed or sheet.used_area + instance.area > capacity:
                continue
            if not self._place(sheet, placed, ceiling):
                failed.add(attempt)
                continue
            last.remove(placed)
            moves += 1
        return moves

    def _place(self, sheet: SheetState, placed: NestedPart, ceiling: float) -> bool:
        """Put a part on a sheet, re-packing the sheet if it has no gap."""
        placement = self.packer.find_placement(sheet, placed.instance, ceiling)
        if placement is not None:
            sheet.add(placement)
            return True

        existing = [p.instance for p in sheet.placements]
        orders = (
            [placed.instance, *sort_instances(existing)],
            sort_instances([*existing, placed.instance]),
        )
        for order in orders:
            trial = SheetState(width=sheet.width, thickness=sheet.thickness, margin=sheet.margin)
            if not self.packer.fill(trial, order, ceiling):
                sheet.reset(trial.placements)
                return True
        return False

    def _compact(self, last: SheetState) -> None:
        """Re-pack the last sheet's remaining parts if that shortens it."""
        ceiling = self.governor.length_ceiling(last.width, last.thickness)
        trial = SheetState(width=last.width, thickness=last.thickness, margin=last.margin)
        order = sort_instances([p.instance for p in last.placements])
        leftovers = self.packer.fill(trial, order, ceiling)
        if not leftovers and trial.content_length < last.content_length - EPSILON:
            last.reset(trial.placements)
