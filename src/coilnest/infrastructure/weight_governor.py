"""Roll weight and sheet length rules.

A sheet's weight grows linearly with its length, so the weight window
translates into a length window per coil width and thickness:

- the maximum weight caps how long a sheet may grow (together with the
  absolute maximum sheet length),
- the minimum weight sets how long a sheet must be cut.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from coilnest.domain.value_objects import STEEL_DENSITY_KG_PER_MM3, steel_weight
from coilnest.infrastructure.bin_packing import NestingParameters, SheetState

logger = logging.getLogger(__name__)


class WeightLengthGovernor:
    """Decides length ceilings and final cut lengths of sheets.

    Cut lengths are whole millimetres so that a sheet padded to the minimum
    weight reaches it despite floating point rounding.

    Attributes:
        parameters: Nesting parameters (weight range, maximum length).
    """

    def __init__(self, parameters: NestingParameters) -> None:
        self.parameters = parameters

    def weight(self, width: float, length: float, thickness: float) -> float:
        """Sheet weight in kg."""
        return steel_weight(width, length, thickness)

    def length_for_weight(self, weight: float, width: float, thickness: float) -> float:
        """Exact length at which a sheet reaches the given weight."""
        return weight / (width * thickness * STEEL_DENSITY_KG_PER_MM3)

    def length_ceiling(self, width: float, thickness: float) -> float:
        """Longest permitted sheet: max sheet length or max roll weight."""
        max_weight = self.parameters.roll_weight_range.max
        limit = math.floor(self.length_for_weight(max_weight, width, thickness))
        while limit > 0 and self.weight(width, limit, thickness) > max_weight:
            limit -= 1
        return min(self.parameters.max_sheet_length, float(limit))

    def minimum_cut_length(self, width: float, thickness: float) -> float:
        """Shortest whole-mm length that reaches the minimum roll weight."""
        min_weight = self.parameters.roll_weight_range.min
        length = math.ceil(self.length_for_weight(min_weight, width, thickness))
        while self.weight(width, length, thickness) < min_weight:
            length += 1
        return float(length)

    def finalize(self, sheets: Sequence[SheetState]) -> None:
        """Set the cut length of every sheet of a group, in place.

        Every sheet but the last must weigh at least the minimum roll weight.
        A light sheet is cut longer up to the minimum weight when that stays
        within the length ceiling; otherwise it keeps its content length and
        is flagged underweight. The last sheet is the group's waste buffer:
        it is cut right after its parts and exempt from the minimum.

        Args:
            sheets: Sheets of one group in order.
        """
        min_weight = self.parameters.roll_weight_range.min
        last_index = len(sheets) - 1

        for index, sheet in enumerate(sheets):
            content = sheet.content_length
            sheet.cut_length = content
            sheet.underweight = False
            if index == last_index:
                continue
            if self.weight(sheet.width, content, sheet.thickness) >= min_weight:
                continue

            target = self.minimum_cut_length(sheet.width, sheet.thickness)
            if target <= self.length_ceiling(sheet.width, sheet.thickness):
                sheet.cut_length = max(content, target)
            else:
                sheet.underweight = True

