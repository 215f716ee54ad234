"""Bin packing data models and the bottom-left sheet packer.

Sheets are cut from a coil: their width is one of the candidate coil widths
and their length grows with the parts nested on them. Coordinates are in mm
with the origin at the lower-left corner of the sheet; ``x`` runs across
the coil width and ``y`` along the coil length.
"""

from __future__ import annotations

import logging
from bisect import insort
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

from coilnest.domain.value_objects import (
    NestingAlgorithm,
    PartInstance,
    WeightRange,
    steel_weight,
)

if TYPE_CHECKING:
    from coilnest.infrastructure.weight_governor import WeightLengthGovernor

logger = logging.getLogger(__name__)

# Tolerance for floating point comparisons of coordinates in mm.
EPSILON = 1e-6

DEFAULT_COIL_WIDTHS: tuple[float, ...] = tuple(float(w) for w in range(1200, 2101, 50))


@dataclass(frozen=True)
class HeuristicTuning:
    """How hard the engine searches, derived from the algorithm selector.

    Every selector sweeps until no remaining part fits, so the closing
    rule for sheets never depends on the tuning.

    Attributes:
        balance: Run the inter-sheet balancer after the initial pass.
        ordering_search: Ordering search strategy, "genetic", "annealing"
            or None.
    """

    balance: bool = True
    ordering_search: str | None = None

    @classmethod
    def for_algorithm(cls, algorithm: NestingAlgorithm) -> HeuristicTuning:
        if algorithm == NestingAlgorithm.STANDARD:
            return cls(balance=False)
        if algorithm == NestingAlgorithm.GENETIC:
            return cls(ordering_search="genetic")
        if algorithm == NestingAlgorithm.SIMULATED_ANNEALING:
            return cls(ordering_search="annealing")
        return cls()


@dataclass(frozen=True)
class NestingParameters:
    """Machine and logistics constraints for one optimization run.

    Attributes:
        max_sheet_length: Hard ceiling on any sheet length in mm.
        kerf: Minimum gap between adjacent nested parts in mm.
        candidate_coil_widths: Admissible sheet widths in mm, stored sorted
            ascending without duplicates.
        roll_weight_range: Weight window in kg for every sheet except the
            last sheet of a group.
        algorithm: Heuristic tuning selector.
        target_utilization: Utilization (0-1] the balancer aims for on every
            sheet except the last.
        length_margin: Extra length in mm added after the furthest part.
        max_balancing_passes: Pass cap for the balancer.
        max_width_evaluations: Width search budget, None evaluates all.
        seed: Seed for the ordering search of genetic/annealing tuning.
        ordering_iterations: Extra packings tried per width by the
            ordering search.
        workers: Worker threads for independent material groups.
    """

    max_sheet_length: float = 18000.0
    kerf: float = 5.0
    candidate_coil_widths: tuple[float, ...] = DEFAULT_COIL_WIDTHS
    roll_weight_range: WeightRange = field(
        default_factory=lambda: WeightRange(min=4000.0, max=5500.0)
    )
    algorithm: NestingAlgorithm = NestingAlgorithm.BZ12
    target_utilization: float = 0.88
    length_margin: float = 0.0
    max_balancing_passes: int = 10
    max_width_evaluations: int | None = None
    seed: int = 0
    ordering_iterations: int = 12
    workers: int = 1

    def __post_init__(self) -> None:
        if self.max_sheet_length <= 0:
            raise ValueError("Maximum sheet length must be positive")
        if self.kerf < 0:
            raise ValueError("Kerf must be non-negative")
        if not self.candidate_coil_widths:
            raise ValueError("At least one candidate coil width is required")
        if any(w <= 0 for w in self.candidate_coil_widths):
            raise ValueError("Candidate coil widths must be positive")
        if not 0 < self.target_utilization <= 1:
            raise ValueError("Target utilization must be in (0, 1]")
        if self.length_margin < 0:
            raise ValueError("Length margin must be non-negative")
        if self.max_balancing_passes < 1:
            raise ValueError("Maximum balancing passes must be at least 1")
        if self.max_width_evaluations is not None and self.max_width_evaluations < 1:
            raise ValueError("Maximum width evaluations must be at least 1")
        if self.ordering_iterations < 0:
            raise ValueError("Ordering iterations must be non-negative")
        if self.workers < 1:
            raise ValueError("Workers must be at least 1")
        # Normalize so width search order does not depend on input order
        widths = tuple(sorted({float(w) for w in self.candidate_coil_widths}))
        object.__setattr__(self, "candidate_coil_widths", widths)
        object.__setattr__(self, "algorithm", NestingAlgorithm.parse(self.algorithm))

    @property
    def tuning(self) -> HeuristicTuning:
        return HeuristicTuning.for_algorithm(self.algorithm)


@dataclass(frozen=True)
class NestedPart:
    """A part instance placed at a specific position on a sheet.

    Attributes:
        instance: The piece being placed.
        x: Position of the lower-left corner across the coil width in mm.
        y: Position of the lower-left corner along the coil length in mm.
        rotated: True if the piece is turned 90 degrees, so that its length
            runs across the coil.
    """

    instance: PartInstance
    x: float
    y: float
    rotated: bool = False

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError("Position coordinates must be non-negative")

    @property
    def part_id(self) -> str:
        return self.instance.part.id

    @property
    def instance_id(self) -> str:
        return self.instance.instance_id

    @property
    def placed_width(self) -> float:
        """Extent across the coil width (accounts for rotation)."""
        return self.instance.length if self.rotated else self.instance.width

    @property
    def placed_length(self) -> float:
        """Extent along the coil length (accounts for rotation)."""
        return self.instance.width if self.rotated else self.instance.length

    @property
    def right_edge(self) -> float:
        return self.x + self.placed_width

    @property
    def top_edge(self) -> float:
        return self.y + self.placed_length

    @property
    def area(self) -> float:
        return self.instance.area


@dataclass(frozen=True)
class SheetLayout:
    """A finished sheet: its cut dimensions and every placement on it.

    Attributes:
        sheet_number: 1-based position of the sheet within its group.
        width: Coil width in mm.
        length: Cut length in mm.
        thickness: Plate thickness in mm.
        placements: Parts nested on this sheet.
        is_last: True for the group's final sheet, the waste buffer.
        underweight: True if the sheet could not reach the minimum roll
            weight although it is not the last sheet.
    """

    sheet_number: int
    width: float
    length: float
    thickness: float
    placements: tuple[NestedPart, ...]
    is_last: bool = False
    underweight: bool = False

    def __post_init__(self) -> None:
        if self.sheet_number < 1:
            raise ValueError("Sheet number must be at least 1")

    @property
    def area(self) -> float:
        return self.width * self.length

    @property
    def used_area(self) -> float:
        """Total area of the nested parts in square mm."""
        return sum(p.area for p in self.placements)

    @property
    def utilization(self) -> float:
        """Fraction (0-1) of the sheet covered by parts."""
        if self.area == 0:
            return 0.0
        return self.used_area / self.area

    @property
    def waste_percentage(self) -> float:
        """Percentage of the sheet area that is waste."""
        if self.area == 0:
            return 0.0
        return (1 - self.used_area / self.area) * 100

    @property
    def weight_kg(self) -> float:
        return steel_weight(self.width, self.length, self.thickness)

    @property
    def piece_count(self) -> int:
        return len(self.placements)


def corner_points(
    placement: NestedPart, kerf: float, width: float
) -> list[tuple[float, float]]:
    """(y, x) points right of and above a part that lie inside the coil width."""
    points = [
        (placement.y, placement.right_edge + kerf),
        (placement.top_edge + kerf, placement.x),
    ]
    return [(y, x) for y, x in points if x < width - EPSILON]


@dataclass
class SheetState:
    """Mutable sheet used while packing and balancing.

    Attributes:
        width: Coil width in mm.
        thickness: Plate thickness in mm.
        margin: Length added after the furthest part.
        placements: Parts placed so far.
        cut_length: Length decided by the weight governor.
        underweight: Set by the weight governor.
    """

    width: float
    thickness: float
    margin: float = 0.0
    placements: list[NestedPart] = field(default_factory=list)
    cut_length: float = 0.0
    underweight: bool = False
    # Caches kept in step with placements by add/remove/reset
    _points: list[tuple[float, float]] | None = field(
        default=None, init=False, repr=False, compare=False
    )
    _point_set: set[tuple[float, float]] = field(
        default_factory=set, init=False, repr=False, compare=False
    )
    _points_kerf: float = field(default=0.0, init=False, repr=False, compare=False)
    _extents: list[tuple[float, float, float, float]] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    @property
    def content_length(self) -> float:
        """Length needed to hold the current parts."""
        if not self.placements:
            return 0.0
        return max(p.top_edge for p in self.placements) + self.margin

    @property
    def used_area(self) -> float:
        return sum(p.area for p in self.placements)

    @property
    def utilization(self) -> float:
        length = max(self.cut_length, self.content_length)
        if length == 0:
            return 0.0
        return self.used_area / (self.width * length)

    def candidate_points(self, kerf: float) -> list[tuple[float, float]]:
        """Corner points where a new part may start, as sorted (y, x) pairs.

        The origin plus, for every placed part, the point right of it and the
        point above it, both offset by the kerf. Points at or past the coil
        width are dropped. The list is built once and extended by ``add``.

        Args:
            kerf: Gap kept between parts in mm.

        Returns:
            The points, lowest ``y`` first, then lowest ``x``.
        """
        if self._points is None or self._points_kerf != kerf:
            self._point_set = {(0.0, 0.0)}
            for placement in self.placements:
                self._point_set.update(corner_points(placement, kerf, self.width))
            self._points = sorted(self._point_set)
            self._points_kerf = kerf
        return self._points

    def extents(self) -> list[tuple[float, float, float, float]]:
        """(x, y, right edge, top edge) of every placed part."""
        if self._extents is None:
            self._extents = [(p.x, p.y, p.right_edge, p.top_edge) for p in self.placements]
        return self._extents

    def add(self, placement: NestedPart) -> None:
        self.placements.append(placement)
        if self._extents is not None:
            self._extents.append(
                (placement.x, placement.y, placement.right_edge, placement.top_edge)
            )
        if self._points is None:
            return
        for point in corner_points(placement, self._points_kerf, self.width):
            if point not in self._point_set:
                self._point_set.add(point)
                insort(self._points, point)

    def remove(self, placement: NestedPart) -> None:
        self.placements.remove(placement)
        self._points = None
        self._extents = None

    def reset(self, placements: Sequence[NestedPart]) -> None:
        """Replace the arrangement with another one of the same sheet."""
        self.placements = list(placements)
        self._points = None
        self._extents = None

    def to_layout(self, sheet_number: int, is_last: bool) -> SheetLayout:
        return SheetLayout(
            sheet_number=sheet_number,
            width=self.width,
            length=self.cut_length,
            thickness=self.thickness,
            placements=tuple(self.placements),
            is_last=is_last,
            underweight=self.underweight,
        )


@dataclass
class PackingOutcome:
    """Sheets produced for one group at one width, before balancing.

    Attributes:
        sheets: Sheets in the order they were opened.
        unplaced: Pieces that cannot fit an empty sheet, with the reason.
    """

    sheets: list[SheetState]
    unplaced: list[tuple[PartInstance, str]] = field(default_factory=list)


class SheetPacker:
    """Bottom-left packer with rotation and kerf spacing.

    Candidate positions are the sheet origin plus, for each placed part, the
    point right of it and the point above it (both offset by the kerf).
    Positions are tried lowest ``y`` first, then lowest ``x``; both
    orientations are tried and the lower position wins, ties going to the
    shorter resulting sheet and then to the unrotated piece.

    Attributes:
        parameters: Nesting parameters (kerf, margin, tuning).
        governor: Weight governor supplying the length ceiling per width.
    """

    def __init__(
        self,
        parameters: NestingParameters,
        governor: WeightLengthGovernor,
    ) -> None:
        self.parameters = parameters
        self.governor = governor

    def pack(
        self,
        instances: Sequence[PartInstance],
        width: float,
        thickness: float,
    ) -> PackingOutcome:
        """Pack pieces onto as many sheets as needed at a given coil width.

        Sheets are filled one at a time. A sheet is closed once no remaining
        piece fits below the length ceiling, and the next sheet starts with
        the leftovers in their original order.

        Args:
            instances: Pieces in packing order.
            width: Coil width in mm.
            thickness: Plate thickness in mm.

        Returns:
            PackingOutcome with the sheets and any pieces that fit no sheet.
        """
        ceiling = self.governor.length_ceiling(width, thickness)
        remaining: list[PartInstance] = []
        unplaced: list[tuple[PartInstance, str]] = []

        for instance in instances:
            reason = self.unplaceable_reason(instance, width, ceiling)
            if reason is None:
                remaining.append(instance)
            else:
                unplaced.append((instance, reason))

        sheets: list[SheetState] = []
        while remaining:
            sheet = SheetState(
                width=width,
                thickness=thickness,
                margin=self.parameters.length_margin,
            )
            remaining = self.fill(sheet, remaining, ceiling)
            sheets.append(sheet)

            logger.debug(
                "Width %s: sheet %d closed with %d pieces at %.1f mm, %d left",
                width,
                len(sheets),
                len(sheet.placements),
                sheet.content_length,
                len(remaining),
            )

        return PackingOutcome(sheets=sheets, unplaced=unplaced)

    def unplaceable_reason(
        self,
        instance: PartInstance,
        width: float,
        ceiling: float,
    ) -> str | None:
        """Explain why a piece cannot fit even an empty sheet, or None."""
        margin = self.parameters.length_margin
        orientations = [
            (instance.width, instance.length),
            (instance.length, instance.width),
        ]
        across = [(w, l) for w, l in orientations if w <= width + EPSILON]
        if not across:
            return "exceeds_coil_width"
        if any(l + margin <= ceiling + EPSILON for _, l in across):
            return None
        if ceiling < self.parameters.max_sheet_length:
            return "exceeds_max_roll_weight"
        return "exceeds_max_sheet_length"

    def fill(
        self,
        sheet: SheetState,
        pending: Sequence[PartInstance],
        ceiling: float,
    ) -> list[PartInstance]:
        """Place as many pending pieces as possible on an open sheet.

        Every pending piece is tried in order and the pieces that were
        skipped are retried until a sweep places nothing, which lets later
        placements open gaps for earlier pieces. A sheet left by this method
        accepts none of the returned pieces.

        Args:
            sheet: The open sheet, modified in place.
            pending: Pieces to try, in packing order.
            ceiling: Maximum content length in mm.

        Returns:
            Pieces that did not fit, in their original order.
        """
        kerf = self.parameters.kerf
        leftovers = list(pending)
        # Size -> number of placements on the sheet when that size last failed
        failed_at: dict[tuple[float, float], int] = {}

        while leftovers:
            still_pending: list[PartInstance] = []
            placed_any = False

            for instance in leftovers:
                size = (instance.width, instance.length)
                checked = failed_at.get(size)
                if checked == len(sheet.placements):
                    still_pending.append(instance)
                    continue
                points = None
                if checked is not None:
                    # Points that failed before stay blocked; only corners
                    # of parts placed since then can hold this size
                    points = sorted(
                        {
                            point
                            for placement in sheet.placements[checked:]
                            for point in corner_points(placement, kerf, sheet.width)
                        }
                    )
                placement = self.find_placement(sheet, instance, ceiling, points)
                if placement is None:
                    failed_at[size] = len(sheet.placements)
                    still_pending.append(instance)
                    continue
                sheet.add(placement)
                placed_any = True

            leftovers = still_pending
            if not placed_any:
                break

        return leftovers

    def find_placement(
        self,
        sheet: SheetState,
        instance: PartInstance,
        ceiling: float,
        points: Sequence[tuple[float, float]] | None = None,
    ) -> NestedPart | None:
        """Find the bottom-left position for a piece on a sheet.

        Args:
            sheet: Sheet to place on (not modified).
            instance: Piece to place.
            ceiling: Maximum content length in mm.
            points: Sorted (y, x) points to try instead of all of the
                sheet's candidate points.

        Returns:
            The placement, or None if the piece does not fit.
        """
        margin = self.parameters.length_margin
        current_length = sheet.content_length
        if points is None:
            points = sheet.candidate_points(self.parameters.kerf)

        orientations = [False]
        if instance.width != instance.length:
            orientations.append(True)

        best: tuple[tuple[float, float, float, bool], NestedPart] | None = None
        for rotated in orientations:
            w = instance.length if rotated else instance.width
            l = instance.width if rotated else instance.length
            if w > sheet.width + EPSILON:
                continue
            for y, x in points:
                if y + l + margin > ceiling + EPSILON:
                    # Points are sorted by y, none further up fits either
                    break
                if x + w > sheet.width + EPSILON:
                    continue
                if self._collides(sheet, x, y, w, l):
                    continue
                resulting_length = max(current_length, y + l + margin)
                key = (y, x, resulting_length, rotated)
                if best is None or key < best[0]:
                    best = (key, NestedPart(instance=instance, x=x, y=y, rotated=rotated))
                # Points are sorted, the first fit is this orientation's best
                break

        return best[1] if best is not None else None

    def _collides(
        self,
        sheet: SheetState,
        x: float,
        y: float,
        w: float,
        l: float,
    ) -> bool:
        """Check whether a rectangle comes closer than the kerf to any part."""
        gap = self.parameters.kerf - EPSILON
        right = x + w + gap
        top = y + l + gap
        for left, bottom, right_edge, top_edge in sheet.extents():
            if x < right_edge + gap and left < right and y < top_edge + gap and bottom < top:
                return True
        return False
