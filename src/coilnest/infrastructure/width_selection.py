"""Coil width selection for a material group.

Every candidate width is evaluated by packing the whole group at that width.
The plans are ranked by:

1. fewest unplaced pieces,
2. fewest non-last sheets that cannot reach the minimum roll weight,
3. lowest area-weighted waste,
4. smallest width.

Candidates are evaluated in ascending order and the first minimal plan wins,
so the result is deterministic. Plans are ranked before balancing, and only
the winning plan is balanced.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Sequence

from coilnest.domain.grouping import MaterialGroup
from coilnest.domain.value_objects import PartInstance
from coilnest.infrastructure.balancing import BalanceReport, InterSheetBalancer
from coilnest.infrastructure.bin_packing import NestingParameters, SheetPacker, SheetState
from coilnest.infrastructure.weight_governor import WeightLengthGovernor

logger = logging.getLogger(__name__)

# Ordering search tuning.
_GENETIC_BROOD_SIZE = 3
_ANNEALING_START_TEMPERATURE = 0.05
_ANNEALING_COOLING = 0.85


@dataclass
class PackingPlan:
    """A complete packing of one group at one width.

    Attributes:
        width: Coil width in mm.
        sheets: Finalized sheets.
        unplaced: Pieces that fit no sheet at this width, with the reason.
        balance: Balancer outcome (default report if balancing was skipped).
    """

    width: float
    sheets: list[SheetState]
    unplaced: list[tuple[PartInstance, str]] = field(default_factory=list)
    balance: BalanceReport = field(default_factory=BalanceReport)

    @property
    def used_area(self) -> float:
        return sum(s.used_area for s in self.sheets)

    @property
    def sheet_area(self) -> float:
        return sum(s.width * s.cut_length for s in self.sheets)

    @property
    def waste(self) -> float:
        """Area-weighted waste fraction (0-1) over all sheets."""
        if self.sheet_area == 0:
            return 0.0
        return 1 - self.used_area / self.sheet_area

    @property
    def underweight_sheets(self) -> int:
        return sum(1 for s in self.sheets if s.underweight)

    @property
    def rank_key(self) -> tuple[int, int, float, float]:
        return (len(self.unplaced), self.underweight_sheets, self.waste, self.width)

    @property
    def score(self) -> float:
        """Scalar cost used by the annealing acceptance rule."""
        return len(self.unplaced) * 1000 + self.underweight_sheets * 10 + self.waste


@dataclass
class WidthSelection:
    """Chosen plan for a group plus how the search went.

    Attributes:
        plan: The best plan found.
        evaluated_widths: Widths that were evaluated, ascending.
        budget_exhausted: True if candidate widths were left unevaluated.
    """

    plan: PackingPlan
    evaluated_widths: tuple[float, ...]
    budget_exhausted: bool = False


class WidthSelector:
    """Chooses the coil width that packs a group with the least waste.

    Attributes:
        parameters: Nesting parameters.
        governor: Weight governor.
        packer: Sheet packer.
        balancer: Inter-sheet balancer.
    """

    def __init__(self, parameters: NestingParameters) -> None:
        self.parameters = parameters
        self.governor = WeightLengthGovernor(parameters)
        self.packer = SheetPacker(parameters, self.governor)
        self.balancer = InterSheetBalancer(parameters, self.packer, self.governor)

    def select(self, group: MaterialGroup) -> WidthSelection:
        """Evaluate candidate widths for a group and keep the best plan.

        Widths and orderings are ranked on their packing before balancing;
        only the winning plan is balanced.

        Args:
            group: Material group with sorted, placeable pieces.

        Returns:
            WidthSelection with the winning plan.
        """
        widths = self.parameters.candidate_coil_widths
        budget = self.parameters.max_width_evaluations
        evaluated = widths if budget is None else widths[:budget]

        best: PackingPlan | None = None
        for width in evaluated:
            plan = self.search(group.instances, width, group.thickness)
            logger.debug(
                "%s at width %s: %d sheets, %.2f%% waste, %d unplaced, %d underweight",
                group.key.label,
                width,
                len(plan.sheets),
                plan.waste * 100,
                len(plan.unplaced),
                plan.underweight_sheets,
            )
            if best is None or plan.rank_key < best.rank_key:
                best = plan

        assert best is not None  # candidate widths are never empty
        best = self.balance(best)
        budget_exhausted = len(evaluated) < len(widths)
        if budget_exhausted:
            logger.warning(
                "%s: width search stopped after %d of %d candidates",
                group.key.label,
                len(evaluated),
                len(widths),
            )
        logger.info(
            "%s: selected width %s (%d sheets, %.2f%% waste, %d balancing moves)",
            group.key.label,
            best.width,
            len(best.sheets),
            best.waste * 100,
            best.balance.moves,
        )
        return WidthSelection(
            plan=best,
            evaluated_widths=tuple(evaluated),
            budget_exhausted=budget_exhausted,
        )

    def evaluate(
        self,
        instances: Sequence[PartInstance],
        width: float,
        thickness: float,
    ) -> PackingPlan:
        """Pack and finalize pieces at a single width, without balancing."""
        outcome = self.packer.pack(instances, width, thickness)
        self.governor.finalize(outcome.sheets)
        return PackingPlan(width=width, sheets=outcome.sheets, unplaced=outcome.unplaced)

    def balance(self, plan: PackingPlan) -> PackingPlan:
        """Balance a plan's sheets in place when the tuning asks for it."""
        if self.parameters.tuning.balance:
            plan.balance = self.balancer.balance(plan.sheets)
        return plan

    def plan(
        self,
        instances: Sequence[PartInstance],
        width: float,
        thickness: float,
    ) -> PackingPlan:
        """Pack, finalize and balance pieces at a single width."""
        return self.balance(self.evaluate(instances, width, thickness))

    def search(
        self,
        instances: Sequence[PartInstance],
        width: float,
        thickness: float,
    ) -> PackingPlan:
        """Evaluate at a width, refined by the tuning's ordering search."""
        plan = self.evaluate(instances, width, thickness)
        strategy = self.parameters.tuning.ordering_search
        iterations = self.parameters.ordering_iterations
        if strategy is None or iterations == 0 or len(instances) < 2:
            return plan

        rng = random.Random(f"{self.parameters.seed}:{width}")
        if strategy == "genetic":
            return self._genetic(list(instances), plan, width, thickness, rng)
        return self._annealing(list(instances), plan, width, thickness, rng)

    def _genetic(
        self,
        order: list[PartInstance],
        best: PackingPlan,
        width: float,
        thickness: float,
        rng: random.Random,
    ) -> PackingPlan:
        """Elitist search: each generation mutates the best ordering."""
        budget = self.parameters.ordering_iterations
        while budget > 0:
            brood = min(_GENETIC_BROOD_SIZE, budget)
            budget -= brood
            parent = order
            for _ in range(brood):
                child = _mutate(parent, rng)
                candidate = self.evaluate(child, width, thickness)
                if candidate.rank_key < best.rank_key:
                    best, order = candidate, child
        return best

    def _annealing(
        self,
        order: list[PartInstance],
        best: PackingPlan,
        width: float,
        thickness: float,
        rng: random.Random,
    ) -> PackingPlan:
        """Annealing search that may accept worse orderings while hot."""
        current, current_order = best, order
        temperature = _ANNEALING_START_TEMPERATURE
        for _ in range(self.parameters.ordering_iterations):
            child = _mutate(current_order, rng)
            candidate = self.evaluate(child, width, thickness)
            delta = candidate.score - current.score
            if delta <= 0 or rng.random() < math.exp(-delta / temperature):
                current, current_order = candidate, child
            if candidate.rank_key < best.rank_key:
                best = candidate
            temperature *= _ANNEALING_COOLING
        return best


def _mutate(order: list[PartInstance], rng: random.Random) -> list[PartInstance]:
    """Swap two pieces at random positions."""
    child = list(order)
    i, j = rng.sample(range(len(child)), 2)
    child[i], child[j] = child[j], child[i]
    return child
