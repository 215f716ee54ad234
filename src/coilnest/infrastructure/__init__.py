"""Infrastructure layer - packing, weight rules and result assembly."""

from .balancing import BalanceReport, InterSheetBalancer
from .bin_packing import (
    HeuristicTuning,
    NestedPart,
    NestingParameters,
    PackingOutcome,
    SheetLayout,
    SheetPacker,
    SheetState,
)
from .formatters import CuttingPlanFormatter
from .nesting_service import CoilNestingService
from .result_assembly import (
    GroupOutcome,
    GroupResult,
    OptimizationResult,
    OptimizationSummary,
    ResultAssembler,
)
from .weight_governor import WeightLengthGovernor
from .width_selection import PackingPlan, WidthSelection, WidthSelector

__all__ = [
    # Packing
    "HeuristicTuning",
    "NestedPart",
    "NestingParameters",
    "PackingOutcome",
    "SheetLayout",
    "SheetPacker",
    "SheetState",
    # Weight and length rules
    "WeightLengthGovernor",
    # Width selection and balancing
    "BalanceReport",
    "InterSheetBalancer",
    "PackingPlan",
    "WidthSelection",
    "WidthSelector",
    # Coordination and results
    "CoilNestingService",
    "CuttingPlanFormatter",
    "GroupOutcome",
    "GroupResult",
    "OptimizationResult",
    "OptimizationSummary",
    "ResultAssembler",
]
