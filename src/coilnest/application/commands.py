"""Application commands (use cases) for cutting plan optimization."""

from __future__ import annotations

import logging
from typing import Sequence

from coilnest.domain import Part, ensure_valid_parts, group_parts
from coilnest.infrastructure import (
    CoilNestingService,
    NestingParameters,
    OptimizationResult,
    ResultAssembler,
)

logger = logging.getLogger(__name__)


class OptimizeCuttingPlanCommand:
    """Turn a part list into a coil cutting plan.

    The command holds no state between runs: identical parts and parameters
    always produce an identical result.
    """

    def __init__(self, assembler: ResultAssembler | None = None) -> None:
        self.assembler = assembler or ResultAssembler()

    def execute(
        self,
        parts: Sequence[Part],
        parameters: NestingParameters,
    ) -> OptimizationResult:
        """Execute the optimization.

        Args:
            parts: Parts to nest, in input order.
            parameters: Machine and logistics constraints.

        Returns:
            OptimizationResult with one group result per (grade, thickness)
            pair, in order of first appearance.

        Raises:
            InputInvalidError: If any part has invalid dimensions or
                quantity. Raised before any grouping takes place.
        """
        ensure_valid_parts(parts)

        groups = group_parts(parts, parameters.max_sheet_length)
        logger.info(
            "Optimizing %d parts across %d material groups (%s)",
            len(parts),
            len(groups),
            parameters.algorithm.value,
        )

        outcomes = CoilNestingService(parameters).optimize(groups)
        return self.assembler.assemble(outcomes)
