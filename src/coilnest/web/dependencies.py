"""FastAPI dependency injection for nesting services."""

from typing import Annotated

from fastapi import Depends

from coilnest.application.commands import OptimizeCuttingPlanCommand


def get_optimize_command() -> OptimizeCuttingPlanCommand:
    """Dependency for OptimizeCuttingPlanCommand."""
    return OptimizeCuttingPlanCommand()


# Type alias for cleaner endpoint signatures
OptimizeCommandDep = Annotated[OptimizeCuttingPlanCommand, Depends(get_optimize_command)]
