"""Cutting plan optimization endpoints."""

from fastapi import APIRouter

from coilnest.application.config import (
    NestingRequestSchema,
    config_to_parameters,
    config_to_parts,
)
from coilnest.web.dependencies import OptimizeCommandDep
from coilnest.web.schemas.responses import OptimizationResponseSchema

router = APIRouter(prefix="/optimize", tags=["optimize"])


@router.post("", response_model=OptimizationResponseSchema)
def optimize_cutting_plan(
    request: NestingRequestSchema,
    command: OptimizeCommandDep,
) -> OptimizationResponseSchema:
    """Nest the request's parts onto coil sheets.

    Args:
        request: Parameters and parts to nest.
        command: Optimization use case.

    Returns:
        The cutting plan, including unplaceable parts and warnings.
    """
    result = command.execute(
        config_to_parts(request.parts),
        config_to_parameters(request.parameters),
    )
    return OptimizationResponseSchema.model_validate(result.to_dict())
