"""Request validation endpoints."""

from fastapi import APIRouter

from coilnest.application.config import NestingRequestSchema, validate_request
from coilnest.web.schemas.responses import ValidationResultSchema

router = APIRouter(prefix="/validate", tags=["validate"])


@router.post("", response_model=ValidationResultSchema)
async def validate_nesting_request(
    request: NestingRequestSchema,
) -> ValidationResultSchema:
    """Validate a request without optimizing.

    Args:
        request: Parameters and parts to check.

    Returns:
        Validation result with errors and advisories.
    """
    result = validate_request(request)
    return ValidationResultSchema(
        is_valid=result.is_valid,
        errors=[{"message": e.message, "path": e.path} for e in result.errors],
        warnings=[{"message": w.message, "path": w.path} for w in result.warnings],
    )
