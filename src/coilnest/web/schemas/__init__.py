"""Pydantic schemas for the REST API."""

from coilnest.web.schemas.responses import (
    ErrorResponseSchema,
    GroupResultSchema,
    NestedPartSchema,
    NestingWarningSchema,
    OptimizationResponseSchema,
    SheetLayoutSchema,
    SummarySchema,
    UnplaceablePartSchema,
    ValidationResultSchema,
)

__all__ = [
    "ErrorResponseSchema",
    "GroupResultSchema",
    "NestedPartSchema",
    "NestingWarningSchema",
    "OptimizationResponseSchema",
    "SheetLayoutSchema",
    "SummarySchema",
    "UnplaceablePartSchema",
    "ValidationResultSchema",
]
