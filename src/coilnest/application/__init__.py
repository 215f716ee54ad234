"""Application layer - use cases and request configuration."""

from coilnest.application.commands import OptimizeCuttingPlanCommand

__all__ = ["OptimizeCuttingPlanCommand"]
