"""API routers for the REST API."""

from coilnest.web.routers.optimize import router as optimize_router
from coilnest.web.routers.validate import router as validate_router

__all__ = ["optimize_router", "validate_router"]
