"""FastAPI REST API for coil nesting.

This module provides a REST API for optimizing cutting plans and validating
nesting requests.

Usage:
    uvicorn coilnest.web:app --reload
"""

from coilnest.web.app import app, create_app

__all__ = ["app", "create_app"]
