"""Error handlers for the REST API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from coilnest.application.config import ConfigError
from coilnest.domain import InputInvalidError


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers with the FastAPI app."""

    @app.exception_handler(InputInvalidError)
    async def input_invalid_handler(
        request: Request, exc: InputInvalidError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": str(exc),
                "error_type": "input_invalid",
                "details": [
                    {
                        "part_id": issue.part_id,
                        "field": issue.field,
                        "message": issue.message,
                    }
                    for issue in exc.issues
                ],
            },
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": exc.message,
                "error_type": exc.error_type,
                "details": [
                    {"path": d.get("path", ""), "message": d.get("message", "")}
                    for d in exc.details
                ],
            },
        )
