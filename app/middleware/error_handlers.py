"""
App-level error handlers.

Routes return their own JSON envelopes; these handlers cover what escapes
them: malformed bodies become 400 ``{"error": ...}`` and anything unexpected
becomes a generic 500 without internal details.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request body"


def register_error_handlers(app: FastAPI) -> None:
    """Register the shared error envelopes on ``app``."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = _describe_validation_error(exc)
        logger.warning("Invalid request body | path=%s | %s", request.url.path, detail)
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": detail},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception | path=%s | type=%s",
            request.url.path,
            type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred. Please try again later."},
        )
