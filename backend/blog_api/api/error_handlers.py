"""Error Handlers — global exception handlers for the Blog API.

Invariants:
    - BlogApiError → {"success": false, "message", "code", ...} with the error's status
    - RequestValidationError → 400 with the same field → messages map as the validation layer
    - Unknown route → 404 "Route not found"
    - Exception (catch-all) → 500 "Server error", never leaks internal details

Design Decisions:
    - Layered handlers: domain (BlogApiError), validation (Pydantic), HTTP (Starlette), catch-all
    - Extracted from main.py to keep the entry point's import fan-out small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api.core.errors import BlogApiError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_blog_api_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_blog_api_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(BlogApiError)
    async def blog_api_error_handler(request: Request, exc: BlogApiError):
        """Handle all Blog API domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"BlogApiError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "post_id": exc.context.post_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=exc.response_headers(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle request parsing errors raised by FastAPI itself."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register Starlette HTTP error handler (unknown routes, bad methods)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = (
            "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND
            else str(exc.detail)
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Server error",
                "code": "INTERNAL_ERROR",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build field -> messages map from Pydantic error locations."""
    errors: dict[str, list[str]] = {}
    for e in exc.errors():
        # loc is ("body" | "query" | "path", field, ...)
        loc = [str(part) for part in e["loc"][1:]] or [str(e["loc"][0])]
        errors.setdefault(".".join(loc), []).append(e["msg"])
    return {
        "success": False,
        "message": "Validation failed",
        "code": "VALIDATION_FAILED",
        "errors": errors,
    }
