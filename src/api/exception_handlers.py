"""Exception handlers for the FastAPI application.

Every error leaves the API as ``{"error_code", "message", "details"}``.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.exceptions import AppException, ErrorCode, ExternalServiceError

logger = structlog.get_logger()

# Suggested wait before retrying after a DNS/SSL authority outage
EXTERNAL_RETRY_AFTER_SECONDS = 30


def _error_response(
    status_code: int,
    error_code: str,
    message: Any,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error_code": error_code, "message": message, "details": details},
        headers=headers,
    )


def _retry_after(exc: AppException) -> str | None:
    if isinstance(exc.details, dict) and "retry_after_seconds" in exc.details:
        return str(exc.details["retry_after_seconds"])
    if isinstance(exc, ExternalServiceError):
        return str(EXTERNAL_RETRY_AFTER_SECONDS)
    return None


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Render domain errors; 404s are routine for public lookups and log at info."""
        log = logger.info if exc.status_code == 404 else logger.warning
        log(
            "app_exception",
            error_code=exc.error_code.value,
            message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        retry_after = _retry_after(exc)
        return _error_response(
            exc.status_code,
            exc.error_code.value,
            exc.message,
            exc.details,
            headers={"Retry-After": retry_after} if retry_after else None,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Routing errors raised by Starlette itself (unknown path, wrong method)."""
        return _error_response(exc.status_code, "HTTP_ERROR", exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("validation_error", path=request.url.path, errors=len(exc.errors()))
        return _error_response(
            422,
            ErrorCode.VALIDATION_ERROR.value,
            "Request validation failed",
            [
                {
                    "field": ".".join(str(x) for x in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
                for error in exc.errors()
            ],
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            error_type=type(exc).__name__,
            request_id=request_id,
            exc_info=exc,
        )
        message = str(exc) if not settings.is_production else "An unexpected error occurred"
        return _error_response(
            500,
            ErrorCode.INTERNAL_ERROR.value,
            message,
            {"request_id": request_id},
        )
