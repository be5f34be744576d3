"""
Exception Handlers.

Turn exceptions escaping a route into the error envelope:

    {"success": false, "data": null,
     "error": {"code", "message", "details"}, "metadata": {"request_id", ...}}

Usage:
    register_exception_handlers(app)
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from eisenhower.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    CapacityExceededError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from eisenhower.backend.core.logging import get_logger
from eisenhower.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    CapacityExceededError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    ConflictError: 409,
    DatabaseError: 503,
}


def _get_request_id(request: Request) -> str | None:
    """Request ID set by the middleware, else the raw header."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _status_for(exc: ApplicationError) -> int:
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return 500


def _error_details(exc: ApplicationError) -> dict[str, Any] | None:
    if isinstance(exc, CapacityExceededError):
        return {"quadrant": exc.quadrant, "limit": exc.limit}
    if isinstance(exc, ValidationError):
        return exc.details or None
    return None


def _envelope(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details),
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    """Map an ApplicationError to its status code and envelope."""
    status_code = _status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Server error" if status_code >= 500 else "Client error",
        extra={
            "code": exc.code,
            "status": status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return _envelope(request, status_code, exc.code, exc.message, _error_details(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report malformed requests (wrong types, unparseable JSON) as 422.

    Missing business fields are left to the services, which answer 400.
    """
    errors = exc.errors()
    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )
    details = {
        "validation_errors": [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())),
                "message": err.get("msg", "Validation error"),
                "type": err.get("type", "unknown"),
            }
            for err in errors
        ]
    }
    return _envelope(request, 422, "VAL_REQUEST_INVALID", "Request validation failed", details)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the caller only learns that something failed."""
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )
    return _envelope(request, 500, "SYS_INTERNAL_ERROR", "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
