"""
Request Context Middleware.

For every request:

    X-Request-ID     taken from the request, or a new UUID4; echoed back
    X-Frontend-ID    lower-cased; anything outside KNOWN_FRONTENDS is "unknown"
    X-Response-Time  handler duration, "<n>ms"

request_id, frontend, method and path are bound to structlog contextvars,
so every log line written while the request is handled carries them.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from eisenhower.backend.core.logging import VALID_SOURCES, get_logger
from eisenhower.backend.core.utils import new_id

logger = get_logger(__name__)

KNOWN_FRONTENDS = VALID_SOURCES - {"unknown"}


def _frontend_of(request: Request) -> str:
    frontend = request.headers.get("X-Frontend-ID", "").lower()
    return frontend if frontend in KNOWN_FRONTENDS else "unknown"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags requests, responses and log lines with a request id and frontend."""

    def __init__(self, app: ASGIApp, log_requests: bool = False) -> None:
        super().__init__(app)
        # Completed requests are logged at INFO when set, DEBUG otherwise.
        self.log_requests = log_requests

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or new_id()
        frontend = _frontend_of(request)
        request.state.request_id = request_id
        request.state.frontend = frontend

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={"duration_ms": _elapsed_ms(started), "error_type": type(exc).__name__},
            )
            raise
        else:
            duration_ms = _elapsed_ms(started)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            log = logger.info if self.log_requests else logger.debug
            log(
                "Request completed",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
