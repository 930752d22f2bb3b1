"""
Corpdata Gateway - Access Log
==============================

What:  One line per request naming the route that handled it and how the
       gateway's request sequence ended.
How:   The exception handlers in main.py record the outcome on request.state
       (see record_outcome); this middleware reads it back once the response
       is ready, together with the matched route from the ASGI scope.
Who:   Applied to every request via Starlette middleware.

Outcomes:
    ok                  handler returned (rows, a not-found message or a write result)
    validation_failed   422; the failing field names are logged, never their values
    connection_failed   500; the pool could not supply a connection
    query_failed        500; the statement failed and its connection was closed
    error               500; anything else
    http_error          4xx raised by routing itself (unknown path, wrong method)

Example:
    2024-01-15T12:00:00 [WARNING] gateway.access [a1b2c3d4] GET /order route=search_orders
        outcome=validation_failed fields=searchString status=422 3.1ms
"""

import logging
import time
from typing import List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("gateway.access")

OK = "ok"
VALIDATION_FAILED = "validation_failed"
CONNECTION_FAILED = "connection_failed"
QUERY_FAILED = "query_failed"
ERROR = "error"
HTTP_ERROR = "http_error"

_LEVELS = {
    OK: logging.INFO,
    VALIDATION_FAILED: logging.WARNING,
    HTTP_ERROR: logging.WARNING,
    CONNECTION_FAILED: logging.ERROR,
    QUERY_FAILED: logging.ERROR,
    ERROR: logging.ERROR,
}

# Liveness checks call this every few seconds.
UNLOGGED_ROUTES = {"health_check"}


def record_outcome(request: Request, outcome: str, fields: Optional[List[str]] = None) -> None:
    """Called by the exception handlers; read back by RequestLoggingMiddleware."""
    request.state.outcome = outcome
    request.state.failed_fields = fields or []


def route_name(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "name", None) or "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        name = route_name(request)
        if name in UNLOGGED_ROUTES:
            return response

        status = response.status_code
        default = OK if status < 400 else (ERROR if status >= 500 else HTTP_ERROR)
        outcome = getattr(request.state, "outcome", default)
        fields = getattr(request.state, "failed_fields", [])

        logger.log(
            _LEVELS.get(outcome, logging.INFO),
            "%s %s route=%s outcome=%s%s status=%d %.1fms",
            request.method,
            request.url.path,
            name,
            outcome,
            f" fields={','.join(fields)}" if fields else "",
            status,
            duration_ms,
            extra={
                "route": name,
                "outcome": outcome,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
