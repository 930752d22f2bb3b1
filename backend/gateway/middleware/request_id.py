"""
Corpdata Gateway - Request ID Correlation
==========================================

What:  One correlation id per request, attached to the response header and
       to every log record emitted while the request is handled.
How:   RequestIDMiddleware sets a ContextVar for the duration of the request;
       RequestIDFilter copies it onto each LogRecord as `request_id`, which
       the log format prints. Handlers never pass the id around by hand.
Who:   Registered by create_app() (middleware) and setup_logging() (filter).

A failing call answers with the bare text "Error"; the X-Request-ID header
on that response is what ties it to the logged cause.

Client-supplied ids are accepted only when they look like ids: at most
64 characters from [A-Za-z0-9._-]. Anything else is replaced, since the
value is echoed into every log line of the request.
"""

import logging
import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CLIENT_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(supplied: str | None) -> str:
    """The client's id when it is well formed, otherwise a fresh one."""
    if supplied and _CLIENT_ID.match(supplied):
        return supplied
    return new_request_id()


class RequestIDFilter(logging.Filter):
    """Stamps `record.request_id` ("-" outside a request) on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Outermost middleware: everything below it, including the access log and
    the exception handlers, logs under the request's id.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid

        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
