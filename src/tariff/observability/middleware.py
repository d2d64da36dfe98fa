"""Request ID middleware for HTTP request tracing.

Every response carries an ``X-Request-ID`` header, echoed from the client
when it sent a usable one and generated otherwise.  The ID, together with
the HTTP method and path, is bound into structlog contextvars so the log
lines of a rate edit and the regeneration it triggers can be correlated.
"""

from __future__ import annotations

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SERVICE_NAME = "tariff-pipeline"
REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs are echoed into headers and logs; anything else is replaced.
_USABLE_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def resolve_request_id(header_value: str | None) -> str:
    """Return *header_value* if it is a usable request ID, else a fresh UUID4."""
    if header_value and _USABLE_ID.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every HTTP request/response cycle."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            service=SERVICE_NAME,
            http_method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
