"""
CarVault Backend — Request ID Middleware
=========================================

What:  Assigns a short ID to each incoming request and returns it in the
       X-Request-ID response header.
Why:   Every log line and error body from one request carries the same ID,
       so a user-reported error can be matched to server logs.

A client-supplied X-Request-ID is reused only when it is a short token of
letters, digits, '-' and '_'; anything else (newlines, very long values)
is replaced so it cannot forge or bloat access-log lines.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")


def resolve_request_id(header_value: Optional[str]) -> str:
    if header_value and _CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    # 8 hex chars is enough to correlate log lines
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    The ID is stored in `request_id_var` (for loggers and exception
    handlers) and in `request.state.request_id` (for route handlers).
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID"))

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
