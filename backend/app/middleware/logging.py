"""
CarVault Backend — Request Logging Middleware
==============================================

What:  One access-log line per HTTP request: method, path, status, duration,
       request ID, client IP and the authenticated user (or "-").
When:  Runs inside RequestIDMiddleware so the request ID is already set.

The user id is read from `request.state.user_id`, which the authorization
gate (app.security.get_current_user) sets once a token has been verified.
Requests rejected with 401 and public routes log "-".

Never logged: request bodies (passwords, image bytes) and the
Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("carvault.access")

ANONYMOUS = "-"


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request at a level chosen by its response status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO.

    GET /health is not logged; load balancers poll it constantly.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        # Shared with the route's Request through scope["state"]
        user_id = getattr(request.state, "user_id", ANONYMOUS)
        status = response.status_code

        logger.log(
            _status_level(status),
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "user_id": user_id,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
