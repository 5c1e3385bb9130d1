"""
Petstagram Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request.
How:   Times call_next, then logs the matched route template rather than
       the raw path, so user IDs in paths like
       /api/posts/{post_id}/likes/{user_id} stay out of the access log.

Format:
    GET /api/posts 200 3.2ms [1a2b3c4d] total=42
    DELETE /api/posts/{post_id}/likes/{user_id} 404 1.1ms [5e6f7a8b]

Request bodies are never logged; they can carry passwords (/api/users).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from petstagram.middleware.request_id import request_id_var

logger = logging.getLogger("petstagram.access")

# Probed every few seconds by load balancers
QUIET_PATHS = {"/health"}


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request except health probes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        route = _route_template(request)
        total = response.headers.get("X-Total-Count")
        suffix = f" total={total}" if total is not None else ""

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s]%s",
            request.method,
            route,
            response.status_code,
            elapsed_ms,
            rid,
            suffix,
            extra={
                "request_id": rid,
                "route": route,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
