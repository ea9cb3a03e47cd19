"""
ArchLens Backend - Access Log Middleware
=========================================

What:  Writes one line to the `archlens.access` logger per API call and adds
       an `X-Response-Time` header.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Example line:
    GET /api/analysis/65a4f0c2e13b4a0012ab34cd -> 404 in 3.2ms [a1b2c3d4] (route=/api/analysis/{analysis_id})

Probe traffic (/health) is not logged. Bodies never are.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from archlens.middleware.request_id import request_id_var

logger = logging.getLogger("archlens.access")


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, otherwise INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    QUIET_PATHS = frozenset({"/health"})

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Response-Time"] = f"{elapsed_ms:.1f}ms"

        if request.url.path in self.QUIET_PATHS:
            return response

        # Matched route template, so log lines for different ids group together
        route = request.scope.get("route")
        template = getattr(route, "path", "-")

        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d in %.1fms [%s] (route=%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            template,
        )
        return response
