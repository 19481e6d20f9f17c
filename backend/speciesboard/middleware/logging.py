"""
SpeciesBoard Backend — Access Log Middleware
============================================

One line per request on the "speciesboard.access" logger:

    PUT /increase-points 200 3.1ms [9f2c4e1a7b03]

The path is the matched route template, not the raw URL, so query strings
(logins, species names) stay out of the log and lines group per endpoint.
Requests that match no route are logged as "<unmatched>". The level
follows the status: 5xx ERROR, 4xx WARNING, everything else INFO.

An exception escaping the app is logged as a 500 here and re-raised for
RequestIDMiddleware to answer.

Never logged: request bodies (passwords) and upload contents (image bytes).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from speciesboard.middleware.request_id import request_id_var

logger = logging.getLogger("speciesboard.access")

# Polled by the orchestrator every few seconds.
QUIET_ROUTES = {"/health"}

UNMATCHED_ROUTE = "<unmatched>"


def route_template(request: Request) -> str:
    """The path pattern of the route that handled `request`."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._log(request, 500, start_time)
            raise

        self._log(request, response.status_code, start_time)
        return response

    @staticmethod
    def _log(request: Request, status: int, start_time: float) -> None:
        route = route_template(request)
        if route in QUIET_ROUTES and status < 500:
            return

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        logger.log(
            level_for(status),
            "%s %s %d %.1fms [%s]",
            request.method,
            route,
            status,
            duration_ms,
            rid,
            extra={
                "request_id": rid,
                "method": request.method,
                "route": route,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
