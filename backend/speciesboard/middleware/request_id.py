"""
SpeciesBoard Backend — Request ID Middleware
============================================

What:  Gives every request a correlation ID and guarantees the response
       carries it, including the 500 produced for an unhandled exception.
How:   A well-formed client X-Request-ID is reused; anything else (absent,
       too long, odd characters) is replaced with 12 hex characters from a
       UUID4. The ID lives in a ContextVar for log lines and in
       request.state for the exception handlers.

Unhandled exceptions never reach Starlette's ServerErrorMiddleware: they
are logged here with their traceback and turned into the standard JSON
500 body, so the client still gets a request_id it can quote.
"""

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from speciesboard.responses import REQUEST_ID_HEADER, error_response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CLIENT_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(header_value: Optional[str]) -> str:
    """The client's ID when it is safe to echo and log, else a fresh one."""
    if header_value and _CLIENT_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "[%s] Unhandled %s on %s %s",
                rid,
                type(exc).__name__,
                request.method,
                request.url.path,
                exc_info=True,
            )
            return error_response(
                500,
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                rid,
            )

        response.headers[REQUEST_ID_HEADER] = rid
        return response
