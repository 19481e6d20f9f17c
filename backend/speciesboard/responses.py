"""
SpeciesBoard Backend — Error Response Builder
=============================================

Every error body has the same shape:

    {"error": "...", "message": "...", "details": {...} | null, "request_id": "..."}

and carries the request ID in the X-Request-ID header as well, so a client
can quote it whether it reads the body or the headers.
"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from speciesboard.schemas.common import ErrorResponse

REQUEST_ID_HEADER = "X-Request-ID"


def error_response(
    status_code: int,
    error: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details, request_id=request_id)
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)
