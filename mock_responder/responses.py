"""Error response envelope.

Successful responses are the route payloads verbatim; only failures produced
by the responder itself (rejected bodies, unexpected exceptions) use this
shape:

    {"error": {"code": ..., "message": ..., "details": ...}}
"""

from __future__ import annotations

from typing import Any, Mapping

from fastapi.responses import JSONResponse


JsonObject = dict[str, Any]


def fail(error: Mapping[str, Any]) -> JsonObject:
    """Build an error body."""

    return {"error": dict(error)}


def error_response(error: Mapping[str, Any], *, status_code: int) -> JSONResponse:
    return JSONResponse(fail(error), status_code=status_code)
