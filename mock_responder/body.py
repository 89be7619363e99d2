"""JSON request body parsing.

Follows the defaults of express.json(), which is what callers of this
fixture were written against:

- only ``application/json`` bodies are parsed (charset parameter allowed)
- an empty body parses as ``{}``
- bodies over the limit are rejected with 413, counted while streaming
  so a chunked body is never buffered past the limit
- strict mode: the top-level value must be an object or an array
- anything unparseable is rejected with 400

The parsed value is stored on ``request.state.json_body``; routes never read it.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import Request

from .errors import MalformedBodyError


log = logging.getLogger("mock_responder.body")


def is_json_content_type(content_type: str | None) -> bool:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if not media_type:
        return False
    return media_type == "application/json"


def _declared_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise MalformedBodyError(f"invalid Content-Length: {raw!r}") from None


def parse_json_bytes(body: bytes, *, limit: int) -> Any:
    if len(body) > limit:
        raise MalformedBodyError(
            f"body of {len(body)} bytes exceeds limit of {limit}",
            status_code=413,
            code="BODY_TOO_LARGE",
        )
    if not body.strip():
        return {}
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedBodyError(f"body is not UTF-8: {exc}") from exc
    if text.startswith("\ufeff"):
        text = text[1:]
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedBodyError(f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}") from exc
    if not isinstance(value, (dict, list)):
        raise MalformedBodyError(f"top-level JSON value must be an object or array, got {type(value).__name__}")
    return value


async def read_json_body(request: Request, *, limit: int) -> Any | None:
    """Parse the request body if it is declared as JSON.

    Returns None for non-JSON requests; raises MalformedBodyError otherwise.
    """

    if not is_json_content_type(request.headers.get("content-type")):
        return None

    declared = _declared_length(request)
    if declared is not None and declared > limit:
        raise MalformedBodyError(
            f"declared body of {declared} bytes exceeds limit of {limit}",
            status_code=413,
            code="BODY_TOO_LARGE",
        )

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            log.debug("body exceeded %d bytes while streaming", limit)
            raise MalformedBodyError(
                f"body exceeds limit of {limit} bytes",
                status_code=413,
                code="BODY_TOO_LARGE",
            )
        chunks.append(chunk)
    return parse_json_bytes(b"".join(chunks), limit=limit)
