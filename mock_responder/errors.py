"""Error catalog for the mock responder.

Only two things can go wrong: the listener cannot bind its port at startup,
or a single request carries a body the JSON parser rejects. Everything else
is answered by the framework defaults (404/405).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class MockResponderError(Exception):
    """Base error for all mock responder failures."""


class BindError(MockResponderError):
    """The listening socket could not be bound (port in use, no privilege, bad host)."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        super().__init__(f"cannot bind {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class MalformedBodyError(MockResponderError):
    """A request body was rejected by the JSON body parser.

    Scoped to one request; the listener keeps serving.
    """

    def __init__(self, reason: str, *, status_code: int = 400, code: str = "MALFORMED_BODY") -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
        self.code = code


@dataclass(frozen=True, slots=True)
class ErrorCode:
    """Represents a stable error code used in the ``error.code`` field."""

    code: str
    default_message: str

    def as_error(self, *, message: str | None = None, details: Any | None = None) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": message if message is not None else self.default_message,
            "details": details,
        }


MALFORMED_BODY = ErrorCode(
    code="MALFORMED_BODY",
    default_message="Request body is not valid JSON.",
)

BODY_TOO_LARGE = ErrorCode(
    code="BODY_TOO_LARGE",
    default_message="Request body exceeds the configured size limit.",
)

UNEXPECTED_ERROR = ErrorCode(
    code="UNEXPECTED_ERROR",
    default_message="Unexpected error in mock responder.",
)

_BY_CODE = {c.code: c for c in (MALFORMED_BODY, BODY_TOO_LARGE, UNEXPECTED_ERROR)}


def error_from_body_error(exc: MalformedBodyError, *, debug: bool = False) -> dict[str, Any]:
    catalog = _BY_CODE.get(exc.code, MALFORMED_BODY)
    return catalog.as_error(details={"reason": exc.reason} if debug else None)


def error_from_exception(exc: Exception, *, debug: bool = False) -> dict[str, Any]:
    """Convert an unexpected handler exception into the stable error shape.

    Exception type and text are only exposed when debug is on.
    """

    details = {"type": type(exc).__name__, "message": str(exc)} if debug else None
    return UNEXPECTED_ERROR.as_error(details=details)
