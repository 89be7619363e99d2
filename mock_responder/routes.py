"""Route table for the mock responder.

A route is a (method-pattern, path) pair mapped to a constant JSON payload.
The table is explicit: each route is registered as one endpoint that checks
the method pattern itself, so the wildcard accepts every verb, including
extension methods, without relying on framework catch-all matching.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse
from starlette.types import Receive, Scope, Send


log = logging.getLogger("mock_responder.routes")

ANY_METHOD = "*"

# RFC 9110 token: any extension method (PROPFIND, PURGE, ...) is a valid verb.
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+$")

JSON_MEDIA_TYPE = "application/json"


def _normalize_methods(methods: str | tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(methods, str):
        methods = (methods,)
    out: list[str] = []
    for m in methods:
        verb = m.strip().upper()
        if verb != ANY_METHOD and not _METHOD_TOKEN.match(verb):
            raise ValueError(f"unsupported HTTP method: {m!r}")
        if verb not in out:
            out.append(verb)
    if not out:
        raise ValueError("route needs at least one method")
    return tuple(out)


def render_payload(payload: Mapping[str, Any]) -> bytes:
    """Serialize a payload the way ``res.json`` in Express does: compact, UTF-8."""

    return json.dumps(dict(payload), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True, slots=True)
class Route:
    path: str
    payload: Mapping[str, Any]
    methods: tuple[str, ...] = (ANY_METHOD,)
    status_code: int = 200
    # Rendered once in __post_init__; stable for the lifetime of the process.
    body: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.path.startswith("/"):
            raise ValueError(f"route path must start with '/': {self.path!r}")
        object.__setattr__(self, "methods", _normalize_methods(self.methods))
        object.__setattr__(self, "body", render_payload(self.payload))

    @property
    def is_wildcard(self) -> bool:
        return ANY_METHOD in self.methods

    def matches(self, method: str, path: str) -> bool:
        if path != self.path:
            return False
        return self.is_wildcard or method.upper() in self.methods

    def response(self) -> Response:
        return Response(content=self.body, status_code=self.status_code, media_type=JSON_MEDIA_TYPE)


DEFAULT_ROUTES: tuple[Route, ...] = (
    Route(path="/test", payload={"message": "Hewwo"}),
)


class RouteEndpoint:
    """ASGI endpoint answering one Route.

    Registered without a method list so the router hands it every verb
    (TRACE, PROPFIND, PURGE, ...); the method pattern is checked here.
    """

    def __init__(self, route: Route) -> None:
        self.route = route

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # request.state.json_body (if any) is parsed by the body middleware
        # and deliberately ignored here.
        if self.route.matches(scope["method"], scope["path"]):
            response = self.route.response()
        else:
            response = JSONResponse(
                {"detail": "Method Not Allowed"},
                status_code=405,
                headers={"Allow": ", ".join(self.route.methods)},
            )
        await response(scope, receive, send)


def register_routes(app: FastAPI, routes: tuple[Route, ...]) -> None:
    """Register every route of the table on ``app``, one endpoint per path."""

    seen: set[str] = set()
    for route in routes:
        if route.path in seen:
            raise ValueError(f"duplicate route: {route.path}")
        seen.add(route.path)

        app.add_route(
            route.path,
            RouteEndpoint(route),
            methods=None,
            name=f"mock:{route.path}",
            include_in_schema=False,
        )
        log.debug("registered %s %s", ",".join(route.methods), route.path)
