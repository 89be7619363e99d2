"""Mock HTTP responder used as a fixture for HTTP client tests.

Answers any method on ``/test`` with ``{"message":"Hewwo"}`` on port 9898.
"""

from __future__ import annotations

from .config import ServerConfig
from .errors import BindError, MalformedBodyError, MockResponderError
from .routes import ANY_METHOD, DEFAULT_ROUTES, Route
from .server import ServerHandle, create_app, serve, start

__all__ = [
    "ANY_METHOD",
    "BindError",
    "DEFAULT_ROUTES",
    "MalformedBodyError",
    "MockResponderError",
    "Route",
    "ServerConfig",
    "ServerHandle",
    "__version__",
    "create_app",
    "serve",
    "start",
]
__version__ = "0.1.0"
