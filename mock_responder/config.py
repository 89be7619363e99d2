"""Server configuration.

Configuration is an explicit value handed to ``create_app``/``start``; nothing
is read from the environment unless ``ServerConfig.from_env`` is called.

The listener address is fixed at 0.0.0.0:9898 for the entrypoint; clients
hardcode that port, so no environment variable can move it. Tests pass an
explicit ``ServerConfig(host=..., port=0)`` instead.

Environment (all optional, diagnostics only):
  MOCK_LOG_LEVEL   uvicorn log level (default info)
  MOCK_BODY_LIMIT  max JSON body size in bytes (default 102400)
  MOCK_DEBUG       include error details in 4xx/5xx responses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from .routes import DEFAULT_ROUTES, Route


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9898
DEFAULT_LOG_LEVEL = "info"
# Same default as express.json() ("100kb").
DEFAULT_BODY_LIMIT = 100 * 1024


def _truthy(value: str | None) -> bool:
    v = (value or "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    routes: tuple[Route, ...] = field(default=DEFAULT_ROUTES)
    log_level: str = DEFAULT_LOG_LEVEL
    body_limit: int = DEFAULT_BODY_LIMIT
    debug: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")
        if self.body_limit < 0:
            raise ValueError(f"body_limit must be >= 0, got {self.body_limit}")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ServerConfig":
        env = os.environ if env is None else env
        return cls(
            log_level=(env.get("MOCK_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().lower(),
            body_limit=_int_env(env, "MOCK_BODY_LIMIT", DEFAULT_BODY_LIMIT),
            debug=_truthy(env.get("MOCK_DEBUG")),
        )
