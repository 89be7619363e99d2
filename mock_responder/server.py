"""HTTP application and listener for the mock responder.

The app is built from an explicit ServerConfig; there is no module-level
application object. ``start`` binds the port synchronously (so a BindError is
raised to the caller) and serves on a background thread; ``serve`` does the
same on the calling thread and blocks.
"""

from __future__ import annotations

import logging
import socket
import threading
import time

import uvicorn
from fastapi import FastAPI, Request, Response

from .body import read_json_body
from .config import ServerConfig
from .errors import BindError, MalformedBodyError, error_from_body_error, error_from_exception
from .responses import error_response
from .routes import register_routes


log = logging.getLogger("mock_responder.server")


def create_app(config: ServerConfig | None = None) -> FastAPI:
    config = config or ServerConfig()

    app = FastAPI(
        title="Mock Responder",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        # Paths match exactly; "/test/" is a 404, not a redirect.
        redirect_slashes=False,
    )
    app.state.config = config  # type: ignore[attr-defined]

    @app.middleware("http")
    async def _body_and_exception_guard(request: Request, call_next):
        """Parse JSON bodies before routing; keep handler failures per-request."""

        try:
            request.state.json_body = await read_json_body(request, limit=config.body_limit)
        except MalformedBodyError as exc:
            log.debug("rejected body for %s %s: %s", request.method, request.url.path, exc.reason)
            return error_response(error_from_body_error(exc, debug=config.debug), status_code=exc.status_code)

        try:
            response: Response = await call_next(request)
            return response
        except Exception as exc:  # noqa: BLE001
            log.exception("unhandled error for %s %s", request.method, request.url.path)
            return error_response(error_from_exception(exc, debug=config.debug), status_code=500)

    register_routes(app, config.routes)
    return app


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind and listen on (host, port), raising BindError on any OS failure."""

    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(socket.SOMAXCONN)
    except OSError as exc:
        sock.close()
        raise BindError(host, port, exc.strerror or str(exc)) from exc
    sock.set_inheritable(True)
    return sock


def _uvicorn_server(app: FastAPI, config: ServerConfig, port: int) -> uvicorn.Server:
    uv_config = uvicorn.Config(
        app,
        host=config.host,
        port=port,
        log_level=config.log_level,
        access_log=config.debug,
    )
    return uvicorn.Server(uv_config)


class ServerHandle:
    """A responder serving on a background thread.

    ``port`` is the port actually bound, so ``ServerConfig(port=0)`` can be
    used to get an ephemeral port in tests.
    """

    def __init__(self, config: ServerConfig, sock: socket.socket) -> None:
        self.config = config
        self.host = config.host
        self.port: int = sock.getsockname()[1]
        self._sock = sock
        self._server = _uvicorn_server(create_app(config), config, self.port)
        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [sock]},
            name=f"mock-responder-{self.port}",
            daemon=True,
        )

    @property
    def url(self) -> str:
        host = self.host
        if host in ("0.0.0.0", "::", ""):
            host = "127.0.0.1"
        elif ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self.port}"

    @property
    def started(self) -> bool:
        return self._server.started

    def _start_thread(self) -> None:
        self._thread.start()

    def wait_started(self, timeout: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive():
                raise RuntimeError("mock responder thread exited during startup")
            if time.monotonic() >= deadline:
                raise TimeoutError(f"mock responder did not start within {timeout}s")
            time.sleep(0.01)

    def stop(self, timeout: float = 5.0) -> None:
        self._server.should_exit = True
        if self._thread.is_alive():
            self._thread.join(timeout)
        self._sock.close()

    def __enter__(self) -> "ServerHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


def start(config: ServerConfig | None = None, *, timeout: float = 5.0) -> ServerHandle:
    """Bind the configured port and serve on a background thread.

    Raises BindError if the port is unavailable. Returns once the server is
    accepting connections.
    """

    config = config or ServerConfig()
    sock = bind_socket(config.host, config.port)
    try:
        handle = ServerHandle(config, sock)
    except Exception:
        sock.close()
        raise
    handle._start_thread()
    try:
        handle.wait_started(timeout)
    except Exception:
        handle.stop()
        raise
    log.info("mock responder listening on %s", handle.url)
    return handle


def serve(config: ServerConfig | None = None) -> None:
    """Bind the configured port and serve on the calling thread until killed."""

    config = config or ServerConfig()
    sock = bind_socket(config.host, config.port)
    port = sock.getsockname()[1]
    log.info("mock responder listening on %s:%s", config.host, port)
    try:
        _uvicorn_server(create_app(config), config, port).run(sockets=[sock])
    finally:
        sock.close()
