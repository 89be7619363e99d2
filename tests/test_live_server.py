"""Tests against a real listener on a loopback port."""

from __future__ import annotations

import socket
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from mock_responder import server
from mock_responder.config import ServerConfig
from mock_responder.errors import BindError
from mock_responder.routes import Route
from mock_responder.server import ServerHandle, bind_socket, start


class TestStart:
    def test_binds_ephemeral_port(self, live_server: ServerHandle) -> None:
        assert live_server.port > 0
        assert live_server.started
        assert live_server.url == f"http://127.0.0.1:{live_server.port}"

    def test_serves_fixed_payload(self, live_server: ServerHandle, http_client: httpx.Client) -> None:
        response = http_client.get(f"{live_server.url}/test")
        assert response.status_code == 200
        assert response.content == b'{"message":"Hewwo"}'
        assert response.headers["content-type"].startswith("application/json")

    def test_unknown_path(self, live_server: ServerHandle, http_client: httpx.Client) -> None:
        assert http_client.delete(f"{live_server.url}/nope").status_code == 404

    def test_malformed_body_then_valid_request(self, live_server: ServerHandle, http_client: httpx.Client) -> None:
        bad = http_client.post(
            f"{live_server.url}/test",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert 400 <= bad.status_code < 500
        good = http_client.get(f"{live_server.url}/test")
        assert good.status_code == 200
        assert good.json() == {"message": "Hewwo"}

    def test_context_manager_stops(self, http_client: httpx.Client) -> None:
        with start(ServerConfig(host="127.0.0.1", port=0, log_level="warning")) as handle:
            url = handle.url
            assert http_client.get(f"{url}/test").status_code == 200
        with pytest.raises(httpx.TransportError):
            http_client.get(f"{url}/test", timeout=1.0)


class TestConcurrency:
    def test_fifty_simultaneous_gets(self, live_server: ServerHandle, http_client: httpx.Client) -> None:
        url = f"{live_server.url}/test"

        def fetch(_: int) -> tuple[int, bytes]:
            response = http_client.get(url, timeout=10.0)
            return response.status_code, response.content

        with ThreadPoolExecutor(max_workers=50) as pool:
            results = list(pool.map(fetch, range(50)))

        assert len(results) == 50
        assert all(r == (200, b'{"message":"Hewwo"}') for r in results)


class TestBindError:
    def test_bind_socket_on_taken_port(self, live_server: ServerHandle) -> None:
        with pytest.raises(BindError) as excinfo:
            bind_socket("127.0.0.1", live_server.port)
        assert excinfo.value.port == live_server.port

    def test_start_on_taken_port(self, live_server: ServerHandle) -> None:
        with pytest.raises(BindError):
            start(ServerConfig(host="127.0.0.1", port=live_server.port))

    def test_unresolvable_host(self) -> None:
        with pytest.raises(BindError):
            bind_socket("no-such-host.invalid", 0)


class TestStartFailure:
    def test_socket_closed_when_app_build_fails(self, monkeypatch: pytest.MonkeyPatch) -> None:
        bound: list[socket.socket] = []

        def recording_bind(host: str, port: int) -> socket.socket:
            sock = bind_socket(host, port)
            bound.append(sock)
            return sock

        monkeypatch.setattr(server, "bind_socket", recording_bind)
        routes = (Route("/x", {}), Route("/x", {}, methods=("GET",)))
        with pytest.raises(ValueError, match="duplicate route"):
            start(ServerConfig(host="127.0.0.1", port=0, routes=routes))
        assert len(bound) == 1
        assert bound[0].fileno() == -1


class TestExtensionMethods:
    @pytest.mark.parametrize("method", ["TRACE", "PROPFIND", "PURGE"])
    def test_over_the_wire(self, live_server: ServerHandle, http_client: httpx.Client, method: str) -> None:
        response = http_client.request(method, f"{live_server.url}/test")
        assert response.status_code == 200
        assert response.json() == {"message": "Hewwo"}
