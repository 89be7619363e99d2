"""Shared test fixtures for mock_responder."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from mock_responder.config import ServerConfig
from mock_responder.server import ServerHandle, create_app, start


@pytest.fixture
def client() -> Iterator[TestClient]:
    """In-process client against an app built from the default config."""
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def live_server() -> Iterator[ServerHandle]:
    """A real listener on an ephemeral loopback port, stopped after the test."""
    handle = start(ServerConfig(host="127.0.0.1", port=0, log_level="warning"))
    try:
        yield handle
    finally:
        handle.stop()


@pytest.fixture
def http_client() -> Iterator[httpx.Client]:
    """Real HTTP client; ignores proxy settings from the environment."""
    with httpx.Client(trust_env=False, timeout=10.0) as c:
        yield c
