"""Common test fixtures for the flexhr project."""

from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

import pytest
from pytest_httpserver import HTTPServer

from flexhr import Client, ClientConfig, RequestInit, Response


@dataclass
class RecordingTransport:
    """In-memory transport recording every call it receives."""

    response: Response = field(default_factory=lambda: Response(status=200, body=b"response"))
    calls: list[tuple[str, RequestInit]] = field(default_factory=list)

    async def __call__(self, url: str, init: RequestInit) -> Response:
        self.calls.append((url, init))
        return self.response

    @property
    def last_call(self) -> tuple[str, RequestInit]:
        return self.calls[-1]


@dataclass
class FailingTransport:
    """Transport raising the given exception on every call."""

    error: Exception

    async def __call__(self, url: str, init: RequestInit) -> Response:
        raise self.error


@pytest.fixture
def transport() -> RecordingTransport:
    """Test fixture providing a recording transport."""
    return RecordingTransport()


@pytest.fixture
def client(transport: RecordingTransport) -> Client:
    """Test fixture providing a client bound to the recording transport."""
    return Client(transport=transport)


@pytest.fixture
async def http_client() -> t.AsyncGenerator[Client]:
    """Test fixture providing a client sending real requests through aiohttp."""
    async with Client(ClientConfig(timeout=5)) as client:
        yield client


@pytest.fixture
def base_url(httpserver: HTTPServer) -> str:
    """Test fixture providing the root URL of the local HTTP server."""
    return f"http://localhost:{httpserver.port}"


@pytest.fixture
def closed_port_url() -> str:
    """Test fixture providing a URL nothing listens on."""
    server = HTTPServer(host="127.0.0.1", port=0)
    server.start()
    port = server.port
    server.stop()
    return f"http://127.0.0.1:{port}/unreachable"


@pytest.fixture
def failing_client() -> Client:
    """Test fixture providing a client whose transport cannot connect."""
    return Client(transport=FailingTransport(ConnectionRefusedError("Connection refused")))
