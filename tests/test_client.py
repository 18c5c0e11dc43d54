"""Tests for the Client verb functions."""

from __future__ import annotations

import io
import json
import logging
import typing as t

import aiohttp
import pytest

from flexhr import (
    Client,
    ClientConfig,
    ConnectionFailure,
    PreparedRequest,
    RequestInit,
    RequestOptions,
    dispatch_response,
    named,
)

if t.TYPE_CHECKING:
    from flexhr.response import FetchResult
    from flexhr.types import RequestFunction

    from conftest import RecordingTransport

BODY_METHODS = ["POST", "PUT", "PATCH", "DELETE"]


def _verb(client: Client, method: str) -> t.Callable[..., t.Awaitable[t.Any]]:
    return getattr(client, method.lower())


class TestGet:
    """Tests for GET requests."""

    async def test_response(self, client: Client, transport: RecordingTransport) -> None:
        """Test that the transport response is returned as is."""
        assert await client.get("/foo/bar") is transport.response

    async def test_params_in_query_string(
        self,
        client: Client,
        transport: RecordingTransport,
    ) -> None:
        """Test that GET params go to the query string and no body is sent."""
        await client.get("/api/users", RequestOptions(params={"filter": 12}))

        url, init = transport.last_call
        assert url == "/api/users?filter=12"
        assert init.method == "GET"
        assert init.body is None
        assert "Content-Type" not in init.headers

    async def test_headers(self, client: Client, transport: RecordingTransport) -> None:
        """Test that custom headers are sent."""
        await client.get("/foo/bar", RequestOptions(headers={"Authorization": "Bearer 1234"}))

        _, init = transport.last_call
        assert init.headers["Authorization"] == "Bearer 1234"

    @pytest.mark.parametrize(
        ("params", "expected_url"),
        [
            ({"active": True}, "/u?active=true"),
            ({"active": False, "page": 2}, "/u?active=false&page=2"),
            ({"a": None, "b": "x"}, "/u?b=x"),
            ({"ids": [1, 2]}, "/u?ids=1&ids=2"),
            ({"flags": [True, None, False]}, "/u?flags=true&flags=false"),
        ],
    )
    async def test_query_value_types(
        self,
        client: Client,
        transport: RecordingTransport,
        params: dict[str, t.Any],
        expected_url: str,
    ) -> None:
        """Test that booleans, None and lists are serialized into the query string."""
        await client.get("/u", RequestOptions(params=params))

        url, init = transport.last_call
        assert url == expected_url
        assert init.body is None


@pytest.mark.parametrize("method", BODY_METHODS)
class TestBodyMethods:
    """Tests for requests sending params as the body."""

    async def test_response(
        self,
        client: Client,
        transport: RecordingTransport,
        method: str,
    ) -> None:
        """Test that the transport response is returned as is."""
        assert await _verb(client, method)("/foo/bar") is transport.response
        assert transport.last_call[1].method == method

    async def test_dict_params_as_json(
        self,
        client: Client,
        transport: RecordingTransport,
        method: str,
    ) -> None:
        """Test that dict params are sent as JSON."""
        await _verb(client, method)("/users", RequestOptions(params={"name": "John Doe"}))

        url, init = transport.last_call
        assert url == "/users"
        assert init.body == '{"name":"John Doe"}'
        assert init.headers["content-type"] == "application/json"

    async def test_list_params_round_trip(
        self,
        client: Client,
        transport: RecordingTransport,
        method: str,
    ) -> None:
        """Test that the JSON body decodes back to the original params."""
        params = [{"id": 1, "tags": ["a", "b"]}, {"id": 2, "nested": {"ok": True}}]
        await _verb(client, method)("/bulk", RequestOptions(params=params))

        assert json.loads(transport.last_call[1].body) == params

    async def test_form_data_passed_through(
        self,
        client: Client,
        transport: RecordingTransport,
        method: str,
    ) -> None:
        """Test that form data is used as the body without a content type."""
        form = aiohttp.FormData()
        form.add_field("param", "val")
        await _verb(client, method)("/foo/bar", RequestOptions(params=form))

        _, init = transport.last_call
        assert init.body is form
        assert "Content-Type" not in init.headers

    async def test_file_object_passed_through(
        self,
        client: Client,
        transport: RecordingTransport,
        method: str,
    ) -> None:
        """Test that file objects are used as the body untouched."""
        stream = io.BytesIO(b"raw")
        await _verb(client, method)("/upload", RequestOptions(params=stream))

        assert transport.last_call[1].body is stream

    async def test_skip_encode(
        self,
        client: Client,
        transport: RecordingTransport,
        method: str,
    ) -> None:
        """Test that skip_encode sends dict params unencoded."""
        params = {"param": "val"}
        await _verb(client, method)("/foo/bar", RequestOptions(params=params, skip_encode=True))

        _, init = transport.last_call
        assert init.body is params
        assert "Content-Type" not in init.headers


class TestRequestOptions:
    """Tests for options shared by every method."""

    async def test_default_headers_merged(self, transport: RecordingTransport) -> None:
        """Test that per-request headers override configured defaults."""
        config = ClientConfig(default_headers={"User-Agent": "flexhr-test", "Accept": "text/plain"})
        client = Client(config, transport=transport)

        await client.post("/x", RequestOptions(headers={"accept": "application/json"}))

        _, init = transport.last_call
        assert init.headers["User-Agent"] == "flexhr-test"
        assert init.headers.getall("Accept") == ["application/json"]

    async def test_explicit_content_type_overridden_for_json(
        self,
        client: Client,
        transport: RecordingTransport,
    ) -> None:
        """Test that JSON params always declare application/json."""
        await client.post(
            "/x",
            RequestOptions(params={"a": 1}, headers={"Content-Type": "text/plain"}),
        )

        assert transport.last_call[1].headers["Content-Type"] == "application/json"

    async def test_custom_json_dumps(self, transport: RecordingTransport) -> None:
        """Test that the configured serializer encodes params."""
        client = Client(ClientConfig(json_dumps=lambda value: json.dumps(value, sort_keys=True)), transport=transport)

        await client.put("/x", RequestOptions(params={"b": 2, "a": 1}))

        assert transport.last_call[1].body == '{"a": 1, "b": 2}'

    async def test_no_fetch_returns_prepared_request(
        self,
        client: Client,
        transport: RecordingTransport,
    ) -> None:
        """Test that no_fetch builds the request without sending it."""
        result = await client.get("/test", RequestOptions(params={"q": "x"}, no_fetch=True))

        assert isinstance(result, PreparedRequest)
        assert result.url == "/test?q=x"
        assert result.init.method == "GET"
        assert transport.calls == []

    async def test_no_fetch_does_not_build_plugins(self, client: Client) -> None:
        """Test that no_fetch never invokes plugins."""
        calls = 0

        def plugin(next_fetch: RequestFunction) -> RequestFunction:
            nonlocal calls
            calls += 1
            return next_fetch

        client.register_plugin(plugin)
        await client.post("/test", RequestOptions(params={"a": 1}, no_fetch=True))

        assert calls == 0

    async def test_reset_plugins(self, client: Client, transport: RecordingTransport) -> None:
        """Test that reset_plugins removes registered plugins."""

        @named("prefix")
        def prefix(next_fetch: RequestFunction) -> RequestFunction:
            async def fetch(url: str, init: RequestInit) -> FetchResult:
                return await next_fetch("/api" + url, init)

            return fetch

        client.register_plugin(prefix)
        client.reset_plugins()
        await client.get("/test")

        assert transport.last_call[0] == "/test"


class TestConnectionFailure:
    """Tests for transport failures."""

    async def test_failure_resolves(self, failing_client: Client) -> None:
        """Test that a transport exception resolves to a ConnectionFailure."""
        result = await failing_client.get("/test")

        assert isinstance(result, ConnectionFailure)
        assert result.ok is False
        assert result.status == 0
        assert result.message == "Connection refused"
        assert result.url == "/test"

    async def test_failure_dispatches_to_error(self, failing_client: Client) -> None:
        """Test that a failed request flows through dispatch like an HTTP error."""
        result = await dispatch_response(
            await failing_client.post("/test"),
            {"OK": lambda _: "ok", "Error": lambda payload: payload},
        )

        assert result == {"error": "Connection refused"}

    async def test_failure_is_logged(
        self,
        failing_client: Client,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that connection failures are logged as warnings."""
        with caplog.at_level(logging.WARNING, logger="flexhr"):
            await failing_client.delete("/test")

        assert any("Connection failed" in record.message for record in caplog.records)


class TestLogging:
    """Tests for structured logging."""

    async def test_logging_on_request(
        self,
        client: Client,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that requests are logged."""
        with caplog.at_level(logging.DEBUG, logger="flexhr"):
            await client.get("/logged")

        assert any("Starting request" in record.message for record in caplog.records)
        assert any("Request completed" in record.message for record in caplog.records)

    async def test_custom_logger(self, transport: RecordingTransport) -> None:
        """Test that custom logger is used when provided."""
        custom_logger = logging.getLogger("custom.flexhr")
        custom_logger.setLevel(logging.DEBUG)

        log_messages: list[str] = []
        handler = logging.Handler()
        handler.emit = lambda record: log_messages.append(record.getMessage())  # type: ignore[method-assign]
        custom_logger.addHandler(handler)

        try:
            client = Client(ClientConfig(logger=custom_logger), transport=transport)
            await client.get("/custom-logger")
        finally:
            custom_logger.removeHandler(handler)

        assert any("Starting request" in msg for msg in log_messages)
