"""Core flexhr client."""

from __future__ import annotations

import dataclasses
import logging
import typing as t

from aiohttp import hdrs

from .config import ClientConfig
from .encoding import encode_params, merge_headers, with_query
from .registry import PluginRegistry
from .response import FetchResult
from .transport import AiohttpTransport, guard_transport
from .types import HttpMethod, PreparedRequest, RequestInit, RequestOptions

if t.TYPE_CHECKING:
    from types import TracebackType

    from .types import Plugin, RequestFunction, Transport

# Module-level logger for structured logging
_logger = logging.getLogger("flexhr")

# Type alias for request results
RequestResult = FetchResult | PreparedRequest


class Client:
    """HTTP client applying a chain of plugins around a fetch-like transport.

    Every request builds its request function from the client's plugin
    registry, so plugins registered on the client apply to all its requests
    unless a request skips them by identity token. Transport failures never
    raise: they resolve to a :class:`~flexhr.response.ConnectionFailure`.

    Attributes:
        config: Configuration object with default headers, timeout and logger.
        plugins: The plugin registry used to build each request chain.

    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: Transport | None = None,
        plugins: PluginRegistry | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Configuration object for the client. If None, uses default
                configuration.
            transport: Fetch-like callable performing the network call. If None,
                an :class:`~flexhr.transport.AiohttpTransport` is created and
                managed by the client.
            plugins: Plugin registry to use. If None, the client starts with an
                empty registry of its own.

        """
        self.config = config or ClientConfig()
        self._logger = self.config.logger or _logger
        self.plugins = plugins if plugins is not None else PluginRegistry(self._logger)
        self._owns_transport = transport is None
        self._transport: Transport = transport or AiohttpTransport(
            timeout=self.config.timeout,
            logger=self._logger,
        )
        self._terminal = guard_transport(self._transport, self._logger)

    def register_plugin(self, plugin: Plugin) -> None:
        """Append a plugin to the client's request chain."""
        self.plugins.register(plugin)

    def reset_plugins(self) -> None:
        """Remove every plugin from the client's request chain."""
        self.plugins.reset()

    def prepare(
        self,
        method: HttpMethod,
        url: str,
        options: RequestOptions | None = None,
    ) -> PreparedRequest:
        """Build the URL, method, headers and body of a request.

        Args:
            method: HTTP method.
            url: The request URL.
            options: Request options.

        Returns:
            PreparedRequest: The request, ready to go down the plugin chain.

        """
        options = options or RequestOptions()
        init = RequestInit(
            method=method,
            headers=merge_headers(self.config.default_headers, options.headers),
        )
        if options.params is not None:
            init.body = (
                options.params
                if options.skip_encode
                else encode_params(options.params, init.headers, self.config.json_dumps)
            )
        return PreparedRequest(url=url, init=init)

    def build_fetch(self, skip_plugins: t.Collection[t.Hashable] = ()) -> RequestFunction:
        """Return the effective request function for a single request."""
        return self.plugins.build(self._terminal, exclude=skip_plugins)

    async def request(
        self,
        method: HttpMethod,
        url: str,
        options: RequestOptions | None = None,
    ) -> RequestResult:
        """Send a request through the plugin chain.

        The request parameters are always used as the body, whatever the
        method. :meth:`get` moves them to the query string instead.

        Args:
            method: HTTP method.
            url: The request URL.
            options: Request options for params, headers and skipped plugins.

        Returns:
            The response or connection failure returned by the chain, or the
            prepared request when ``options.no_fetch`` is set.

        """
        options = options or RequestOptions()
        prepared = self.prepare(method, url, options)
        if options.no_fetch:
            self._logger.debug("Prepared request without sending: %s %s", method, url)
            return prepared

        fetch = self.build_fetch(options.skip_plugins)
        self._logger.debug("Starting request: %s %s", method, url)
        result = await fetch(prepared.url, prepared.init)
        self._logger.debug("Request completed: %s %s -> %d", method, url, result.status)
        return result

    async def get(self, url: str, options: RequestOptions | None = None) -> RequestResult:
        """Send a GET request with params serialized into the query string."""
        if options is not None and options.params is not None:
            url = with_query(url, options.params)
            options = dataclasses.replace(options, params=None)
        return await self.request(hdrs.METH_GET, url, options)

    async def post(self, url: str, options: RequestOptions | None = None) -> RequestResult:
        return await self.request(hdrs.METH_POST, url, options)

    async def put(self, url: str, options: RequestOptions | None = None) -> RequestResult:
        return await self.request(hdrs.METH_PUT, url, options)

    async def patch(self, url: str, options: RequestOptions | None = None) -> RequestResult:
        return await self.request(hdrs.METH_PATCH, url, options)

    async def delete(self, url: str, options: RequestOptions | None = None) -> RequestResult:
        return await self.request(hdrs.METH_DELETE, url, options)

    async def __aenter__(self) -> t.Self:
        """Enter the async context manager.

        Opens a session shared by all requests when the client manages its
        own transport.

        Returns:
            Client: The client instance for use in async with statement.

        """
        if self._owns_transport and isinstance(self._transport, AiohttpTransport):
            await self._transport.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the async context manager and close an owned transport session."""
        if self._owns_transport and isinstance(self._transport, AiohttpTransport):
            await self._transport.__aexit__(exc_type, exc_val, exc_tb)
