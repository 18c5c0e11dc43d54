"""Request types and callable protocols for flexhr.

This module provides the dataclasses describing an outgoing request and the
protocols that plugins and transports implement.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

from multidict import CIMultiDict

from .response import FetchResult, Response

# HTTP method type - reuses aiohttp's method string constants
# Users can use aiohttp.hdrs.METH_GET, aiohttp.hdrs.METH_POST, etc. or plain strings
HttpMethod = str


@dataclass
class RequestInit:
    """The mutable part of a request handed down the plugin chain.

    Attributes:
        method: HTTP method to use.
        headers: Case-insensitive request headers.
        body: Request body, or None for no body.

    """

    method: HttpMethod
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: t.Any = None


@dataclass
class RequestOptions:
    """Per-request options accepted by the verb functions.

    Attributes:
        params: Request parameters. Plain dicts and lists are sent as JSON,
            anything else is used as the body as is. GET requests put them in
            the query string instead.
        headers: Additional headers to merge with the default headers.
        skip_plugins: Identity tokens of plugins to leave out for this call.
        skip_encode: Use params as the body without JSON encoding.
        no_fetch: Return the prepared request instead of sending it.

    """

    params: t.Any = None
    headers: t.Mapping[str, str] | None = None
    skip_plugins: t.Collection[t.Hashable] = ()
    skip_encode: bool = False
    no_fetch: bool = False


@dataclass
class PreparedRequest:
    """A request that was built but not sent.

    Attributes:
        url: The request URL.
        init: Method, headers and body of the request.

    """

    url: str
    init: RequestInit


RequestFunction = t.Callable[[str, RequestInit], t.Awaitable[FetchResult]]


@t.runtime_checkable
class Plugin(t.Protocol):
    """Wraps a request function and returns one with the same signature.

    A plugin may carry a ``plugin_id`` attribute so that individual requests
    can skip it through ``RequestOptions.skip_plugins``.
    """

    def __call__(self, next_fetch: RequestFunction, /) -> RequestFunction: ...


class Transport(t.Protocol):
    """A fetch-like callable performing the actual network call."""

    async def __call__(self, url: str, init: RequestInit, /) -> Response: ...
