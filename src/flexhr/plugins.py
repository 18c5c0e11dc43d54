"""Stock plugins.

Each factory returns a plugin carrying an identity token, so any of them can
be skipped per request with ``RequestOptions(skip_plugins=[...])``.
"""

from __future__ import annotations

import collections
import inspect
import logging
import time
import typing as t
import urllib.parse as parser

import aiolimiter
from aiohttp import hdrs
from yarl import URL

from .registry import named

if t.TYPE_CHECKING:
    from .response import FetchResult
    from .types import Plugin, RequestFunction, RequestInit

_logger = logging.getLogger("flexhr")

TokenSource = str | t.Callable[[], str | t.Awaitable[str]]


def url_prefix(prefix: str, *, plugin_id: t.Hashable = "url_prefix") -> Plugin:
    """Prefix every request URL, e.g. with an API root such as ``/api``."""

    @named(plugin_id)
    def plugin(next_fetch: RequestFunction) -> RequestFunction:
        async def fetch(url: str, init: RequestInit) -> FetchResult:
            return await next_fetch(prefix + url, init)

        return fetch

    return plugin


def default_headers(
    headers: t.Mapping[str, str],
    *,
    plugin_id: t.Hashable = "default_headers",
) -> Plugin:
    """Add headers to every request that does not already set them."""

    @named(plugin_id)
    def plugin(next_fetch: RequestFunction) -> RequestFunction:
        async def fetch(url: str, init: RequestInit) -> FetchResult:
            for name, value in headers.items():
                init.headers.setdefault(name, value)
            return await next_fetch(url, init)

        return fetch

    return plugin


def bearer_auth(token: TokenSource, *, plugin_id: t.Hashable = "auth") -> Plugin:
    """Send an ``Authorization: Bearer`` header with every request.

    Args:
        token: The token, or a sync or async callable returning it. A callable
            is invoked once per request.
        plugin_id: Identity token of the plugin.

    Returns:
        The plugin.

    """

    async def resolve() -> str:
        if not callable(token):
            return token
        value = token()
        if inspect.isawaitable(value):
            value = await value
        return value

    @named(plugin_id)
    def plugin(next_fetch: RequestFunction) -> RequestFunction:
        async def fetch(url: str, init: RequestInit) -> FetchResult:
            init.headers[hdrs.AUTHORIZATION] = f"Bearer {await resolve()}"
            return await next_fetch(url, init)

        return fetch

    return plugin


def _get_domain(url: str) -> str:
    """Extract the domain (host:port) of a URL. Empty for relative URLs."""
    try:
        return URL(url).host_port_subcomponent or ""
    except ValueError:
        return parser.urlparse(url).netloc


def rate_limit(
    max_rate: float = 1,
    time_period: float = 1,
    *,
    plugin_id: t.Hashable = "rate_limit",
) -> Plugin:
    """Limit the request rate per domain.

    Args:
        max_rate: Maximum requests per domain per time period.
        time_period: Time period in seconds.
        plugin_id: Identity token of the plugin.

    Returns:
        The plugin. Limiters are shared by every chain it is applied to.

    """
    limiters: dict[str, aiolimiter.AsyncLimiter] = collections.defaultdict(
        lambda: aiolimiter.AsyncLimiter(max_rate=max_rate, time_period=time_period),
    )

    @named(plugin_id)
    def plugin(next_fetch: RequestFunction) -> RequestFunction:
        async def fetch(url: str, init: RequestInit) -> FetchResult:
            domain = _get_domain(url)
            async with limiters[domain]:
                _logger.debug("Rate limit acquired for domain: %s", domain)
            return await next_fetch(url, init)

        return fetch

    return plugin


def log_requests(
    logger: logging.Logger | None = None,
    *,
    level: int = logging.INFO,
    plugin_id: t.Hashable = "log_requests",
) -> Plugin:
    """Log every request with its outcome and duration."""
    log = logger or _logger

    @named(plugin_id)
    def plugin(next_fetch: RequestFunction) -> RequestFunction:
        async def fetch(url: str, init: RequestInit) -> FetchResult:
            started = time.perf_counter()
            result = await next_fetch(url, init)
            log.log(
                level,
                "%s %s -> %d (%.1f ms)",
                init.method,
                url,
                result.status,
                (time.perf_counter() - started) * 1000,
            )
            return result

        return fetch

    return plugin
