"""Module-level request functions backed by a default client.

These mirror the :class:`~flexhr.client.Client` methods for applications that
need a single process-wide plugin chain::

    import flexhr

    flexhr.register_plugin(flexhr.plugins.url_prefix("/api"))
    response = await flexhr.get("/users", flexhr.RequestOptions(params={"filter": 12}))

"""

from __future__ import annotations

import typing as t

from .client import Client, RequestResult
from .dispatch import dispatch_response

if t.TYPE_CHECKING:
    from .types import Plugin, RequestOptions

_default_client: Client | None = None


def default_client() -> Client:
    """Return the client behind the module-level functions, creating it on first use."""
    global _default_client  # noqa: PLW0603
    if _default_client is None:
        _default_client = Client()
    return _default_client


def register_plugin(plugin: Plugin) -> None:
    default_client().register_plugin(plugin)


def reset_plugins() -> None:
    """Remove all plugins from the default client. Mostly useful in tests."""
    default_client().reset_plugins()


async def get(url: str, options: RequestOptions | None = None) -> RequestResult:
    return await default_client().get(url, options)


async def post(url: str, options: RequestOptions | None = None) -> RequestResult:
    return await default_client().post(url, options)


async def put(url: str, options: RequestOptions | None = None) -> RequestResult:
    return await default_client().put(url, options)


async def patch(url: str, options: RequestOptions | None = None) -> RequestResult:
    return await default_client().patch(url, options)


async def delete(url: str, options: RequestOptions | None = None) -> RequestResult:
    return await default_client().delete(url, options)


__all__ = [
    "default_client",
    "delete",
    "dispatch_response",
    "get",
    "patch",
    "post",
    "put",
    "register_plugin",
    "reset_plugins",
]
