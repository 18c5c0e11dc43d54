"""Plugin registry and request-chain composition.

Plugins are decorators over a request function: they receive the next
function in the chain and return a function with the same signature. They
are applied in registration order, each one wrapping the previous, so for
plugins ``A``, ``B`` and ``C`` the effective request function is
``C(B(A(terminal)))``. The first plugin registered is the closest to the
network call.

Example:
    A plugin prefixing every URL with ``/api``::

        @named("api_prefix")
        def api_prefix(next_fetch):
            async def fetch(url, init):
                return await next_fetch("/api" + url, init)

            return fetch

"""

from __future__ import annotations

import functools
import logging
import typing as t

if t.TYPE_CHECKING:
    from .types import Plugin, RequestFunction

_logger = logging.getLogger("flexhr")

P = t.TypeVar("P")


def named(token: t.Hashable) -> t.Callable[[P], P]:
    """Attach an identity token to a plugin so requests can skip it."""

    def decorate(plugin: P) -> P:
        plugin.plugin_id = token  # type: ignore[attr-defined]
        return plugin

    return decorate


def plugin_id(plugin: Plugin) -> t.Hashable | None:
    """Return the identity token of a plugin, or None for anonymous plugins."""
    return getattr(plugin, "plugin_id", None)


class PluginRegistry:
    """Ordered collection of plugins applied to every request.

    The registry is meant to be populated during setup. Each request builds
    its request function from a snapshot of the registry taken at call time,
    so later registrations never affect requests already in flight.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._plugins: list[Plugin] = []
        self._logger = logger or _logger

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> t.Iterator[Plugin]:
        return iter(self.snapshot())

    def register(self, plugin: Plugin) -> None:
        """Append a plugin to the end of the chain."""
        self._plugins.append(plugin)
        self._logger.debug(
            "Registered plugin %r (position %d)",
            plugin_id(plugin) or getattr(plugin, "__name__", plugin),
            len(self._plugins),
        )

    def reset(self) -> None:
        """Remove every registered plugin."""
        self._plugins.clear()
        self._logger.debug("Plugin registry cleared")

    def snapshot(self) -> tuple[Plugin, ...]:
        return tuple(self._plugins)

    def applicable(self, exclude: t.Collection[t.Hashable] = ()) -> list[Plugin]:
        """Return the registered plugins not excluded by identity token.

        Plugins without an identity token are always kept. The relative order
        of the remaining plugins is preserved.

        Args:
            exclude: Identity tokens of the plugins to leave out.

        Returns:
            list: The plugins to apply, in registration order.

        """
        excluded = frozenset(exclude)
        return [
            plugin
            for plugin in self.snapshot()
            if (token := plugin_id(plugin)) is None or token not in excluded
        ]

    def build(
        self,
        terminal: RequestFunction,
        exclude: t.Collection[t.Hashable] = (),
    ) -> RequestFunction:
        """Compose the effective request function for a single request.

        Args:
            terminal: The innermost request function performing the network call.
            exclude: Identity tokens of the plugins to skip for this request.

        Returns:
            The outermost request function of the chain.

        """
        plugins = self.applicable(exclude)
        self._logger.debug(
            "Building request chain: %d plugin(s) applied, %d skipped",
            len(plugins),
            len(self._plugins) - len(plugins),
        )
        return functools.reduce(lambda next_fetch, plugin: plugin(next_fetch), plugins, terminal)
