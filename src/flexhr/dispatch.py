"""Status-driven response dispatch.

:func:`dispatch_response` decodes a response and hands the payload to the
handler matching its status code. A handler registered for the exact status
wins; otherwise ``OK`` handles 2xx responses and ``Error`` handles the rest,
including connection failures (status 0).

Example:
    Handling a user lookup::

        result = await dispatch_response(
            await client.get("/users/42"),
            {
                "OK": lambda user: user,
                "On404": lambda _: None,
                "Error": raise_api_error,
            },
        )

"""

from __future__ import annotations

import inspect
import logging
import re
import typing as t
from dataclasses import dataclass, field
from http import HTTPStatus

from aiohttp import hdrs

from .encoding import JSON_CONTENT_TYPE
from .errors import DispatchError
from .response import NO_CONTENT, ConnectionFailure, FetchResult

_logger = logging.getLogger("flexhr")

Handler = t.Callable[[t.Any], t.Any]
Decoder = t.Callable[[FetchResult], t.Any]

OK_KEY = "OK"
ERROR_KEY = "Error"
DECODE_KEY = "decode"
_STATUS_KEY = re.compile(r"On(\d+)")


async def _resolve(value: t.Any) -> t.Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class ResponseHandlers:
    """Handlers for the possible outcomes of a request.

    Attributes:
        on_ok: Fallback handler for 2xx responses.
        on_error: Fallback handler for every other response.
        on_status: Handlers for specific status codes, taking precedence
            over the fallbacks.
        decode: Custom body decoder receiving the response. Defaults to
            :func:`decode_body`.

    """

    on_ok: Handler | None
    on_error: Handler | None
    on_status: dict[int, Handler] = field(default_factory=dict)
    decode: Decoder | None = None

    @classmethod
    def from_mapping(cls, handlers: t.Mapping[str, t.Callable[..., t.Any]]) -> t.Self:
        """Build handlers from ``OK``, ``Error``, ``On<status>`` and ``decode`` keys."""
        on_status: dict[int, Handler] = {}
        for key, handler in handlers.items():
            if match := _STATUS_KEY.fullmatch(key):
                on_status[int(match.group(1))] = handler
        return cls(
            on_ok=handlers.get(OK_KEY),
            on_error=handlers.get(ERROR_KEY),
            on_status=on_status,
            decode=handlers.get(DECODE_KEY),
        )

    def select(self, status: int, *, ok: bool, url: str | None = None) -> Handler:
        """Return the handler for a response status.

        Raises:
            DispatchError: If no applicable handler was supplied.

        """
        handler = self.on_status.get(status)
        if handler is None:
            handler = self.on_ok if ok else self.on_error
        if handler is None:
            fallback = OK_KEY if ok else ERROR_KEY
            msg = f"No On{status} or {fallback} handler supplied"
            raise DispatchError(msg, url=url, status=status)
        return handler


async def decode_body(response: FetchResult) -> t.Any:
    """Decode a response body according to its content type.

    Connection failures decode to ``{"error": <message>}``. 204 responses
    decode to :data:`NO_CONTENT`. ``application/json`` bodies are parsed as
    JSON and everything else, including responses without a content type,
    is returned as text.

    Raises:
        ValueError: If a body declared as JSON is not valid JSON.

    """
    if isinstance(response, ConnectionFailure):
        return {"error": response.message}

    content_type = response.headers.get(hdrs.CONTENT_TYPE)
    media_type = content_type.split(";", 1)[0].strip().lower() if content_type else "text/plain"

    if response.status == HTTPStatus.NO_CONTENT:
        return NO_CONTENT

    if media_type == JSON_CONTENT_TYPE:
        return await response.json()

    return await response.text()


async def dispatch_response(
    response: FetchResult,
    handlers: ResponseHandlers | t.Mapping[str, t.Callable[..., t.Any]],
) -> t.Any:
    """Decode a response and pass the payload to the matching handler.

    The body is decoded before a handler is selected, so decode errors
    surface even when no applicable handler was supplied.

    Args:
        response: The result of a request.
        handlers: A :class:`ResponseHandlers` instance or a mapping with
            ``OK``, ``Error``, optional ``On<status>`` and ``decode`` keys.

    Returns:
        Whatever the selected handler returns, awaited if it is awaitable.

    Raises:
        DispatchError: If no applicable handler was supplied.

    """
    if not isinstance(handlers, ResponseHandlers):
        handlers = ResponseHandlers.from_mapping(handlers)

    decoder = handlers.decode or decode_body
    data = await _resolve(decoder(response))
    handler = handlers.select(response.status, ok=response.ok, url=response.url or None)
    _logger.debug(
        "Dispatching status %d to %s",
        response.status,
        getattr(handler, "__name__", handler),
    )
    return await _resolve(handler(data))
