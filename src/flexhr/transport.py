"""Network transport and the terminal request function."""

from __future__ import annotations

import logging
import typing as t

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from .response import ConnectionFailure, FetchResult, Response

if t.TYPE_CHECKING:
    from types import TracebackType

    from .types import RequestFunction, RequestInit, Transport

_logger = logging.getLogger("flexhr")


class AiohttpTransport:
    """Fetch-like transport backed by an aiohttp client session.

    Used as an async context manager, all requests share one session. Used
    bare, each call opens and closes a short-lived session of its own.

    Attributes:
        timeout: Total request timeout in seconds. None means no timeout.

    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        session: aiohttp.ClientSession | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Total request timeout in seconds. None means no timeout.
            session: An externally managed session to send requests through.
                It is never closed by the transport.
            logger: Logger instance for structured logging. If None, uses module logger.

        """
        self.timeout = timeout
        self._session = session
        self._owns_session = False
        self._logger = logger or _logger

    def _get_timeout(self) -> aiohttp.ClientTimeout | None:
        if self.timeout is not None:
            return aiohttp.ClientTimeout(total=self.timeout)
        return None

    async def __call__(self, url: str, init: RequestInit) -> Response:
        """Send the request and return the response with its body read.

        Raises:
            aiohttp.ClientError: If the request could not be completed.
            TimeoutError: If the request timed out.

        """
        if self._session is not None:
            return await self._send(self._session, url, init)
        async with aiohttp.ClientSession() as session:
            return await self._send(session, url, init)

    async def _send(
        self,
        session: aiohttp.ClientSession,
        url: str,
        init: RequestInit,
    ) -> Response:
        kwargs: dict[str, t.Any] = {"headers": init.headers}
        if init.body is not None:
            kwargs["data"] = init.body
        timeout = self._get_timeout()
        if timeout:
            kwargs["timeout"] = timeout

        async with session.request(init.method, url, **kwargs) as response:
            body = await response.read()
            self._logger.debug(
                "Transport received: %s %s -> %d (%d bytes)",
                init.method,
                url,
                response.status,
                len(body),
            )
            return Response(
                status=response.status,
                reason=response.reason or "",
                headers=CIMultiDictProxy(CIMultiDict(response.headers)),
                url=str(response.url),
                body=body,
            )

    async def __aenter__(self) -> t.Self:
        """Open a session shared by every request until the context exits."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the session if it was opened by this transport."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False


def guard_transport(
    transport: Transport,
    logger: logging.Logger | None = None,
) -> RequestFunction:
    """Wrap a transport into the terminal function of the request chain.

    Any exception raised by the transport is converted into a
    :class:`ConnectionFailure`, so the terminal function never raises.
    Cancellation is not an ``Exception`` and still propagates.

    Args:
        transport: The fetch-like callable performing the network call.
        logger: Logger instance for structured logging. If None, uses module logger.

    Returns:
        The terminal request function.

    """
    log = logger or _logger

    async def fetch(url: str, init: RequestInit) -> FetchResult:
        try:
            return await transport(url, init)
        except Exception as e:  # noqa: BLE001
            log.warning("Connection failed: %s %s -> %s", init.method, url, e)
            return ConnectionFailure(error=e, url=url)

    return fetch
