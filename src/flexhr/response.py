"""Response-like values returned by the request chain.

A request either completes with a :class:`Response` or, when the transport
could not reach the server, resolves to a :class:`ConnectionFailure`. Both
expose ``ok`` and ``status`` so they can be handled through the same
dispatch path.
"""

from __future__ import annotations

import enum
import json
import typing as t
from dataclasses import dataclass, field

from aiohttp import hdrs
from aiohttp.helpers import parse_mimetype
from multidict import CIMultiDict, CIMultiDictProxy


class _NoContent(enum.Enum):
    NO_CONTENT = "no-content"

    def __repr__(self) -> str:
        return "NO_CONTENT"


# Decoded payload of every 204 response, distinct from a JSON ``null``
NO_CONTENT: t.Final = _NoContent.NO_CONTENT


@dataclass
class Response:
    """A completed HTTP response with its body already read.

    Attributes:
        status: HTTP status code.
        reason: HTTP reason phrase.
        headers: Case-insensitive response headers.
        url: Final URL of the response.
        body: Raw response body.

    """

    status: int
    reason: str = ""
    headers: t.Mapping[str, str] = field(default_factory=dict)
    url: str = ""
    body: bytes = b""

    def __post_init__(self) -> None:
        """Normalize headers to a case-insensitive read-only mapping."""
        if not isinstance(self.headers, CIMultiDictProxy):
            self.headers = CIMultiDictProxy(CIMultiDict(self.headers))

    @property
    def ok(self) -> bool:
        """Whether the status code is in the 2xx range."""
        return 200 <= self.status < 300  # noqa: PLR2004

    @property
    def charset(self) -> str | None:
        content_type = self.headers.get(hdrs.CONTENT_TYPE)
        if not content_type:
            return None
        return parse_mimetype(content_type).parameters.get("charset")

    async def text(self) -> str:
        """Return the body decoded with the declared charset (utf-8 by default)."""
        return self.body.decode(self.charset or "utf-8")

    async def json(self) -> t.Any:
        """Return the body parsed as JSON.

        Raises:
            json.JSONDecodeError: If the body is not valid JSON.

        """
        return json.loads(await self.text())


@dataclass(frozen=True)
class ConnectionFailure:
    """Stand-in for a response when the transport failed to deliver one.

    Attributes:
        error: The exception raised by the transport.
        url: The URL that was being requested.

    """

    error: BaseException
    url: str = ""

    ok: t.ClassVar[bool] = False
    status: t.ClassVar[int] = 0

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


FetchResult = Response | ConnectionFailure
