"""Configuration settings for flexhr."""

from __future__ import annotations

import functools
import json
import typing as t
from dataclasses import dataclass, field

if t.TYPE_CHECKING:
    import logging

compact_dumps = functools.partial(json.dumps, separators=(",", ":"))


@dataclass
class ClientConfig:
    """Configuration for a flexhr client.

    Attributes:
        default_headers: Default headers to include with every request.
        timeout: Total request timeout in seconds for the default transport.
            None means no timeout.
        logger: Logger instance for structured logging. If None, uses module logger.
        json_dumps: Serializer used for dict and list request parameters.

    """

    default_headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    logger: logging.Logger | None = None
    json_dumps: t.Callable[[t.Any], str] = compact_dumps
