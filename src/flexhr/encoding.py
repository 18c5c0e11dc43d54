"""Request parameter and header encoding helpers."""

from __future__ import annotations

import typing as t

from aiohttp import hdrs
from multidict import CIMultiDict
from yarl import URL

JSON_CONTENT_TYPE = "application/json"


def encode_params(
    params: t.Any,
    headers: CIMultiDict[str],
    dumps: t.Callable[[t.Any], str],
) -> t.Any:
    """Convert request parameters to a request body.

    Plain dicts and lists are serialized to JSON and the content type is set
    to ``application/json``. Anything else (bytes, str, ``aiohttp.FormData``,
    file objects...) is returned untouched, leaving the content type to the
    caller or the transport.

    Args:
        params: The request parameters.
        headers: Request headers, updated in place for JSON payloads.
        dumps: JSON serializer.

    Returns:
        The request body.

    """
    if isinstance(params, dict | list):
        headers[hdrs.CONTENT_TYPE] = JSON_CONTENT_TYPE
        return dumps(params)
    return params


def _query_value(value: t.Any) -> t.Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return [_query_value(item) for item in value if item is not None]
    return value


def with_query(url: str, params: t.Any) -> str:
    """Return ``url`` with ``params`` serialized into its query string.

    Booleans are written as ``true``/``false`` and None values are left out.
    """
    if isinstance(params, t.Mapping):
        params = {key: _query_value(value) for key, value in params.items() if value is not None}
    return str(URL(url).update_query(params))


def merge_headers(
    default_headers: t.Mapping[str, str] | None = None,
    request_headers: t.Mapping[str, str] | None = None,
) -> CIMultiDict[str]:
    """Merge default headers with request-specific headers.

    Request-specific headers take precedence over default headers.

    Args:
        default_headers: Headers sent with every request.
        request_headers: Request-specific headers to merge.

    Returns:
        CIMultiDict: Merged case-insensitive headers.

    """
    merged: CIMultiDict[str] = CIMultiDict(default_headers or {})
    if request_headers:
        merged.update(request_headers)
    return merged
