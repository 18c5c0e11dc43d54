"""A thin asynchronous request layer with composable plugins and status-driven response dispatch."""

from . import plugins
from .api import default_client, delete, get, patch, post, put, register_plugin, reset_plugins
from .client import Client
from .config import ClientConfig
from .dispatch import ResponseHandlers, decode_body, dispatch_response
from .errors import DispatchError, FlexhrError
from .registry import PluginRegistry, named
from .response import NO_CONTENT, ConnectionFailure, FetchResult, Response
from .transport import AiohttpTransport, guard_transport
from .types import HttpMethod, Plugin, PreparedRequest, RequestInit, RequestOptions, Transport

__all__ = [
    "NO_CONTENT",
    "AiohttpTransport",
    "Client",
    "ClientConfig",
    "ConnectionFailure",
    "DispatchError",
    "FetchResult",
    "FlexhrError",
    "HttpMethod",
    "Plugin",
    "PluginRegistry",
    "PreparedRequest",
    "RequestInit",
    "RequestOptions",
    "Response",
    "ResponseHandlers",
    "Transport",
    "decode_body",
    "default_client",
    "delete",
    "dispatch_response",
    "get",
    "guard_transport",
    "named",
    "patch",
    "plugins",
    "post",
    "put",
    "register_plugin",
    "reset_plugins",
]
__version__ = "0.1.0"
