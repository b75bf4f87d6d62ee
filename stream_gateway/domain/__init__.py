"""Domain module containing the connection rewriting logic."""

from stream_gateway.domain.types import (
    ConnectionDescriptor,
    ConnectionScheme,
    IncompleteConnectionError,
    RemoteDesktopRequest,
    RequestContext,
    RewriteContext,
    StreamingUrlRequest,
)
from stream_gateway.domain.providers import (
    InstanceLookup,
    PrivateUrlResolver,
    SettingsAccessor,
    StreamingUrlProvider,
)
from stream_gateway.domain.rewriter import ConnectionUrlRewriter

__all__ = [
    "ConnectionDescriptor",
    "ConnectionScheme",
    "IncompleteConnectionError",
    "RemoteDesktopRequest",
    "RequestContext",
    "RewriteContext",
    "StreamingUrlRequest",
    "InstanceLookup",
    "PrivateUrlResolver",
    "SettingsAccessor",
    "StreamingUrlProvider",
    "ConnectionUrlRewriter",
]
