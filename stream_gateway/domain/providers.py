"""
Protocols for the collaborators used by the connection URL rewriter.
"""

from typing import Protocol

from stream_gateway.domain.types import (
    ConnectionDescriptor,
    RemoteDesktopRequest,
    RequestContext,
    StreamingUrlRequest,
)


class SettingsAccessor(Protocol):
    """Read access to boolean feature flags."""

    def get_boolean(self, name: str) -> bool:
        ...


class PrivateUrlResolver(Protocol):
    """Resolves a private (presigned) URL for a connection."""

    def create_private_url(
        self,
        request_context: RequestContext,
        environment_id: str,
        descriptor: ConnectionDescriptor,
    ) -> str:
        """
        Create a private URL for the connection.

        Args:
            request_context: Caller identity
            environment_id: Workspace environment identifier
            descriptor: Connection being created

        Returns:
            URL reachable only by the streaming gateway
        """
        ...


class InstanceLookup(Protocol):
    """Looks up network details of a compute instance."""

    def get_private_ip(self, environment_id: str, instance_id: str | None) -> str | None:
        """
        Get the private IP address of an instance.

        Args:
            environment_id: Workspace environment identifier
            instance_id: Compute instance identifier

        Returns:
            Private IP address, or None if the instance has no network interface
        """
        ...


class StreamingUrlProvider(Protocol):
    """Issues time-limited streaming URLs."""

    def get_streaming_url(
        self, request_context: RequestContext, request: StreamingUrlRequest
    ) -> str:
        """
        Get a streaming URL for an application target.

        Args:
            request_context: Caller identity
            request: Environment, application and optional session context

        Returns:
            Streaming URL
        """
        ...

    def url_for_remote_desktop(
        self, request_context: RequestContext, request: RemoteDesktopRequest
    ) -> str:
        """
        Get a streaming URL for a remote desktop session on an instance.

        Args:
            request_context: Caller identity
            request: Environment and instance identifiers

        Returns:
            Streaming URL
        """
        ...
