"""
Connection URL rewriting.

Replaces the direct URL of a connection with an AppStream streaming URL so
the target endpoint is only reachable through the gateway.
"""

from __future__ import annotations

import logging

from stream_gateway.config.settings import (
    BROWSER_APPLICATION_ID,
    SETTING_IS_APPSTREAM_ENABLED,
    SSH_USER,
    TERMINAL_APPLICATION_ID,
)
from stream_gateway.domain.providers import (
    InstanceLookup,
    PrivateUrlResolver,
    SettingsAccessor,
    StreamingUrlProvider,
)
from stream_gateway.domain.types import (
    ConnectionDescriptor,
    ConnectionScheme,
    RemoteDesktopRequest,
    RewriteContext,
    StreamingUrlRequest,
)
from stream_gateway.observability import CONNECTION_REWRITES

logger = logging.getLogger("stream-gateway")


class ConnectionUrlRewriter:
    """
    Decides whether a connection goes through AppStream and rewrites its URL.

    The rewriter holds no per-request state; one instance serves all
    requests. Errors raised by collaborators are not caught.
    """

    def __init__(
        self,
        settings: SettingsAccessor,
        private_url_resolver: PrivateUrlResolver,
        instance_lookup: InstanceLookup,
        streaming_url_provider: StreamingUrlProvider,
        browser_application_id: str = BROWSER_APPLICATION_ID,
        terminal_application_id: str = TERMINAL_APPLICATION_ID,
        ssh_user: str = SSH_USER,
    ):
        self.settings = settings
        self.private_url_resolver = private_url_resolver
        self.instance_lookup = instance_lookup
        self.streaming_url_provider = streaming_url_provider
        self.browser_application_id = browser_application_id
        self.terminal_application_id = terminal_application_id
        self.ssh_user = ssh_user

    def rewrite(self, descriptor: ConnectionDescriptor, context: RewriteContext) -> ConnectionDescriptor:
        """
        Rewrite a connection to use an AppStream streaming URL.

        Args:
            descriptor: Connection being created or listed
            context: Environment id and caller identity

        Returns:
            The same descriptor when nothing applies, otherwise a new one
            whose ``url`` is the streaming URL and whose
            ``appstream_destination_url`` is the previous ``url``
        """
        # Listing runs this step for every connection; only creation may call out
        if descriptor.is_listing or not self.settings.get_boolean(SETTING_IS_APPSTREAM_ENABLED):
            CONNECTION_REWRITES.labels(kind="skipped").inc()
            return descriptor

        if descriptor.is_sagemaker:
            private_url = self.private_url_resolver.create_private_url(
                context.request_context, context.environment_id, descriptor
            )
            descriptor = descriptor.replace(url=private_url)

        streaming_url = self._request_streaming_url(descriptor, context)
        if not streaming_url:
            CONNECTION_REWRITES.labels(kind="passthrough").inc()
            return descriptor

        rewritten = descriptor.replace(
            appstream_destination_url=descriptor.url,
            url=streaming_url,
        )
        CONNECTION_REWRITES.labels(kind=descriptor.kind.value).inc()
        logger.debug(f"Modified connection {descriptor.id} to use AppStream streaming URL {streaming_url}")
        return rewritten

    def _request_streaming_url(self, descriptor: ConnectionDescriptor, context: RewriteContext) -> str | None:
        kind = descriptor.kind
        request_context = context.request_context
        env_id = context.environment_id

        if kind == ConnectionScheme.HTTP:
            if not descriptor.url:
                return None
            logger.debug(f"Target connection URL {descriptor.url} will be accessible via AppStream URL")
            return self.streaming_url_provider.get_streaming_url(
                request_context,
                StreamingUrlRequest(environment_id=env_id, application_id=self.browser_application_id),
            )

        if kind == ConnectionScheme.SSH:
            logger.debug(
                f"Target instance {descriptor.instance_id} will be available for SSH connection via AppStream URL"
            )
            private_ip = self.instance_lookup.get_private_ip(env_id, descriptor.instance_id)
            if not private_ip:
                logger.warning(
                    f"No private IP found for instance {descriptor.instance_id} in environment {env_id}, "
                    "streaming terminal without a target address"
                )
            return self.streaming_url_provider.get_streaming_url(
                request_context,
                StreamingUrlRequest(
                    environment_id=env_id,
                    application_id=self.terminal_application_id,
                    session_context=f"{private_ip or ''},{self.ssh_user}",
                ),
            )

        if kind == ConnectionScheme.RDP:
            logger.debug(f"Will stream target RDP connection for instance {descriptor.instance_id} via AppStream")
            return self.streaming_url_provider.url_for_remote_desktop(
                request_context,
                RemoteDesktopRequest(environment_id=env_id, instance_id=descriptor.instance_id),
            )

        return None
