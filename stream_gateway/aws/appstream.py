"""
AppStream streaming URL provider.
"""

from __future__ import annotations

import logging

from stream_gateway.aws.clients import AwsClientFactory, AwsCollaborator
from stream_gateway.config.models import AppStreamConfig
from stream_gateway.config.settings import ConfigurationError
from stream_gateway.domain.providers import InstanceLookup
from stream_gateway.domain.types import RemoteDesktopRequest, RequestContext, StreamingUrlRequest
from stream_gateway.resilience import CircuitBreaker

logger = logging.getLogger("stream-gateway")


class AppStreamUrlProvider(AwsCollaborator):
    """Issues AppStream streaming URLs with ``CreateStreamingURL``."""

    service_name = "appstream"

    def __init__(
        self,
        client_factory: AwsClientFactory,
        instance_lookup: InstanceLookup,
        config: AppStreamConfig,
        circuit_breaker: CircuitBreaker | None = None,
    ):
        super().__init__(client_factory, circuit_breaker)
        self.instance_lookup = instance_lookup
        self.config = config

    def resolve_stack(self, environment_id: str) -> tuple[str, str]:
        """
        Get the (stack, fleet) pair serving an environment.

        Raises:
            ConfigurationError: If neither a per-environment nor a default
                stack and fleet are configured
        """
        mapping = self.config.stacks.get(environment_id)
        stack = (mapping.stack if mapping else "") or self.config.default_stack
        fleet = (mapping.fleet if mapping else "") or self.config.default_fleet
        if not stack or not fleet:
            raise ConfigurationError(f"No AppStream stack/fleet configured for environment {environment_id}")
        return stack, fleet

    def get_streaming_url(self, request_context: RequestContext, request: StreamingUrlRequest) -> str:
        stack, fleet = self.resolve_stack(request.environment_id)
        params = {
            "StackName": stack,
            "FleetName": fleet,
            "UserId": request_context.principal_id,
            "ApplicationId": request.application_id,
            "Validity": self.config.validity_seconds,
        }
        if request.session_context:
            params["SessionContext"] = request.session_context

        appstream = self.client_factory.client("appstream", request.environment_id)
        resp = self._call(appstream.create_streaming_url, "CreateStreamingURL", **params)
        logger.info(
            f"Created AppStream streaming URL for {request_context.principal_id} "
            f"(stack={stack}, application={request.application_id})"
        )
        return resp["StreamingURL"]

    def url_for_remote_desktop(self, request_context: RequestContext, request: RemoteDesktopRequest) -> str:
        """Stream the remote desktop client pointed at the instance's private IP."""
        private_ip = self.instance_lookup.get_private_ip(request.environment_id, request.instance_id)
        return self.get_streaming_url(
            request_context,
            StreamingUrlRequest(
                environment_id=request.environment_id,
                application_id=self.config.remote_desktop_application_id,
                session_context=private_ip,
            ),
        )
