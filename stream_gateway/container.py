"""
Lightweight DI container for gateway services.

Stored in ``app.extensions['services']`` during Flask context,
with a global fallback for code running outside a request context.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from stream_gateway.config.loader import GatewayConfig

if TYPE_CHECKING:
    from stream_gateway.aws.appstream import AppStreamUrlProvider
    from stream_gateway.aws.clients import AwsClientFactory
    from stream_gateway.aws.ec2 import Ec2InstanceLookup
    from stream_gateway.aws.sagemaker import SageMakerUrlResolver
    from stream_gateway.domain.rewriter import ConnectionUrlRewriter
    from stream_gateway.resilience import CircuitBreaker


class ServiceContainer:
    """Lightweight service container holding shared service instances."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._client_factory: AwsClientFactory | None = None
        self._instance_lookup: Ec2InstanceLookup | None = None
        self._streaming_provider: AppStreamUrlProvider | None = None
        self._private_url_resolver: SageMakerUrlResolver | None = None
        self._rewriter: ConnectionUrlRewriter | None = None

    def _circuit(self, name: str) -> CircuitBreaker:
        from stream_gateway.aws.clients import is_upstream_failure
        from stream_gateway.resilience import CircuitBreaker

        cb_config = GatewayConfig.settings().aws.circuit_breaker
        return CircuitBreaker(
            name=name,
            failure_threshold=cb_config.failure_threshold,
            recovery_timeout=cb_config.recovery_timeout,
            is_failure=is_upstream_failure,
        )

    @property
    def client_factory(self) -> AwsClientFactory:
        with self._lock:
            if self._client_factory is None:
                from stream_gateway.aws.clients import AwsClientFactory

                aws = GatewayConfig.settings().aws
                self._client_factory = AwsClientFactory(
                    region=aws.region,
                    environment_role_arn=aws.environment_role_arn,
                    external_id=aws.external_id,
                    connect_timeout=aws.connect_timeout,
                    read_timeout=aws.read_timeout,
                    max_attempts=aws.max_attempts,
                )
            return self._client_factory

    @property
    def instance_lookup(self) -> Ec2InstanceLookup:
        with self._lock:
            if self._instance_lookup is None:
                from stream_gateway.aws.ec2 import Ec2InstanceLookup

                self._instance_lookup = Ec2InstanceLookup(self.client_factory, self._circuit("ec2"))
            return self._instance_lookup

    @property
    def streaming_provider(self) -> AppStreamUrlProvider:
        with self._lock:
            if self._streaming_provider is None:
                from stream_gateway.aws.appstream import AppStreamUrlProvider

                self._streaming_provider = AppStreamUrlProvider(
                    self.client_factory,
                    self.instance_lookup,
                    GatewayConfig.settings().appstream,
                    self._circuit("appstream"),
                )
            return self._streaming_provider

    @property
    def private_url_resolver(self) -> SageMakerUrlResolver:
        with self._lock:
            if self._private_url_resolver is None:
                from stream_gateway.aws.sagemaker import SageMakerUrlResolver

                self._private_url_resolver = SageMakerUrlResolver(
                    self.client_factory,
                    GatewayConfig.settings().sagemaker.session_expiration_seconds,
                    self._circuit("sagemaker"),
                )
            return self._private_url_resolver

    @property
    def rewriter(self) -> ConnectionUrlRewriter:
        with self._lock:
            if self._rewriter is None:
                from stream_gateway.domain.rewriter import ConnectionUrlRewriter

                appstream = GatewayConfig.settings().appstream
                self._rewriter = ConnectionUrlRewriter(
                    settings=GatewayConfig,
                    private_url_resolver=self.private_url_resolver,
                    instance_lookup=self.instance_lookup,
                    streaming_url_provider=self.streaming_provider,
                    browser_application_id=appstream.browser_application_id,
                    terminal_application_id=appstream.terminal_application_id,
                    ssh_user=appstream.ssh_user,
                )
            return self._rewriter

    def circuit_states(self) -> dict[str, str]:
        """State of each AWS circuit breaker created so far."""
        collaborators = {
            "ec2": self._instance_lookup,
            "appstream": self._streaming_provider,
            "sagemaker": self._private_url_resolver,
        }
        return {
            name: collaborator.circuit.state.name.lower()
            for name, collaborator in collaborators.items()
            if collaborator is not None
        }


# Fallback outside Flask context (set once at startup in app.py)
_global_container: ServiceContainer | None = None


def get_services() -> ServiceContainer:
    """Return the service container.

    Tries ``current_app.extensions['services']`` first, then falls back
    to the module-level ``_global_container`` (same instance, set at
    startup).
    """
    try:
        from flask import current_app

        return current_app.extensions["services"]
    except (RuntimeError, KeyError):
        pass
    if _global_container is not None:
        return _global_container
    raise RuntimeError("ServiceContainer not initialized")
