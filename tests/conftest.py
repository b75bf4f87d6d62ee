"""
Shared pytest fixtures for the gateway test suite.
"""

import os
from unittest.mock import MagicMock

import pytest

# ---------------------------------------------------------------------------
# Environment stubs – must be set BEFORE any gateway module is imported so
# that module-level configuration does not pick up the host's settings.
# ---------------------------------------------------------------------------

os.environ.setdefault("GATEWAY_API_KEY", "test-api-key-secret")
os.environ.setdefault("CONFIG_PATH", "/tmp/stream-gateway-tests/config")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.pop("IS_APP_STREAM_ENABLED", None)

from stream_gateway.config.loader import GatewayConfig  # noqa: E402
from stream_gateway.domain.rewriter import ConnectionUrlRewriter  # noqa: E402
from stream_gateway.domain.types import RequestContext, RewriteContext  # noqa: E402


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def reset_gateway_config():
    """Clear the GatewayConfig cache before and after the test."""
    def _reset():
        GatewayConfig._config = {}
        GatewayConfig._typed_config = None
        GatewayConfig._last_load = 0

    _reset()
    yield GatewayConfig
    _reset()


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    """Settings accessor with the AppStream flag turned on."""
    mock_settings = MagicMock()
    mock_settings.get_boolean.return_value = True
    return mock_settings


@pytest.fixture
def instance_lookup():
    mock_lookup = MagicMock()
    mock_lookup.get_private_ip.return_value = "10.0.0.5"
    return mock_lookup


@pytest.fixture
def streaming_provider():
    mock_provider = MagicMock()
    mock_provider.get_streaming_url.return_value = "https://appstream.example/streaming?app=1"
    mock_provider.url_for_remote_desktop.return_value = "https://appstream.example/streaming?app=rdp"
    return mock_provider


@pytest.fixture
def private_url_resolver():
    mock_resolver = MagicMock()
    mock_resolver.create_private_url.return_value = "https://nb-1.notebook.us-east-1.sagemaker.aws?authToken=x"
    return mock_resolver


@pytest.fixture
def rewriter(settings, private_url_resolver, instance_lookup, streaming_provider):
    return ConnectionUrlRewriter(
        settings=settings,
        private_url_resolver=private_url_resolver,
        instance_lookup=instance_lookup,
        streaming_url_provider=streaming_provider,
    )


@pytest.fixture
def request_context():
    return RequestContext(principal_id="u-alice", username="alice")


@pytest.fixture
def rewrite_context(request_context):
    return RewriteContext(environment_id="env-123", request_context=request_context)


# ---------------------------------------------------------------------------
# AWS client mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def client_factory():
    """AwsClientFactory stand-in returning one MagicMock client per service."""
    clients: dict = {}

    def _client(service_name, environment_id=None):
        return clients.setdefault(service_name, MagicMock(name=f"{service_name}-client"))

    factory = MagicMock()
    factory.client.side_effect = _client
    factory.clients = clients
    return factory


# ---------------------------------------------------------------------------
# Flask test client
# ---------------------------------------------------------------------------

@pytest.fixture
def app_client(mocker, rewriter):
    """Create a Flask test_client whose container serves the fake-backed rewriter."""
    from stream_gateway.api.rate_limit import limiter
    from stream_gateway.app import app
    from stream_gateway.container import ServiceContainer

    container = ServiceContainer()
    container._rewriter = rewriter

    app.config["TESTING"] = True
    app.extensions["services"] = container
    mocker.patch("stream_gateway.container._global_container", container)
    mocker.patch.object(limiter, "enabled", False)

    client = app.test_client()
    _original_open = client.open

    def _open_with_identity(*args, **kwargs):
        headers = kwargs.pop("headers", {})
        if isinstance(headers, dict):
            if "X-API-Key" not in headers and "Authorization" not in headers:
                headers["X-API-Key"] = "test-api-key-secret"
            headers.setdefault("X-Principal-Id", "u-alice")
        kwargs["headers"] = headers
        return _original_open(*args, **kwargs)

    client.open = _open_with_identity
    client.container = container
    return client
