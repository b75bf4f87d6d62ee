"""
Flask API routes for the Stream Gateway.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, jsonify, request

from stream_gateway.api.audit import audit_log_response
from stream_gateway.api.auth import current_request_context, require_api_key
from stream_gateway.api.rate_limit import get_rewrite_limit, limiter
from stream_gateway.api.responses import api_success
from stream_gateway.api.validators import (
    validate_connection,
    validate_connection_list,
    validate_environment_id,
)
from stream_gateway.config.loader import GatewayConfig
from stream_gateway.config.settings import LIST_OPERATION, SETTING_IS_APPSTREAM_ENABLED
from stream_gateway.container import get_services
from stream_gateway.domain.types import ConnectionDescriptor, RewriteContext

logger = logging.getLogger("stream-gateway")

# Type alias for Flask route returns
RouteResponse = tuple[Response, int]

api = Blueprint("api", __name__)
api.before_request(require_api_key)
api.after_request(audit_log_response)


# =============================================================================
# Health and Status
# =============================================================================

@api.route("/health")
@limiter.exempt
def health() -> RouteResponse:
    """Health check endpoint."""
    circuits = get_services().circuit_states()
    degraded = any(state == "open" for state in circuits.values())
    return jsonify({
        "status": "degraded" if degraded else "healthy",
        "appstream_enabled": GatewayConfig.get_boolean(SETTING_IS_APPSTREAM_ENABLED),
        "circuits": circuits,
    }), 503 if degraded else 200


@api.route("/api/config")
def get_config() -> RouteResponse:
    """Get gateway configuration (non-sensitive)."""
    settings = GatewayConfig.settings()
    return api_success({
        "appstream_enabled": GatewayConfig.get_boolean(SETTING_IS_APPSTREAM_ENABLED),
        "region": settings.aws.region,
        "environment_role_configured": bool(settings.aws.environment_role_arn),
        "default_stack": settings.appstream.default_stack,
        "default_fleet": settings.appstream.default_fleet,
        "mapped_environments": sorted(settings.appstream.stacks),
        "applications": {
            "browser": settings.appstream.browser_application_id,
            "terminal": settings.appstream.terminal_application_id,
            "remote_desktop": settings.appstream.remote_desktop_application_id,
        },
    })


# =============================================================================
# Connections
# =============================================================================

@api.route("/api/environments/<env_id>/connections/url", methods=["POST"])
@limiter.limit(get_rewrite_limit)
def create_connection_url(env_id: str) -> RouteResponse:
    """Rewrite a connection so it opens through AppStream."""
    env_id = validate_environment_id(env_id)
    payload = validate_connection(request.get_json(silent=True))
    context = RewriteContext(environment_id=env_id, request_context=current_request_context())

    connection = get_services().rewriter.rewrite(ConnectionDescriptor.from_dict(payload), context)
    return api_success({"envId": env_id, "connection": connection.to_dict()})


@api.route("/api/environments/<env_id>/connections/list", methods=["POST"])
def list_connections(env_id: str) -> RouteResponse:
    """Pass connections through the rewrite step as a listing (no URLs issued)."""
    env_id = validate_environment_id(env_id)
    payloads = validate_connection_list(request.get_json(silent=True))
    context = RewriteContext(environment_id=env_id, request_context=current_request_context())

    rewriter = get_services().rewriter
    connections = [
        rewriter.rewrite(
            ConnectionDescriptor.from_dict(payload).replace(operation=LIST_OPERATION), context
        ).to_dict()
        for payload in payloads
    ]
    return api_success({"envId": env_id, "connections": connections})
