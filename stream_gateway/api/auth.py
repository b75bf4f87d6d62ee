"""
API key authentication and caller identity for the gateway API.

The before_request hook enforces API key validation on all /api/*
endpoints. Health check remains public.

Fail-closed: if no API key is configured, all /api/* endpoints return 503.
"""

from __future__ import annotations

import hmac
import logging

from flask import Response, request

from stream_gateway.api.responses import api_error
from stream_gateway.api.validators import validate_principal_id
from stream_gateway.config.loader import GatewayConfig
from stream_gateway.config.settings import get_env
from stream_gateway.domain.types import RequestContext

logger = logging.getLogger("stream-gateway")

# Endpoints that do not require authentication (use Flask endpoint names)
PUBLIC_ENDPOINTS = {"api.health"}


def _get_api_key() -> str | None:
    """
    Retrieve the configured API key.

    ``GATEWAY_API_KEY`` wins over ``security.api_key`` in gateway.yml.

    Returns:
        The API key string, or None if not configured.
    """
    key = get_env("gateway_api_key") or GatewayConfig.settings().security.api_key
    return key if key else None


def _extract_request_key() -> str | None:
    """
    Extract the API key from the incoming request.

    Supported methods:
        - Header: X-API-Key: <key>
        - Header: Authorization: Bearer <key>

    Returns:
        The key string, or None if not provided.
    """
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return api_key

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]

    return None


def require_api_key() -> tuple[Response, int] | None:
    """
    Flask before_request hook that enforces API key authentication.

    - Skips public endpoints (health check).
    - Returns 503 if no API key is configured (fail-closed).
    - Returns 401 if the request key is missing or invalid.
    - Returns None (allows request) if the key is valid.
    """
    if request.endpoint in PUBLIC_ENDPOINTS:
        return None

    configured_key = _get_api_key()
    if configured_key is None:
        logger.warning("API key not configured, rejecting request (fail-closed)")
        return api_error("API key not configured. Service unavailable.", 503)

    request_key = _extract_request_key()
    if request_key is None:
        return api_error("API key required. Use X-API-Key header or Authorization: Bearer <key>.", 401)

    # Constant-time comparison
    if not hmac.compare_digest(request_key, configured_key):
        logger.warning(f"Invalid API key from {request.remote_addr} on {request.path}")
        return api_error("Invalid API key.", 401)

    return None


def current_request_context() -> RequestContext:
    """
    Build the caller identity from ``X-Principal-Id`` and ``X-Username``.

    Raises:
        ValidationError: If the principal id is missing or malformed
    """
    principal_id = validate_principal_id(request.headers.get("X-Principal-Id"))
    return RequestContext(
        principal_id=principal_id,
        username=request.headers.get("X-Username") or None,
    )
