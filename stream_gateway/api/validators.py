"""
Input validation functions for the API.
"""

from typing import Any

from stream_gateway.config.settings import (
    ENVIRONMENT_ID_PATTERN,
    MAX_ENVIRONMENT_ID_LENGTH,
    INSTANCE_ID_PATTERN,
    URL_PATTERN,
)
from stream_gateway.domain.types import ATTRIBUTE_ALIASES

# Largest number of connections accepted by the list endpoint
MAX_LIST_CONNECTIONS = 500


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


def validate_environment_id(env_id: str) -> str:
    """
    Validate an environment identifier.

    Args:
        env_id: The environment id to validate

    Returns:
        Validated environment id

    Raises:
        ValidationError: If the environment id is invalid
    """
    if not env_id:
        raise ValidationError("Environment id is required")

    if len(env_id) > MAX_ENVIRONMENT_ID_LENGTH:
        raise ValidationError(f"Environment id exceeds maximum length of {MAX_ENVIRONMENT_ID_LENGTH}")

    if not ENVIRONMENT_ID_PATTERN.match(env_id):
        raise ValidationError("Environment id contains invalid characters")

    return env_id


def validate_principal_id(principal_id: str | None) -> str:
    """
    Validate the caller principal id sent in ``X-Principal-Id``.

    Raises:
        ValidationError: If missing or malformed
    """
    if not principal_id:
        raise ValidationError("X-Principal-Id header is required")

    if len(principal_id) > MAX_ENVIRONMENT_ID_LENGTH or not ENVIRONMENT_ID_PATTERN.match(principal_id):
        raise ValidationError("X-Principal-Id contains invalid characters")

    return principal_id


def validate_connection(data: Any) -> dict:
    """
    Validate a connection payload.

    Only fields the rewrite step reads are checked; other keys pass through.

    Args:
        data: Decoded JSON body

    Returns:
        The payload as a dict

    Raises:
        ValidationError: If the payload is not a valid connection
    """
    if not isinstance(data, dict):
        raise ValidationError("Connection must be a JSON object")

    aliases = sorted(ATTRIBUTE_ALIASES.intersection(data))
    if aliases:
        raise ValidationError(f"Unsupported connection field(s) {aliases}; use camelCase keys")

    for key in ("id", "scheme", "url", "instanceId", "type", "operation", "info", "name", "role",
                "appstreamDestinationUrl"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"Connection field '{key}' must be a string")

    instance_id = data.get("instanceId")
    if instance_id and not INSTANCE_ID_PATTERN.match(instance_id):
        raise ValidationError("Invalid instance id format")

    url = data.get("url")
    if url and not URL_PATTERN.match(url):
        raise ValidationError("Invalid URL format (must start with http:// or https://)")

    return data


def validate_connection_list(data: Any) -> list[dict]:
    """
    Validate a ``{"connections": [...]}`` payload.

    Raises:
        ValidationError: If the payload or any connection is invalid
    """
    if not isinstance(data, dict) or not isinstance(data.get("connections"), list):
        raise ValidationError("Body must be an object with a 'connections' list")

    connections = data["connections"]
    if len(connections) > MAX_LIST_CONNECTIONS:
        raise ValidationError(f"At most {MAX_LIST_CONNECTIONS} connections can be listed at once")

    return [validate_connection(c) for c in connections]
