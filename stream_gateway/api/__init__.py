"""API module for Flask routes and helpers."""

from stream_gateway.api.validators import (
    ValidationError,
    validate_environment_id,
    validate_principal_id,
    validate_connection,
    validate_connection_list,
)
from stream_gateway.api.responses import api_success, api_error
from stream_gateway.api.auth import require_api_key, current_request_context

__all__ = [
    "ValidationError",
    "validate_environment_id",
    "validate_principal_id",
    "validate_connection",
    "validate_connection_list",
    "api_success",
    "api_error",
    "require_api_key",
    "current_request_context",
]
