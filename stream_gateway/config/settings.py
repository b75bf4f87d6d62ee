"""
Constants and settings for the Stream Gateway.
"""

import os
import re

# =============================================================================
# Constants
# =============================================================================

# Setting keys read through the configuration accessor
SETTING_IS_APPSTREAM_ENABLED = "isAppStreamEnabled"

# Operation value sent by the pipeline while enumerating connections
LIST_OPERATION = "list"

# Connection type that needs a presigned URL before streaming
SAGEMAKER_CONNECTION_TYPE = "sagemaker"

# AppStream application targets
BROWSER_APPLICATION_ID = "firefox"
TERMINAL_APPLICATION_ID = "terminal"
REMOTE_DESKTOP_APPLICATION_ID = "mstsc"
SSH_USER = "ec2-user"

STREAMING_URL_VALIDITY_SECONDS = 60
PRESIGNED_URL_EXPIRATION_SECONDS = 1800

# Environment id validation (alphanumeric, dash, underscore, dot)
ENVIRONMENT_ID_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')
MAX_ENVIRONMENT_ID_LENGTH = 128

# EC2 / SSM managed instance ids
INSTANCE_ID_PATTERN = re.compile(r'^(i|mi)-[0-9a-f]{8,17}$')

# URL validation (basic)
URL_PATTERN = re.compile(r'^https?://')


def get_env(key: str, default: str = None, required: bool = False) -> str:
    """
    Retrieve a configuration value from the environment.

    Args:
        key: Configuration key (converted to UPPER_SNAKE_CASE)
        default: Default value
        required: Whether the value is required

    Returns:
        Configuration value

    Raises:
        ValueError: If required value is missing
    """
    env_key = key.upper().replace("-", "_")
    value = os.environ.get(env_key, default)
    if required and not value:
        raise ValueError(f"Required configuration missing: {key}")
    return value


class ConfigurationError(Exception):
    """Raised when gateway.yml lacks a value needed to serve a request."""
    pass
