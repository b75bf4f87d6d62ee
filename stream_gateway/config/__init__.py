"""Configuration module for the Stream Gateway."""

from stream_gateway.config.settings import (
    SETTING_IS_APPSTREAM_ENABLED,
    LIST_OPERATION,
    SAGEMAKER_CONNECTION_TYPE,
    ENVIRONMENT_ID_PATTERN,
    MAX_ENVIRONMENT_ID_LENGTH,
    INSTANCE_ID_PATTERN,
    URL_PATTERN,
    ConfigurationError,
    get_env,
)
from stream_gateway.config.loader import (
    GatewayConfig,
    CONFIG_PATH,
    GATEWAY_CONFIG_FILE,
    parse_bool,
)

__all__ = [
    "SETTING_IS_APPSTREAM_ENABLED",
    "LIST_OPERATION",
    "SAGEMAKER_CONNECTION_TYPE",
    "ENVIRONMENT_ID_PATTERN",
    "MAX_ENVIRONMENT_ID_LENGTH",
    "INSTANCE_ID_PATTERN",
    "URL_PATTERN",
    "ConfigurationError",
    "get_env",
    "GatewayConfig",
    "CONFIG_PATH",
    "GATEWAY_CONFIG_FILE",
    "parse_bool",
]
