"""
Configuration loader for gateway.yml.
"""

from __future__ import annotations

import copy
import logging
import os
import re
import threading
import time
from pathlib import Path

import yaml

from stream_gateway.config.models import GatewaySettings
from stream_gateway.config.settings import (
    BROWSER_APPLICATION_ID,
    PRESIGNED_URL_EXPIRATION_SECONDS,
    REMOTE_DESKTOP_APPLICATION_ID,
    SSH_USER,
    STREAMING_URL_VALIDITY_SECONDS,
    TERMINAL_APPLICATION_ID,
    get_env,
)

logger = logging.getLogger("stream-gateway")

# Configuration paths
CONFIG_PATH = Path(get_env("config_path", "/data/config") or "/data/config")
GATEWAY_CONFIG_FILE = CONFIG_PATH / "gateway.yml"

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})
_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')

DEFAULTS: dict = {
    "settings": {"isAppStreamEnabled": False},
    "appstream": {
        "default_stack": "",
        "default_fleet": "",
        "stacks": {},
        "browser_application_id": BROWSER_APPLICATION_ID,
        "terminal_application_id": TERMINAL_APPLICATION_ID,
        "remote_desktop_application_id": REMOTE_DESKTOP_APPLICATION_ID,
        "ssh_user": SSH_USER,
        "validity_seconds": STREAMING_URL_VALIDITY_SECONDS,
    },
    "sagemaker": {"session_expiration_seconds": PRESIGNED_URL_EXPIRATION_SECONDS},
    "aws": {
        "region": "us-east-1",
        "environment_role_arn": "",
        "external_id": "",
        "connect_timeout": 5,
        "read_timeout": 10,
        "max_attempts": 3,
        "circuit_breaker": {"failure_threshold": 5, "recovery_timeout": 30.0},
    },
    "security": {
        "api_key": "",
        "rate_limiting": {
            "enabled": True,
            "default_limit": "200/minute",
            "rewrite_limit": "60/minute",
        },
    },
    "logging": {"level": "INFO"},
}


def flag_env_key(name: str) -> str:
    """Environment variable overriding a flag: ``isAppStreamEnabled`` -> ``IS_APP_STREAM_ENABLED``."""
    return _CAMEL_BOUNDARY.sub("_", name).upper()


def parse_bool(value: object, default: bool = False) -> bool:
    """
    Interpret a YAML or environment value as a boolean.

    Args:
        value: Raw value (bool, int or string)
        default: Returned for None and unrecognized strings

    Returns:
        Boolean value
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    logger.warning(f"Unrecognized boolean value '{value}', using {default}")
    return default


class GatewayConfig:
    """Manages gateway configuration from YAML file."""

    _lock = threading.Lock()
    _config: dict = {}
    _typed_config: GatewaySettings | None = None
    _last_load: float = 0
    _cache_duration: int = 60

    @classmethod
    def load(cls) -> dict:
        """Load gateway configuration from YAML file."""
        now = time.time()
        if cls._config and (now - cls._last_load) < cls._cache_duration:
            return cls._config

        with cls._lock:
            # Double-check after acquiring the lock
            now = time.time()
            if cls._config and (now - cls._last_load) < cls._cache_duration:
                return cls._config
            return cls._load_locked(now)

    @classmethod
    def _load_locked(cls, now: float) -> dict:
        """Load config while holding ``_lock``. Called from :meth:`load`."""
        defaults = copy.deepcopy(DEFAULTS)

        if not GATEWAY_CONFIG_FILE.exists():
            logger.info(f"Gateway config not found, using defaults: {GATEWAY_CONFIG_FILE}")
            cls._config = defaults
            cls._last_load = now
            cls._typed_config = GatewaySettings.model_validate(cls._config)
            return cls._config

        try:
            with open(GATEWAY_CONFIG_FILE, "r") as f:
                file_config = yaml.safe_load(f) or {}

            cls._config = cls._deep_merge(defaults, file_config)
            cls._last_load = now
            logger.info(f"Loaded gateway config from {GATEWAY_CONFIG_FILE}")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading gateway config: {e}")
            cls._config = defaults

        cls._typed_config = GatewaySettings.model_validate(cls._config)
        return cls._config

    @classmethod
    def _deep_merge(cls, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @classmethod
    def get(cls, *keys: str, default: object = None) -> object:
        """Get a nested config value from a sequence of keys."""
        config = cls.load()
        for key in keys:
            if isinstance(config, dict) and key in config:
                config = config[key]
            else:
                return default
        return config

    @classmethod
    def settings(cls) -> GatewaySettings:
        """Get typed configuration as a GatewaySettings instance."""
        if cls._typed_config is None:
            cls.load()
        assert cls._typed_config is not None
        return cls._typed_config

    @classmethod
    def get_boolean(cls, name: str, default: bool = False) -> bool:
        """
        Read a feature flag.

        The environment variable (e.g. ``IS_APP_STREAM_ENABLED``) wins over
        the ``settings`` section of gateway.yml.

        Args:
            name: Flag name as used in gateway.yml
            default: Value when the flag is not set anywhere

        Returns:
            Flag value
        """
        env_value = os.environ.get(flag_env_key(name))
        if env_value is not None:
            return parse_bool(env_value, default)
        return parse_bool(cls.get("settings", name), default)

    @classmethod
    def reload(cls) -> None:
        """Force reload configuration."""
        with cls._lock:
            cls._last_load = 0
            cls._config = {}
        cls.load()
