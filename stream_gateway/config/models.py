"""
Pydantic models for gateway configuration.

Mirrors the defaults dict in loader.py, providing typed access
to all gateway.yml settings via GatewayConfig.settings().
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class FeatureFlags(BaseModel):
    # Unknown flags are kept so get_boolean can read them
    model_config = ConfigDict(extra="allow")

    isAppStreamEnabled: bool = False


class AppStreamStackConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    stack: str = ""
    fleet: str = ""


class AppStreamConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    default_stack: str = ""
    default_fleet: str = ""
    stacks: dict[str, AppStreamStackConfig] = {}
    browser_application_id: str = "firefox"
    terminal_application_id: str = "terminal"
    remote_desktop_application_id: str = "mstsc"
    ssh_user: str = "ec2-user"
    validity_seconds: int = 60


class SageMakerConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    session_expiration_seconds: int = 1800


class CircuitConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    failure_threshold: int = 5
    recovery_timeout: float = 30.0


class AwsConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    region: str = "us-east-1"
    environment_role_arn: str = ""
    external_id: str = ""
    connect_timeout: int = 5
    read_timeout: int = 10
    max_attempts: int = 3
    circuit_breaker: CircuitConfig = CircuitConfig()


class RateLimitingConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = True
    default_limit: str = "200/minute"
    rewrite_limit: str = "60/minute"


class SecurityConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    api_key: str = ""
    rate_limiting: RateLimitingConfig = RateLimitingConfig()


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: str = "INFO"


class GatewaySettings(BaseModel):
    """Root settings model mirroring gateway.yml structure."""

    model_config = ConfigDict(extra="ignore")

    settings: FeatureFlags = FeatureFlags()
    appstream: AppStreamConfig = AppStreamConfig()
    sagemaker: SageMakerConfig = SageMakerConfig()
    aws: AwsConfig = AwsConfig()
    security: SecurityConfig = SecurityConfig()
    logging: LoggingConfig = LoggingConfig()
