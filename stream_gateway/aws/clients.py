"""
boto3 client construction for AWS collaborators.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from stream_gateway.observability import AWS_CALL_DURATION
from stream_gateway.resilience import CircuitBreaker

logger = logging.getLogger("stream-gateway")

# Refresh assumed-role credentials this many seconds before they expire
CREDENTIALS_REFRESH_MARGIN = 300

# ClientError codes that indicate AWS-side trouble rather than a bad request
_THROTTLING_CODES = frozenset({
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "ServiceUnavailable",
    "InternalError",
})

_SESSION_NAME_INVALID = re.compile(r'[^\w+=,.@-]')


def is_upstream_failure(exc: Exception) -> bool:
    """
    Whether an exception should count against a circuit breaker.

    Connection-level botocore errors, 5xx responses and throttling count.
    Validation errors and missing resources do not.
    """
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        return status >= 500 or error.get("Code") in _THROTTLING_CODES
    return isinstance(exc, BotoCoreError)


def role_session_name(environment_id: str | None) -> str:
    """STS RoleSessionName for an environment (max 64 chars, restricted charset)."""
    name = _SESSION_NAME_INVALID.sub("-", f"stream-gateway-{environment_id or 'default'}")
    return name[:64]


class AwsClientFactory:
    """
    Builds and caches boto3 clients.

    When ``environment_role_arn`` is set, clients for an environment use
    credentials obtained by assuming that role, refreshed before expiry.
    """

    def __init__(
        self,
        region: str,
        environment_role_arn: str = "",
        external_id: str = "",
        connect_timeout: int = 5,
        read_timeout: int = 10,
        max_attempts: int = 3,
        session: boto3.Session | None = None,
    ):
        self.region = region
        self.environment_role_arn = environment_role_arn
        self.external_id = external_id
        self.config = Config(
            region_name=region,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"max_attempts": max_attempts, "mode": "standard"},
        )
        self._session = session or boto3.Session(region_name=region)
        self._lock = threading.Lock()
        self._clients: dict[tuple[str, str | None], Any] = {}
        self._role_sessions: dict[str, tuple[boto3.Session, float]] = {}

    def client(self, service_name: str, environment_id: str | None = None) -> Any:
        """
        Get a boto3 client for a service.

        Args:
            service_name: boto3 service name (e.g. ``ec2``)
            environment_id: Environment whose role should be used

        Returns:
            boto3 client
        """
        if self.environment_role_arn:
            session = self._environment_session(environment_id)
            key = (service_name, environment_id)
        else:
            session = self._session
            key = (service_name, None)

        with self._lock:
            cached = self._clients.get(key)
            if cached is not None and cached[1] is session:
                return cached[0]

            client = session.client(service_name, config=self.config)
            self._clients[key] = (client, session)
            return client

    def _environment_session(self, environment_id: str | None) -> boto3.Session:
        """
        Return a session for the environment role.

        The STS round trip runs without ``_lock``; only the cache swap holds it.
        """
        env_key = environment_id or ""
        with self._lock:
            cached = self._role_sessions.get(env_key)
            if cached is not None and time.time() < cached[1]:
                return cached[0]

        session, refresh_at = self._assume_environment_role(environment_id)

        with self._lock:
            current = self._role_sessions.get(env_key)
            # Another thread may have refreshed meanwhile
            if current is not None and current is not cached and time.time() < current[1]:
                return current[0]
            self._role_sessions[env_key] = (session, refresh_at)
        logger.info(f"Assumed role {self.environment_role_arn} for environment {environment_id}")
        return session

    def _assume_environment_role(self, environment_id: str | None) -> tuple[boto3.Session, float]:
        assume_kwargs: dict[str, Any] = {
            "RoleArn": self.environment_role_arn,
            "RoleSessionName": role_session_name(environment_id),
        }
        if self.external_id:
            assume_kwargs["ExternalId"] = self.external_id

        sts = self._session.client("sts", config=self.config)
        credentials = sts.assume_role(**assume_kwargs)["Credentials"]
        session = boto3.Session(
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
            region_name=self.region,
        )
        expiration = credentials.get("Expiration")
        if isinstance(expiration, datetime):
            expires_at = expiration.replace(tzinfo=expiration.tzinfo or timezone.utc).timestamp()
        else:
            expires_at = time.time() + 3600
        return session, expires_at - CREDENTIALS_REFRESH_MARGIN


class AwsCollaborator:
    """Base class for collaborators that call AWS through a circuit breaker."""

    service_name = ""

    def __init__(self, client_factory: AwsClientFactory, circuit_breaker: CircuitBreaker | None = None):
        self.client_factory = client_factory
        self._circuit = circuit_breaker or CircuitBreaker(
            name=self.service_name, is_failure=is_upstream_failure
        )

    @property
    def circuit(self) -> CircuitBreaker:
        return self._circuit

    def _call(self, method: Callable[..., Any], operation: str, **kwargs: Any) -> Any:
        """Execute an AWS API call through the circuit breaker and record its latency."""
        with AWS_CALL_DURATION.labels(service=self.service_name, operation=operation).time():
            return self._circuit.call(method, **kwargs)
