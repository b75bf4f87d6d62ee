"""
Typed data structures for the gateway domain.
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from typing import Any

from stream_gateway.config.settings import LIST_OPERATION, SAGEMAKER_CONNECTION_TYPE


class ConnectionScheme(enum.Enum):
    """Closed classification of a connection's protocol scheme."""

    HTTP = "http"
    SSH = "ssh"
    RDP = "rdp"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, raw: str | None) -> ConnectionScheme:
        """
        Normalize a raw scheme string.

        An empty or missing scheme counts as HTTP. ``customrdp`` is RDP.

        Args:
            raw: Scheme as sent by the caller

        Returns:
            ConnectionScheme member
        """
        scheme = (raw or "").strip().lower()
        if scheme in ("", "http", "https"):
            return cls.HTTP
        if scheme == "ssh":
            return cls.SSH
        if scheme in ("rdp", "customrdp"):
            return cls.RDP
        return cls.UNKNOWN


# Python attribute -> wire (JSON) key
_WIRE_KEYS = {
    "id": "id",
    "name": "name",
    "type": "type",
    "scheme": "scheme",
    "url": "url",
    "info": "info",
    "role": "role",
    "instance_id": "instanceId",
    "operation": "operation",
    "appstream_destination_url": "appstreamDestinationUrl",
}
_FROM_WIRE = {wire: attr for attr, wire in _WIRE_KEYS.items()}

# Attribute names that differ from their wire key; not accepted on the wire
ATTRIBUTE_ALIASES = frozenset(attr for attr, wire in _WIRE_KEYS.items() if attr != wire)


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Immutable connection record passed through the rewrite step."""

    scheme: str | None = None
    url: str | None = None
    instance_id: str | None = None
    type: str | None = None
    operation: str | None = None
    appstream_destination_url: str | None = None
    id: str | None = None
    name: str | None = None
    info: str | None = None
    role: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # Each descriptor owns its extra mapping
        object.__setattr__(self, "extra", dict(self.extra))

    @property
    def kind(self) -> ConnectionScheme:
        return ConnectionScheme.classify(self.scheme)

    @property
    def is_listing(self) -> bool:
        return self.operation == LIST_OPERATION

    @property
    def is_sagemaker(self) -> bool:
        return (self.type or "").lower() == SAGEMAKER_CONNECTION_TYPE

    def replace(self, **changes: Any) -> ConnectionDescriptor:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Wire form (camelCase keys), without unset optional values."""
        data = dict(self.extra)
        for attr, wire in _WIRE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[wire] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectionDescriptor:
        known: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in _FROM_WIRE:
                known[_FROM_WIRE[key]] = value
            else:
                extra[key] = value
        return cls(**known, extra=extra)


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller on whose behalf a connection is created."""

    principal_id: str = ""
    username: str | None = None


@dataclass(frozen=True)
class RewriteContext:
    """Per-request inputs that are not carried on the descriptor."""

    environment_id: str
    request_context: RequestContext = field(default_factory=RequestContext)


@dataclass(frozen=True)
class StreamingUrlRequest:
    environment_id: str
    application_id: str
    session_context: str | None = None


@dataclass(frozen=True)
class RemoteDesktopRequest:
    environment_id: str
    instance_id: str | None


class IncompleteConnectionError(ValueError):
    """Raised when a connection lacks a field a collaborator needs."""
    pass
