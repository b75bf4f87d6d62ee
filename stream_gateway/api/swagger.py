"""
OpenAPI / Swagger documentation for the Stream Gateway API.

Uses Flasgger to serve Swagger UI at /apidocs and the JSON spec at /apispec_1.json.
"""

from __future__ import annotations

from flask import Flask
from flasgger import Swagger


SWAGGER_TEMPLATE: dict = {
    "info": {
        "title": "Stream Gateway API",
        "version": "1.0.0",
        "description": (
            "Rewrites workspace connections so that web, SSH and RDP targets "
            "open through AppStream streaming URLs."
        ),
    },
    "securityDefinitions": {
        "ApiKeyAuth": {
            "type": "apiKey",
            "in": "header",
            "name": "X-API-Key",
            "description": "API key passed in the X-API-Key header.",
        },
        "BearerAuth": {
            "type": "apiKey",
            "in": "header",
            "name": "Authorization",
            "description": "Bearer token passed as 'Authorization: Bearer <key>'.",
        },
    },
    "definitions": {
        "ErrorResponse": {
            "type": "object",
            "properties": {
                "success": {"type": "boolean", "example": False},
                "error": {"type": "string"},
                "details": {"type": "object"},
            },
        },
        "HealthResponse": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "enum": ["healthy", "degraded"]},
                "appstream_enabled": {"type": "boolean"},
                "circuits": {
                    "type": "object",
                    "additionalProperties": {"type": "string", "enum": ["closed", "open", "half_open"]},
                },
            },
        },
        "Connection": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "name": {"type": "string"},
                "type": {"type": "string", "example": "sagemaker"},
                "scheme": {"type": "string", "enum": ["", "http", "https", "ssh", "rdp", "customrdp"]},
                "url": {"type": "string", "example": "https://notebook.internal"},
                "info": {"type": "string"},
                "instanceId": {"type": "string", "example": "i-0123456789abcdef0"},
                "operation": {"type": "string", "example": "create"},
                "appstreamDestinationUrl": {"type": "string", "readOnly": True},
            },
        },
        "ConnectionUrlResponse": {
            "type": "object",
            "properties": {
                "success": {"type": "boolean", "example": True},
                "data": {
                    "type": "object",
                    "properties": {
                        "envId": {"type": "string"},
                        "connection": {"$ref": "#/definitions/Connection"},
                    },
                },
            },
        },
        "ConnectionListPayload": {
            "type": "object",
            "required": ["connections"],
            "properties": {
                "connections": {"type": "array", "items": {"$ref": "#/definitions/Connection"}},
            },
        },
    },
}

SWAGGER_CONFIG: dict = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/apispec_1.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def init_swagger(app: Flask) -> Swagger:
    """Initialize Flasgger and exempt Swagger UI from the rate limiter."""
    swagger = Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    from stream_gateway.api.rate_limit import limiter
    from stream_gateway.api import auth

    for name in ("flasgger.apidocs", "flasgger.apispec_1"):
        view = app.view_functions.get(name)
        if view is not None:
            limiter.exempt(view)

    auth.PUBLIC_ENDPOINTS.update({
        "flasgger.apidocs",
        "flasgger.apispec_1",
        "flasgger.static",
    })

    return swagger
