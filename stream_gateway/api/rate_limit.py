"""
Rate limiting for the gateway API.

Uses Flask-Limiter with in-memory storage (suitable for single-worker gunicorn).
"""

from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from stream_gateway.api.responses import api_error
from stream_gateway.config.loader import GatewayConfig

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
)

# Limit for endpoints that call AWS; read from config at init time
rewrite_limit = "60/minute"


def get_rewrite_limit() -> str:
    return rewrite_limit


def init_limiter(app: Flask) -> None:
    """Attach the limiter to the Flask app and configure from gateway config."""
    global rewrite_limit

    rl_config = GatewayConfig.settings().security.rate_limiting
    if not rl_config.enabled:
        app.config["RATELIMIT_ENABLED"] = False

    rewrite_limit = rl_config.rewrite_limit
    app.config.setdefault("RATELIMIT_DEFAULT", rl_config.default_limit)

    limiter.init_app(app)

    @app.errorhandler(429)
    def rate_limit_handler(e):
        return api_error("Rate limit exceeded. Try again later.", 429)
