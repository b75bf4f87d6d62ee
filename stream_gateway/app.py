"""
Stream Gateway Flask application.

Exposes the connection URL rewrite step to the workspace connection
pipeline:
- POST /api/environments/<env_id>/connections/url rewrites one connection
- POST /api/environments/<env_id>/connections/list passes connections through as a listing
- /health, /metrics and /apidocs/ are public
"""

import logging
import os

from botocore.exceptions import BotoCoreError, ClientError
from flask import Flask

# =============================================================================
# Logging Setup
# =============================================================================

from stream_gateway.observability import setup_json_logging

_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
setup_json_logging(level=_log_level)
logger = logging.getLogger("stream-gateway")

# =============================================================================
# Flask Application
# =============================================================================

app = Flask(__name__)

from stream_gateway.api.rate_limit import init_limiter
init_limiter(app)

from stream_gateway.observability import init_metrics, ERRORS_TOTAL
init_metrics(app)

from stream_gateway.api.routes import api
from stream_gateway.api.responses import api_error
from stream_gateway.api.swagger import init_swagger
from stream_gateway.api.validators import ValidationError
from stream_gateway.config.settings import ConfigurationError
from stream_gateway.domain.types import IncompleteConnectionError
from stream_gateway.resilience import CircuitOpenError

app.register_blueprint(api)
init_swagger(app)

from stream_gateway.container import ServiceContainer
import stream_gateway.container as container_mod

container = ServiceContainer()
app.extensions["services"] = container
container_mod._global_container = container


# =============================================================================
# Error Handlers
# =============================================================================

def _endpoint_label() -> str:
    from flask import request
    return request.endpoint or "unknown"


@app.errorhandler(ValidationError)
def handle_validation_error(e: ValidationError) -> tuple:
    """Handle validation errors."""
    ERRORS_TOTAL.labels(endpoint=_endpoint_label()).inc()
    return api_error(str(e), 400)


@app.errorhandler(IncompleteConnectionError)
def handle_incomplete_connection(e: IncompleteConnectionError) -> tuple:
    """Handle connections missing data needed by a collaborator."""
    ERRORS_TOTAL.labels(endpoint=_endpoint_label()).inc()
    return api_error(str(e), 400)


@app.errorhandler(ConfigurationError)
def handle_configuration_error(e: ConfigurationError) -> tuple:
    """Handle missing gateway configuration."""
    ERRORS_TOTAL.labels(endpoint=_endpoint_label()).inc()
    logger.error(f"Configuration error: {e}")
    return api_error("Gateway is not configured for this environment", 500)


@app.errorhandler(CircuitOpenError)
def handle_circuit_open(e: CircuitOpenError) -> tuple:
    """Handle calls rejected by an open circuit breaker."""
    ERRORS_TOTAL.labels(endpoint=_endpoint_label()).inc()
    logger.warning(str(e))
    return api_error(f"Upstream service '{e.name}' unavailable", 503, retry_after=e.retry_after)


@app.errorhandler(ClientError)
def handle_aws_client_error(e: ClientError) -> tuple:
    """Handle errors returned by AWS APIs."""
    ERRORS_TOTAL.labels(endpoint=_endpoint_label()).inc()
    error = e.response.get("Error", {})
    logger.error(f"AWS error during {e.operation_name}: {error.get('Code')} {error.get('Message')}")
    return api_error(
        "Upstream AWS request failed",
        502,
        details={"operation": e.operation_name, "code": error.get("Code")},
    )


@app.errorhandler(BotoCoreError)
def handle_botocore_error(e: BotoCoreError) -> tuple:
    """Handle AWS SDK errors raised before a response was received."""
    ERRORS_TOTAL.labels(endpoint=_endpoint_label()).inc()
    logger.error(f"AWS SDK error: {e}")
    return api_error("Upstream AWS request failed", 502)


@app.errorhandler(404)
def handle_not_found(e: Exception) -> tuple:
    """Handle 404 errors."""
    return api_error("Resource not found", 404)


@app.errorhandler(405)
def handle_method_not_allowed(e: Exception) -> tuple:
    """Handle 405 errors."""
    return api_error("Method not allowed", 405)


@app.errorhandler(500)
def handle_server_error(e: Exception) -> tuple:
    """Handle 500 errors."""
    ERRORS_TOTAL.labels(endpoint="app_500").inc()
    logger.error(f"Internal server error: {e}")
    return api_error("Internal server error", 500)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=False)
