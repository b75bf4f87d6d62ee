"""
Observability module: Prometheus metrics and structured JSON logging.

- Custom business metrics (Counters, Histogram)
- PrometheusMetrics integration for automatic Flask instrumentation
- JSON structured logging via python-json-logger
"""

import logging
import re
import sys

from flask import Flask
from prometheus_client import Counter, Histogram
from prometheus_flask_exporter import PrometheusMetrics

# =============================================================================
# Prometheus Custom Metrics
# =============================================================================

CONNECTION_REWRITES = Counter(
    "gateway_connection_rewrites_total",
    "Connections passed through the rewrite step, by outcome",
    ["kind"],
)

AWS_CALL_DURATION = Histogram(
    "gateway_aws_call_duration_seconds",
    "Latency of outbound AWS API calls",
    ["service", "operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)

ERRORS_TOTAL = Counter(
    "gateway_errors_total",
    "Total number of errors by endpoint",
    ["endpoint"],
)


# =============================================================================
# Metrics Initialization
# =============================================================================

def init_metrics(app: Flask) -> PrometheusMetrics:
    """
    Initialize PrometheusMetrics on the Flask app.

    Auto-instruments all routes with flask_http_request_duration_seconds
    and flask_http_request_total. Exposes /metrics endpoint.
    """
    metrics = PrometheusMetrics(app, path="/metrics")

    # Exempt /metrics from rate limiting
    from stream_gateway.api.rate_limit import limiter
    metrics_view = app.view_functions.get("prometheus_metrics")
    if metrics_view is not None:
        limiter.exempt(metrics_view)

    return metrics


# =============================================================================
# Logging
# =============================================================================

class SensitiveDataFilter(logging.Filter):
    """Filter to mask secrets and presigned URL signatures in log messages."""

    SENSITIVE_PATTERNS = [
        (re.compile(r'password["\']?\s*[:=]\s*["\']?[^"\'}\s]+', re.I), 'password=***'),
        (re.compile(r'token["\']?\s*[:=]\s*["\']?[^"\'}\s]+', re.I), 'token=***'),
        (re.compile(r'secret["\']?\s*[:=]\s*["\']?[^"\'}\s]+', re.I), 'secret=***'),
        (re.compile(r'(X-Amz-(?:Signature|Security-Token|Credential))=[^&\s]+', re.I), r'\1=***'),
        (re.compile(r'(authCode|reference)=[^&\s]+'), r'\1=***'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            for pattern, replacement in self.SENSITIVE_PATTERNS:
                record.msg = pattern.sub(replacement, record.msg)
        return True


def setup_json_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with JSON structured output.

    Uses python-json-logger's JsonFormatter. The SensitiveDataFilter is
    attached to the handler so every logger's output is masked.
    The 'audit' logger is unaffected (propagate=False, own handler).
    """
    from pythonjsonlogger.json import JsonFormatter

    handler = logging.StreamHandler(sys.stderr)
    formatter = JsonFormatter(
        fmt="%(timestamp)s %(name)s %(levelname)s %(message)s",
        rename_fields={"levelname": "level", "asctime": "timestamp"},
        timestamp=True,
    )
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
