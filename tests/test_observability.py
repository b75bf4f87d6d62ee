"""
Tests for the observability module (Prometheus metrics + JSON logging).
"""

import json
import logging

import pytest
from prometheus_client import REGISTRY

from stream_gateway.domain.types import ConnectionDescriptor


# ---------------------------------------------------------------------------
# Metrics endpoint
# ---------------------------------------------------------------------------

class TestMetricsEndpoint:
    """Tests for the /metrics Prometheus endpoint."""

    def test_metrics_endpoint_accessible(self, app_client):
        """GET /metrics returns 200 with Prometheus text content."""
        resp = app_client.get("/metrics")
        assert resp.status_code == 200
        body = resp.data.decode()
        assert "# HELP" in body or "# TYPE" in body

    def test_metrics_no_auth_required(self, app_client):
        """GET /metrics without API key still returns 200 (not behind blueprint auth)."""
        resp = app_client.get("/metrics", headers={"X-API-Key": ""})
        assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Custom business metrics
# ---------------------------------------------------------------------------

class TestBusinessMetrics:

    def test_aws_histogram_exists(self):
        """gateway_aws_call_duration_seconds metric is registered."""
        from stream_gateway.observability import AWS_CALL_DURATION  # noqa: F401
        names = {m.name for m in REGISTRY.collect()}
        assert "gateway_aws_call_duration_seconds" in names

    def test_error_counter_increments(self):
        from stream_gateway.observability import ERRORS_TOTAL
        before = ERRORS_TOTAL.labels(endpoint="test")._value.get()
        ERRORS_TOTAL.labels(endpoint="test").inc()
        after = ERRORS_TOTAL.labels(endpoint="test")._value.get()
        assert after == before + 1

    @pytest.mark.parametrize("connection, kind", [
        (ConnectionDescriptor(scheme="https", url="https://x"), "http"),
        (ConnectionDescriptor(scheme="ssh", instance_id="i-1"), "ssh"),
        (ConnectionDescriptor(scheme="customrdp", instance_id="i-2"), "rdp"),
        (ConnectionDescriptor(scheme="vnc"), "passthrough"),
        (ConnectionDescriptor(url="https://x", operation="list"), "skipped"),
    ])
    def test_rewrite_counter_by_kind(self, rewriter, rewrite_context, connection, kind):
        """Each rewrite outcome increments its own label."""
        from stream_gateway.observability import CONNECTION_REWRITES
        before = CONNECTION_REWRITES.labels(kind=kind)._value.get()
        rewriter.rewrite(connection, rewrite_context)
        assert CONNECTION_REWRITES.labels(kind=kind)._value.get() == before + 1

    def test_circuit_trip_counted(self):
        from stream_gateway.resilience import CIRCUIT_TRIPS, CircuitBreaker
        cb = CircuitBreaker(name="test-metric-trip", failure_threshold=1)
        with pytest.raises(RuntimeError):
            cb.call(_raise, RuntimeError("down"))
        assert CIRCUIT_TRIPS.labels(name="test-metric-trip")._value.get() == 1


# ---------------------------------------------------------------------------
# JSON logging
# ---------------------------------------------------------------------------

class TestJsonLogging:
    """Tests for structured JSON logging setup."""

    def test_json_logging_format(self, capfd):
        """After setup_json_logging, log output is valid JSON."""
        from stream_gateway.observability import setup_json_logging
        setup_json_logging(level="DEBUG")

        test_logger = logging.getLogger("test.json_format")
        test_logger.info("hello structured world")

        captured = capfd.readouterr()
        for line in captured.err.strip().splitlines():
            if "hello structured world" in line:
                parsed = json.loads(line)
                assert parsed["message"] == "hello structured world"
                assert "timestamp" in parsed
                assert parsed["level"] == "INFO"
                break
        else:
            pytest.fail("JSON log line with expected message not found in stderr")

    def test_presigned_signature_masked(self, capfd):
        """Signed URL query parameters never reach the log output."""
        from stream_gateway.observability import setup_json_logging
        setup_json_logging(level="DEBUG")

        logging.getLogger("test.masking").info(
            "url https://nb.example/?keep=1&X-Amz-Signature=abcdef123&X-Amz-Security-Token=tok456"
        )

        err = capfd.readouterr().err
        assert "abcdef123" not in err
        assert "tok456" not in err
        assert "keep=1" in err


# ---------------------------------------------------------------------------
# SensitiveDataFilter
# ---------------------------------------------------------------------------

class TestSensitiveDataFilter:

    def _filtered(self, message: str) -> str:
        from stream_gateway.observability import SensitiveDataFilter
        record = logging.LogRecord("t", logging.INFO, __file__, 1, message, None, None)
        assert SensitiveDataFilter().filter(record) is True
        return record.msg

    def test_password_masked(self):
        assert self._filtered("password=hunter2") == "password=***"

    def test_secret_masked(self):
        assert "s3cr3t" not in self._filtered('{"secret": "s3cr3t"}')

    def test_amz_credential_masked(self):
        out = self._filtered("X-Amz-Credential=AKIA/20240101/us-east-1&other=1")
        assert out == "X-Amz-Credential=***&other=1"

    def test_plain_message_untouched(self):
        assert self._filtered("Created streaming URL for u-alice") == "Created streaming URL for u-alice"


def _raise(exc: Exception) -> None:
    raise exc
