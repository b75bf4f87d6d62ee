"""
Audit logging for connection URL requests.

Logs every POST to the API as structured JSON to stdout via a dedicated
'audit' logger, so issued streaming URLs can be traced to a caller.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from flask import request, Response

audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False

_handler = logging.StreamHandler(sys.stdout)


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(record.msg, ensure_ascii=False)


_handler.setFormatter(_JsonFormatter())
audit_logger.addHandler(_handler)

AUDIT_METHODS = frozenset({"POST"})


def build_audit_entry(response: Response) -> dict:
    """Describe the current request and its outcome."""
    view_args = request.view_args or {}
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": "connection_url_request",
        "method": request.method,
        "path": request.path,
        "endpoint": request.endpoint,
        "status_code": response.status_code,
        "remote_addr": request.remote_addr,
    }
    if "env_id" in view_args:
        entry["environment_id"] = view_args["env_id"]
    principal_id = request.headers.get("X-Principal-Id")
    if principal_id:
        entry["principal_id"] = principal_id
    return entry


def audit_log_response(response: Response) -> Response:
    """
    after_request hook that logs POST calls.

    Attach to a Blueprint via: blueprint.after_request(audit_log_response)
    """
    if request.method in AUDIT_METHODS:
        audit_logger.info(build_audit_entry(response))
    return response
