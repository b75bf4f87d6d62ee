"""
Response envelopes shared by all API routes.
"""

from typing import Any

from flask import jsonify, Response


def api_success(data: Any = None, message: str = None, status_code: int = 200) -> tuple[Response, int]:
    """
    Build a ``{"success": true, ...}`` response.

    Args:
        data: Payload placed under ``data``
        message: Optional human-readable message
        status_code: HTTP status code

    Returns:
        Tuple of (response, status_code)
    """
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status_code


def api_error(
    message: str,
    status_code: int = 400,
    details: Any = None,
    retry_after: float | None = None,
) -> tuple[Response, int]:
    """
    Build a ``{"success": false, "error": ...}`` response.

    Args:
        message: Error message
        status_code: HTTP status code
        details: Optional error details (e.g. the AWS error code)
        retry_after: Seconds after which the client may retry; sets ``Retry-After``

    Returns:
        Tuple of (response, status_code)
    """
    body = {"success": False, "error": message}
    if details:
        body["details"] = details
    response = jsonify(body)
    if retry_after is not None:
        response.headers["Retry-After"] = str(max(1, int(round(retry_after))))
    return response, status_code
