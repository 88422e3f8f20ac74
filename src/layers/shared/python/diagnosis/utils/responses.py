"""API response helper functions."""

import json
import os
from typing import Any

# The landing page is served from a different origin than the intake endpoint
_ALLOWED_ORIGIN = os.environ.get("CORS_ALLOWED_ORIGIN", "*")
_STAGE = os.environ.get("STAGE", "dev")


def _get_cors_origin(request_origin: str | None = None) -> str:
    """Get the appropriate CORS origin for the response.

    In dev, also allows localhost for local development.
    """
    if _STAGE == "dev" and request_origin:
        if request_origin.startswith("http://localhost:"):
            return request_origin

    return _ALLOWED_ORIGIN


def get_cors_headers(request_origin: str | None = None) -> dict:
    """Get CORS headers with the appropriate origin."""
    return {
        "Access-Control-Allow-Origin": _get_cors_origin(request_origin),
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Content-Type": "application/json",
    }


CORS_HEADERS = get_cors_headers()


def _serialize(data: Any) -> str:
    """Serialize data to JSON string, keeping non-ASCII text readable."""
    return json.dumps(data, ensure_ascii=False)


def success(data: Any, status_code: int = 200, request_origin: str | None = None) -> dict:
    """Create a successful API response.

    Args:
        data: Response data (dict or list).
        status_code: HTTP status code (default 200).
        request_origin: Origin header of the request, for CORS.

    Returns:
        API Gateway response dict.
    """
    return {
        "statusCode": status_code,
        "headers": get_cors_headers(request_origin),
        "body": _serialize(data),
    }


def envelope(
    ok: bool,
    message: str,
    status_code: int | None = None,
    request_origin: str | None = None,
) -> dict:
    """Create an intake acknowledgment response: {"success": ..., "message": ...}.

    Args:
        ok: Whether the request was accepted.
        message: Human-readable message.
        status_code: HTTP status code. Defaults to 200 or 500.
        request_origin: Origin header of the request, for CORS.

    Returns:
        API Gateway response dict.
    """
    if status_code is None:
        status_code = 200 if ok else 500
    return success(
        {"success": ok, "message": message},
        status_code=status_code,
        request_origin=request_origin,
    )


def no_content(request_origin: str | None = None) -> dict:
    """Create a 204 No Content response (CORS preflight)."""
    return {
        "statusCode": 204,
        "headers": get_cors_headers(request_origin),
        "body": "",
    }


def redirect(location: str, status_code: int = 302) -> dict:
    """Create a redirect response.

    Args:
        location: Target URL.
        status_code: 301, 302, 307 or 308.

    Returns:
        API Gateway response dict.
    """
    headers = get_cors_headers()
    headers["Location"] = location
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": "",
    }


def error(message: str, status_code: int = 500) -> dict:
    """Create an error API response (routing errors outside the intake envelope)."""
    body = {"error": True, "message": message}

    return {
        "statusCode": status_code,
        "headers": CORS_HEADERS,
        "body": _serialize(body),
    }
