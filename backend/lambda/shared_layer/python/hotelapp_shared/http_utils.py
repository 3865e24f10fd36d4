"""hotelapp_shared.http_utils: API Gateway request/response helpers with CORS.

Every response leaving a hotel Lambda carries permissive CORS headers; the
allowed methods differ per function.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGIN = "*"


def _cors_headers(methods: str, origin: str = DEFAULT_CORS_ORIGIN) -> Dict[str, str]:
    """CORS headers for a function that serves ``methods`` (e.g. ``"OPTIONS,GET"``)."""
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Headers": "*",
        "Access-Control-Allow-Methods": methods,
    }


def _response(
    status_code: int,
    body: Any,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Build an API Gateway proxy response with a JSON body.

    A ``body`` of ``None`` produces an empty string body.
    """
    return {
        "statusCode": status_code,
        "headers": {
            **(headers or {}),
            "Content-Type": "application/json",
        },
        "body": "" if body is None else json.dumps(body, default=str),
    }


def _error(
    status_code: int,
    message: str,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Build an error response: ``{"Error": message}``."""
    return _response(status_code, {"Error": message}, headers)


def _preflight(headers: Dict[str, str]) -> Dict[str, Any]:
    return {"statusCode": 204, "headers": dict(headers), "body": ""}


def _header(event: Dict[str, Any], name: str, default: str = "") -> str:
    """Case-insensitive header lookup (REST APIs keep case, HTTP APIs lowercase)."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted and value is not None:
            return str(value)
    return default


def _method(event: Dict[str, Any]) -> str:
    """HTTP method from an API Gateway v1 or v2 event."""
    rc = event.get("requestContext") or {}
    http = rc.get("http") or {}
    return (http.get("method") or event.get("httpMethod") or "GET").upper()


def _body_bytes(event: Dict[str, Any]) -> bytes:
    """Raw request body, base64-decoded when API Gateway flagged it.

    Raises ValueError if the body claims to be base64 but is not.
    """
    raw = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Invalid base64 body: {exc}") from exc
    if isinstance(raw, bytes):
        return raw
    return raw.encode("utf-8")
