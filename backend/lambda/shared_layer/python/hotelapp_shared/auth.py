"""hotelapp_shared.auth: Bearer token claims extraction for the hotel Lambdas.

Reads the Cognito ID token from the ``Authorization`` header (optional
``Bearer `` prefix) and returns its claim set.

By default the signature is NOT verified here: the API Gateway Cognito
authorizer in front of the functions is expected to have done that. Set
VERIFY_TOKEN_SIGNATURE=true (with COGNITO_USER_POOL_ID and COGNITO_CLIENT_ID)
to validate RS256 tokens against the User Pool JWKS inside the function.

Claims used:
    sub               owner key for listing
    cognito:username  owner recorded on created hotels
    cognito:groups    must contain the admin group to create hotels
"""

from __future__ import annotations

import json
import logging
import time
import urllib.request
from typing import Any, Callable, Dict, List, Optional, Tuple

import jwt
from jwt.algorithms import RSAAlgorithm

from .config import HotelAppConfig
from .http_utils import _error, _header

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
DEFAULT_USER_ID = "defaultUserId"
DEFAULT_USERNAME = "defaultUsername"

CLAIM_SUB = "sub"
CLAIM_USERNAME = "cognito:username"
CLAIM_GROUPS = "cognito:groups"


class TokenDecodeError(ValueError):
    """Token is not a decodable JWT (maps to HTTP 400)."""


class TokenVerificationError(ValueError):
    """Token decoded but failed signature/audience/expiry checks (HTTP 401)."""


# ---------------------------------------------------------------------------
# JWKS cache (verified mode only)
# ---------------------------------------------------------------------------

_jwks_cache: Dict[str, Any] = {}
_jwks_fetched_at: float = 0.0
_JWKS_TTL: float = 3600.0


def _bearer_token(header_value: Optional[str]) -> str:
    """Strip an optional ``Bearer `` prefix from an Authorization header value."""
    value = (header_value or "").strip()
    if value.startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX):].strip()
    return value


def _decode_unverified(token: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        raise TokenDecodeError(f"Malformed token: {exc}") from exc
    return claims


def _get_jwks(user_pool_id: str) -> Dict[str, Any]:
    """Fetch (and cache) the Cognito User Pool JWKS, keyed by kid."""
    global _jwks_cache, _jwks_fetched_at
    now = time.time()
    if _jwks_cache and (now - _jwks_fetched_at) < _JWKS_TTL:
        return _jwks_cache

    if not user_pool_id:
        raise RuntimeError("COGNITO_USER_POOL_ID not set")

    region = user_pool_id.split("_")[0]
    url = (
        f"https://cognito-idp.{region}.amazonaws.com/"
        f"{user_pool_id}/.well-known/jwks.json"
    )

    with urllib.request.urlopen(url, timeout=5) as resp:
        data = json.loads(resp.read())

    _jwks_cache = {
        key_data["kid"]: RSAAlgorithm.from_jwk(json.dumps(key_data))
        for key_data in data.get("keys", [])
    }
    _jwks_fetched_at = now
    return _jwks_cache


def _verify_token(token: str, config: HotelAppConfig) -> Dict[str, Any]:
    """Verify a Cognito JWT (RS256). Returns decoded claims dict."""
    try:
        header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as exc:
        raise TokenDecodeError(f"Malformed token: {exc}") from exc

    alg = header.get("alg", "RS256")
    if alg != "RS256":
        raise TokenVerificationError(f"Unexpected token algorithm: {alg}")

    key = _get_jwks(config.cognito_user_pool_id).get(header.get("kid"))
    if key is None:
        raise TokenVerificationError("Token key ID not found in JWKS")

    try:
        return jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=config.cognito_client_id or None,
            options={"verify_exp": True, "verify_aud": bool(config.cognito_client_id)},
        )
    except jwt.ExpiredSignatureError:
        raise TokenVerificationError("Token has expired. Please sign in again.")
    except jwt.InvalidAudienceError:
        raise TokenVerificationError("Token audience mismatch.")
    except jwt.InvalidSignatureError:
        raise TokenVerificationError("Token signature verification failed.")
    except jwt.DecodeError as exc:
        raise TokenDecodeError(f"Malformed token: {exc}") from exc
    except jwt.PyJWTError as exc:
        raise TokenVerificationError(f"Token validation failed: {exc}") from exc


def _decode_claims(token: str, config: HotelAppConfig) -> Dict[str, Any]:
    """Decode a token's claim set, verifying it only when configured to."""
    if config.verify_token_signature:
        return _verify_token(token, config)
    return _decode_unverified(token)


def _claim(claims: Dict[str, Any], name: str, default: str) -> str:
    """Single claim value as a string, or ``default`` when absent/empty."""
    value = claims.get(name)
    if value is None or value == "":
        return default
    return str(value)


def _groups(claims: Dict[str, Any]) -> List[str]:
    """Group names from ``cognito:groups``.

    ID tokens carry a JSON list; API Gateway authorizer contexts flatten it to
    a string such as ``"[Admin Users]"``, ``"Admin,Users"`` or ``'["Admin"]'``.
    """
    raw = claims.get(CLAIM_GROUPS)
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(g).strip() for g in raw if str(g).strip()]
    text = str(raw).strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(g).strip() for g in parsed if str(g).strip()]
    text = text.strip("[]")
    return [g.strip("\"'") for g in text.replace(",", " ").split() if g.strip("\"'")]


def _is_member(claims: Dict[str, Any], group: str) -> bool:
    return group in _groups(claims)


def _authenticate(
    event: Dict[str, Any],
    config: HotelAppConfig,
    *,
    error_fn: Optional[Callable[[int, str], Dict[str, Any]]] = None,
) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """Extract claims from the request's bearer token.

    Returns (claims, None) on success or (None, error_response) on failure.
    A missing or empty Authorization header yields empty claims so that the
    caller's defaults apply.

    Args:
        event: API Gateway event dict.
        config: Runtime configuration.
        error_fn: Optional callable(status_code, message) -> response dict.
    """
    if error_fn is None:
        error_fn = _error

    token = _bearer_token(_header(event, "Authorization"))
    if not token:
        return {}, None

    try:
        return _decode_claims(token, config), None
    except TokenDecodeError as exc:
        logger.warning("auth: %s", exc)
        return None, error_fn(400, "Malformed authorization token.")
    except TokenVerificationError as exc:
        logger.warning("auth failed: %s", exc)
        return None, error_fn(401, str(exc))
