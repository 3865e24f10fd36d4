"""list_hotels/lambda_function.py

Lambda API returning the hotels owned by the calling user.

Routes (via API Gateway proxy):
    GET     /hotels      - list the caller's hotels as a JSON array
    OPTIONS /hotels      - CORS preflight

Auth:
    Reads the Cognito ID token from the Authorization header ("Bearer "
    prefix optional). The owner key is the token's `sub` claim, falling back
    to "defaultUserId" when the claim (or the header) is absent.

Environment variables:
    AWS_REGION       set by the Lambda runtime
    HOTELS_TABLE     default: Hotel
    CORS_ORIGIN      default: *

Requires the hotelapp_shared layer.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from hotelapp_shared.auth import CLAIM_SUB, DEFAULT_USER_ID, _authenticate, _claim
from hotelapp_shared.aws_clients import _get_ddb
from hotelapp_shared.config import HotelAppConfig
from hotelapp_shared.http_utils import _cors_headers, _error, _method, _preflight, _response
from hotelapp_shared.models import Hotel
from hotelapp_shared.serialization import _serialize

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

CONFIG = HotelAppConfig.from_env()
ALLOWED_METHODS = "OPTIONS,GET"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger()
logger.setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# DynamoDB
# ---------------------------------------------------------------------------


def _query_hotels(user_id: str, config: HotelAppConfig) -> List[Hotel]:
    """All hotels whose partition key is ``user_id``, across every result page."""
    ddb = _get_ddb(config.region)
    params: Dict[str, Any] = {
        "TableName": config.hotels_table,
        "KeyConditionExpression": "UserId = :uid",
        "ExpressionAttributeValues": {":uid": _serialize(user_id)},
    }
    hotels: List[Hotel] = []
    while True:
        resp = ddb.query(**params)
        hotels.extend(Hotel.from_item(item) for item in resp.get("Items", []))
        lek = resp.get("LastEvaluatedKey")
        if not lek:
            break
        params["ExclusiveStartKey"] = lek
    return hotels


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


def _handle_list(event: Dict[str, Any], config: HotelAppConfig) -> Dict[str, Any]:
    headers = _cors_headers(ALLOWED_METHODS, config.cors_origin)

    claims, auth_err = _authenticate(
        event, config, error_fn=lambda status, msg: _error(status, msg, headers)
    )
    if auth_err:
        return auth_err

    user_id = _claim(claims, CLAIM_SUB, DEFAULT_USER_ID)
    try:
        hotels = _query_hotels(user_id, config)
    except (BotoCoreError, ClientError):
        logger.exception("hotel query failed: user_id=%s table=%s", user_id, config.hotels_table)
        raise

    logger.info("listed hotels: user_id=%s count=%d", user_id, len(hotels))
    return _response(200, [hotel.to_dict() for hotel in hotels], headers)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    method = _method(event)
    headers = _cors_headers(ALLOWED_METHODS, CONFIG.cors_origin)

    if method == "OPTIONS":
        return _preflight(headers)
    if method != "GET":
        return _error(405, f"Method {method} not allowed.", headers)
    return _handle_list(event, CONFIG)
