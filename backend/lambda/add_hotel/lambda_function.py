"""add_hotel/lambda_function.py

Lambda API for creating a hotel listing with its image.
The image goes to S3, the hotel record to DynamoDB.

Routes (via API Gateway proxy):
    POST    /hotels      - multipart/form-data upload of a new hotel
    OPTIONS /hotels      - CORS preflight

Form fields:
    hotelName    required
    hotelCity    required
    hotelPrice   required, integer
    hotelRating  required, integer
    <file>       required, first file part is stored

Auth:
    Reads the Cognito ID token from the Authorization header. The caller must
    be in the admin group (`cognito:groups`); the record owner is the
    `cognito:username` claim, falling back to "defaultUsername".

Environment variables:
    AWS_REGION       set by the Lambda runtime
    bucketName       S3 bucket for hotel images (BUCKET_NAME also accepted)
    HOTELS_TABLE     default: Hotel
    ADMIN_GROUP      default: Admin
    CORS_ORIGIN      default: *

Requires the hotelapp_shared layer.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from hotelapp_shared.auth import (
    CLAIM_USERNAME,
    DEFAULT_USERNAME,
    _authenticate,
    _claim,
    _is_member,
)
from hotelapp_shared.aws_clients import _get_ddb, _get_s3
from hotelapp_shared.config import HotelAppConfig
from hotelapp_shared.http_utils import (
    _body_bytes,
    _cors_headers,
    _error,
    _header,
    _method,
    _preflight,
    _response,
)
from hotelapp_shared.models import Hotel
from hotelapp_shared.multipart import FilePart, MultipartError, MultipartForm, parse_multipart
from hotelapp_shared.serialization import _unix_now_ms

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

CONFIG = HotelAppConfig.from_env()
ALLOWED_METHODS = "OPTIONS,POST"
UNAUTHORIZED_MESSAGE = "Unauthorized. Must be a member of Admin group."

# Price and rating are stored as signed 32-bit integers.
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger()
logger.setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Form helpers
# ---------------------------------------------------------------------------


def _text_field(form: MultipartForm, name: str) -> str:
    return (form.get(name) or "").strip()


def _int_field(form: MultipartForm, name: str) -> Optional[int]:
    """Signed 32-bit integer from a form field, or None if not one."""
    text = _text_field(form, name)
    if not _INT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        return None
    return value


def _object_key(file_part: FilePart) -> str:
    """S3 key for an uploaded image: ``<file name>_<epoch ms>``."""
    base = file_part.file_name or file_part.field_name
    return f"{base}_{_unix_now_ms()}"


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


def _upload_image(key: str, file_part: FilePart, config: HotelAppConfig) -> None:
    _get_s3(config.region).put_object(
        Bucket=config.bucket_name,
        Key=key,
        Body=file_part.data,
        ContentType=file_part.content_type,
    )


def _put_hotel(hotel: Hotel, config: HotelAppConfig) -> None:
    _get_ddb(config.region).put_item(
        TableName=config.hotels_table,
        Item=hotel.to_item(),
        ConditionExpression="attribute_not_exists(Id)",
    )


# ---------------------------------------------------------------------------
# POST: Create hotel
# ---------------------------------------------------------------------------


def _handle_create(event: Dict[str, Any], config: HotelAppConfig) -> Dict[str, Any]:
    headers = _cors_headers(ALLOWED_METHODS, config.cors_origin)

    def error(status: int, message: str) -> Dict[str, Any]:
        return _error(status, message, headers)

    claims, auth_err = _authenticate(event, config, error_fn=error)
    if auth_err:
        return auth_err

    username = _claim(claims, CLAIM_USERNAME, DEFAULT_USERNAME)
    if not _is_member(claims, config.admin_group):
        logger.warning("create rejected: username=%s not in group %s", username, config.admin_group)
        return error(401, UNAUTHORIZED_MESSAGE)

    if not config.bucket_name:
        raise RuntimeError("bucketName is not configured")

    try:
        form = parse_multipart(_body_bytes(event), _header(event, "Content-Type"))
    except ValueError as exc:
        logger.warning("create rejected: unreadable form body: %s", exc)
        return error(400, "Invalid multipart form body.")

    file_part = form.first_file
    if file_part is None:
        return error(400, "File required.")

    name = _text_field(form, "hotelName")
    city = _text_field(form, "hotelCity")
    if not name:
        return error(400, "Field 'hotelName' is required.")
    if not city:
        return error(400, "Field 'hotelCity' is required.")

    price = _int_field(form, "hotelPrice")
    if price is None:
        return error(400, "Field 'hotelPrice' must be an integer.")
    rating = _int_field(form, "hotelRating")
    if rating is None:
        return error(400, "Field 'hotelRating' must be an integer.")

    key = _object_key(file_part)
    try:
        _upload_image(key, file_part, config)
    except (BotoCoreError, ClientError):
        logger.exception("S3 upload failed: bucket=%s key=%s", config.bucket_name, key)
        raise

    hotel = Hotel.new(
        owner=username,
        name=name,
        city=city,
        price=price,
        rating=rating,
        file_name=key,
    )
    try:
        _put_hotel(hotel, config)
    except (BotoCoreError, ClientError):
        # No compensating delete: the uploaded object stays orphaned.
        logger.exception("DynamoDB put_item failed: hotel_id=%s key=%s", hotel.Id, key)
        raise

    logger.info(
        "hotel created: id=%s owner=%s file=%s size=%d",
        hotel.Id, username, key, len(file_part.data),
    )
    return _response(200, None, headers)


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    method = _method(event)
    headers = _cors_headers(ALLOWED_METHODS, CONFIG.cors_origin)

    if method == "OPTIONS":
        return _preflight(headers)
    if method != "POST":
        return _error(405, f"Method {method} not allowed.", headers)
    return _handle_create(event, CONFIG)
