"""hotelapp_shared.serialization: Hotel attribute values to and from DynamoDB JSON.

Numbers come back from DynamoDB as Decimal. Hotel prices and ratings are
whole numbers, so integral Decimals become ints; anything else becomes a
float so the value can be written into a JSON response.
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Any, Dict

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

_to_ddb = TypeSerializer().serialize
_from_ddb = TypeDeserializer().deserialize


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [_plain(v) for v in value]
    return value


def _serialize(value: Any) -> Dict[str, Any]:
    # TypeSerializer rejects float; go through str to keep the literal digits.
    return _to_ddb(Decimal(str(value)) if isinstance(value, float) else value)


def _serialize_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {name: _serialize(value) for name, value in item.items()}


def _deserialize(item: Dict[str, Any]) -> Dict[str, Any]:
    return {name: _plain(_from_ddb(value)) for name, value in item.items()}


def _unix_now_ms() -> int:
    """Current Unix epoch in milliseconds."""
    return int(time.time() * 1000)
