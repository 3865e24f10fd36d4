"""hotelapp_shared.aws_clients: Lazy-singleton AWS service clients.

Clients are created on first use and cached at module level, so warm
invocations of the same container reuse them.
"""

from __future__ import annotations

from typing import Optional

import boto3
from botocore.config import Config

DEFAULT_REGION = "us-east-1"

# ---------------------------------------------------------------------------
# Client singletons
# ---------------------------------------------------------------------------

_ddb = None
_s3 = None


def _get_ddb(region: Optional[str] = None):
    """Get (or create) the DynamoDB client singleton."""
    global _ddb
    if _ddb is None:
        _ddb = boto3.client(
            "dynamodb",
            region_name=region or DEFAULT_REGION,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )
    return _ddb


def _get_s3(region: Optional[str] = None):
    """Get (or create) the S3 client singleton."""
    global _s3
    if _s3 is None:
        _s3 = boto3.client(
            "s3",
            region_name=region or DEFAULT_REGION,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )
    return _s3


def _reset_clients() -> None:
    """Drop cached clients (used by tests)."""
    global _ddb, _s3
    _ddb = None
    _s3 = None
