"""hotelapp_shared.config: Runtime configuration for the hotel Lambdas.

Built once per cold start from environment variables and handed to the
request handlers explicitly.

Environment variables:
    AWS_REGION               default: us-east-1 (set by the Lambda runtime)
    bucketName / BUCKET_NAME S3 bucket for hotel images (required by add_hotel)
    HOTELS_TABLE             default: Hotel
    CORS_ORIGIN              default: *
    ADMIN_GROUP              default: Admin
    VERIFY_TOKEN_SIGNATURE   default: false
    COGNITO_USER_POOL_ID     e.g. us-east-1_AbCdEf123 (verified mode only)
    COGNITO_CLIENT_ID        app client id (verified mode only)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(raw: Optional[str]) -> bool:
    return str(raw or "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class HotelAppConfig:
    region: str = "us-east-1"
    bucket_name: str = ""
    hotels_table: str = "Hotel"
    cors_origin: str = "*"
    admin_group: str = "Admin"
    verify_token_signature: bool = False
    cognito_user_pool_id: str = ""
    cognito_client_id: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HotelAppConfig":
        env = os.environ if environ is None else environ
        return cls(
            region=env.get("AWS_REGION", env.get("AWS_DEFAULT_REGION", "us-east-1")),
            bucket_name=env.get("bucketName", env.get("BUCKET_NAME", "")),
            hotels_table=env.get("HOTELS_TABLE", "Hotel"),
            cors_origin=env.get("CORS_ORIGIN", "*"),
            admin_group=env.get("ADMIN_GROUP", "Admin"),
            verify_token_signature=_env_flag(env.get("VERIFY_TOKEN_SIGNATURE")),
            cognito_user_pool_id=env.get("COGNITO_USER_POOL_ID", ""),
            cognito_client_id=env.get("COGNITO_CLIENT_ID", ""),
        )
