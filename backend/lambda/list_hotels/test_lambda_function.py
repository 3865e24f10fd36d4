"""test_lambda_function.py: Mock-based tests for list_hotels.

Covers owner resolution from the bearer token, the DynamoDB query (including
multi-page results), CORS headers, and failure propagation. All locally
runnable without AWS credentials.

Run: python3 -m pytest test_lambda_function.py -v
"""

from __future__ import annotations

import importlib.util
import json
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

import jwt
from botocore.exceptions import ClientError

_HERE = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, os.path.join(_HERE, "..", "shared_layer", "python"))

_spec = importlib.util.spec_from_file_location(
    "list_hotels",
    os.path.join(_HERE, "lambda_function.py"),
)
list_hotels = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(list_hotels)

from hotelapp_shared.config import HotelAppConfig


def _token(claims):
    return jwt.encode(claims, "list-hotels-test-secret-0123456789abcdef", algorithm="HS256")


def _make_event(claims=None, authorization=None, method="GET"):
    """Build a mock API Gateway REST (v1) proxy event."""
    headers = {}
    if authorization is not None:
        headers["Authorization"] = authorization
    elif claims is not None:
        headers["Authorization"] = f"Bearer {_token(claims)}"
    return {"httpMethod": method, "path": "/hotels", "headers": headers, "body": None}


def _item(owner, hotel_id, name="Grand"):
    return {
        "UserId": {"S": owner},
        "Id": {"S": hotel_id},
        "Name": {"S": name},
        "CityName": {"S": "Paris"},
        "Price": {"N": "200"},
        "Rating": {"N": "5"},
        "FileName": {"S": "photo.jpg_1700000000000"},
    }


class ListHotelsTestCase(unittest.TestCase):
    def setUp(self):
        self.ddb = MagicMock()
        self.ddb.query.return_value = {"Items": []}
        for target, value in (
            ("_get_ddb", MagicMock(return_value=self.ddb)),
            ("CONFIG", HotelAppConfig(hotels_table="HotelTest")),
        ):
            patcher = patch.object(list_hotels, target, value)
            patcher.start()
            self.addCleanup(patcher.stop)


class OptionsTests(ListHotelsTestCase):
    def test_options_returns_204(self):
        resp = list_hotels.lambda_handler(_make_event(method="OPTIONS"), None)
        self.assertEqual(resp["statusCode"], 204)
        self.assertEqual(resp["headers"]["Access-Control-Allow-Methods"], "OPTIONS,GET")
        self.ddb.query.assert_not_called()

    def test_other_methods_not_allowed(self):
        for method in ("POST", "DELETE", "PUT"):
            with self.subTest(method=method):
                resp = list_hotels.lambda_handler(_make_event(method=method), None)
                self.assertEqual(resp["statusCode"], 405)
                self.assertEqual(resp["headers"]["Access-Control-Allow-Origin"], "*")
                self.assertIn(method, json.loads(resp["body"])["Error"])
        self.ddb.query.assert_not_called()


class OwnerResolutionTests(ListHotelsTestCase):
    def _queried_user(self):
        kwargs = self.ddb.query.call_args.kwargs
        return kwargs["ExpressionAttributeValues"][":uid"]["S"]

    def test_sub_claim_is_owner_key(self):
        list_hotels.lambda_handler(_make_event({"sub": "user-123", "cognito:username": "alice"}), None)
        self.assertEqual(self._queried_user(), "user-123")
        kwargs = self.ddb.query.call_args.kwargs
        self.assertEqual(kwargs["TableName"], "HotelTest")
        self.assertEqual(kwargs["KeyConditionExpression"], "UserId = :uid")

    def test_missing_sub_uses_default(self):
        list_hotels.lambda_handler(_make_event({"cognito:username": "alice"}), None)
        self.assertEqual(self._queried_user(), "defaultUserId")

    def test_missing_header_uses_default(self):
        resp = list_hotels.lambda_handler(_make_event(), None)
        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(self._queried_user(), "defaultUserId")

    def test_token_without_bearer_prefix(self):
        list_hotels.lambda_handler(_make_event(authorization=_token({"sub": "raw-sub"})), None)
        self.assertEqual(self._queried_user(), "raw-sub")

    def test_malformed_token_returns_400(self):
        resp = list_hotels.lambda_handler(_make_event(authorization="Bearer not-a-jwt"), None)
        self.assertEqual(resp["statusCode"], 400)
        self.assertIn("Access-Control-Allow-Origin", resp["headers"])
        self.ddb.query.assert_not_called()


class ListResponseTests(ListHotelsTestCase):
    def test_returns_json_array(self):
        self.ddb.query.return_value = {"Items": [_item("user-1", "h-1"), _item("user-1", "h-2", "Ritz")]}

        resp = list_hotels.lambda_handler(_make_event({"sub": "user-1"}), None)

        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(resp["headers"]["Content-Type"], "application/json")
        self.assertEqual(resp["headers"]["Access-Control-Allow-Origin"], "*")
        self.assertEqual(resp["headers"]["Access-Control-Allow-Headers"], "*")
        self.assertEqual(resp["headers"]["Access-Control-Allow-Methods"], "OPTIONS,GET")
        body = json.loads(resp["body"])
        self.assertEqual([h["Id"] for h in body], ["h-1", "h-2"])
        self.assertEqual(body[0], {
            "UserId": "user-1",
            "Id": "h-1",
            "Name": "Grand",
            "CityName": "Paris",
            "Price": 200,
            "Rating": 5,
            "FileName": "photo.jpg_1700000000000",
        })

    def test_empty_result(self):
        resp = list_hotels.lambda_handler(_make_event({"sub": "nobody"}), None)
        self.assertEqual(json.loads(resp["body"]), [])

    def test_follows_all_pages(self):
        last_key = {"UserId": {"S": "user-1"}, "Id": {"S": "h-1"}}
        self.ddb.query.side_effect = [
            {"Items": [_item("user-1", "h-1")], "LastEvaluatedKey": last_key},
            {"Items": [_item("user-1", "h-2")]},
        ]

        resp = list_hotels.lambda_handler(_make_event({"sub": "user-1"}), None)

        self.assertEqual([h["Id"] for h in json.loads(resp["body"])], ["h-1", "h-2"])
        self.assertEqual(self.ddb.query.call_count, 2)
        self.assertEqual(self.ddb.query.call_args_list[1].kwargs["ExclusiveStartKey"], last_key)


class FailureTests(ListHotelsTestCase):
    def test_query_failure_propagates(self):
        self.ddb.query.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "missing table"}},
            "Query",
        )
        with self.assertLogs(level="ERROR"):
            with self.assertRaises(ClientError):
                list_hotels.lambda_handler(_make_event({"sub": "user-1"}), None)


if __name__ == "__main__":
    unittest.main()
