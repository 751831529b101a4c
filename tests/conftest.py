"""Pytest configuration and fixtures for restaurant payments tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto (ledger + payable tables)
- Seeded orders, bookings and catering requests
"""

import os
from datetime import datetime, timezone
from typing import Any, Callable, Generator

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-restaurant")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SES_FROM_EMAIL", "orders@afroflavours.test")

if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

TEST_REGION = "eu-west-1"
TABLE_PREFIX = "test-restaurant"

TABLE_KEYS = {
    "stripe-webhook-events": "event_id",
    "orders": "order_id",
    "bookings": "booking_ref",
    "catering-requests": "quote_ref",
}


# === Service Reset ===


@pytest.fixture(autouse=True)
def reset_services_state() -> Generator[None, None, None]:
    """Reset cached services before and after each test.

    Tests using mock_aws need fresh boto3 clients created inside the mock
    context rather than ones cached from a previous test.
    """
    from restaurant_api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


# === DynamoDB Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = TEST_REGION


@pytest.fixture
def dynamodb_tables(aws_credentials: None) -> Generator[Any, None, None]:
    """Create the ledger and payable tables; yields a DynamoDB resource."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name=TEST_REGION)
        for table, key in TABLE_KEYS.items():
            client.create_table(
                TableName=f"{TABLE_PREFIX}-{table}",
                KeySchema=[{"AttributeName": key, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": key, "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
            )
        yield boto3.resource("dynamodb", region_name=TEST_REGION)


@pytest.fixture
def db(dynamodb_tables: Any) -> Any:
    """DynamoDBService bound to the mocked tables."""
    from restaurant_shared.services.dynamodb import get_dynamodb_service

    return get_dynamodb_service()


@pytest.fixture
def seed_record(dynamodb_tables: Any) -> Callable[..., dict[str, Any]]:
    """Insert a payable record: seed_record("orders", "ORD-1", status="pending")."""

    def _seed(table: str, reference_id: str, **attrs: Any) -> dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        item = {
            TABLE_KEYS[table]: reference_id,
            "status": "pending",
            "customer_email": "ada@example.com",
            "customer_name": "Ada",
            "created_at": now,
            "updated_at": now,
            **attrs,
        }
        dynamodb_tables.Table(f"{TABLE_PREFIX}-{table}").put_item(Item=item)
        return item

    return _seed


@pytest.fixture
def read_record(dynamodb_tables: Any) -> Callable[[str, str], dict[str, Any] | None]:
    """Fetch a raw item: read_record("orders", "ORD-1")."""

    def _read(table: str, reference_id: str) -> dict[str, Any] | None:
        response = dynamodb_tables.Table(f"{TABLE_PREFIX}-{table}").get_item(
            Key={TABLE_KEYS[table]: reference_id}, ConsistentRead=True
        )
        return response.get("Item")

    return _read

