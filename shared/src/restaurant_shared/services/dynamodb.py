"""DynamoDB service wrapper for the restaurant tables."""

import os
from typing import Any

import boto3
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

_dynamodb_service_instance: "DynamoDBService | None" = None


def get_dynamodb_service(environment: str | None = None) -> "DynamoDBService":
    """Get or create the shared DynamoDB service.

    Args:
        environment: Environment name. Only used on first call.

    Returns:
        Shared DynamoDBService instance
    """
    global _dynamodb_service_instance
    if _dynamodb_service_instance is None:
        _dynamodb_service_instance = DynamoDBService(environment)
    return _dynamodb_service_instance


def reset_dynamodb_service() -> None:
    """Drop the shared instance so the next call builds a fresh one (tests)."""
    global _dynamodb_service_instance
    _dynamodb_service_instance = None


class DynamoDBService:
    """DynamoDB operations with environment-aware table names.

    Tables are addressed by short name ("orders", "stripe-webhook-events");
    the prefix comes from DYNAMODB_TABLE_PREFIX or ``restaurant-{environment}``.
    """

    def __init__(self, environment: str | None = None) -> None:
        self.environment = environment or os.getenv("ENVIRONMENT", "dev")
        self.name_prefix = os.getenv(
            "DYNAMODB_TABLE_PREFIX", f"restaurant-{self.environment}"
        )
        self._dynamodb = boto3.resource("dynamodb")
        self._client = boto3.client("dynamodb")
        self._serializer = TypeSerializer()

    def table_name(self, table: str) -> str:
        """Full table name including prefix."""
        return f"{self.name_prefix}-{table}"

    def _get_table(self, table: str) -> Any:
        return self._dynamodb.Table(self.table_name(table))

    def get_item(
        self,
        table: str,
        key: dict[str, Any],
        consistent_read: bool = False,
    ) -> dict[str, Any] | None:
        """Get a single item by key.

        Args:
            table: Table name without prefix
            key: Primary key dict
            consistent_read: Use a strongly consistent read

        Returns:
            Item dict or None if not found
        """
        response = self._get_table(table).get_item(
            Key=key, ConsistentRead=consistent_read
        )
        item: dict[str, Any] | None = response.get("Item")
        return item

    def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> bool:
        """Put an item into the table.

        Args:
            table: Table name without prefix
            item: Item to store
            condition_expression: Optional condition for the write

        Returns:
            True if written, False if the condition failed
        """
        try:
            kwargs: dict[str, Any] = {"Item": item}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression
            self._get_table(table).put_item(**kwargs)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise

    def update_item(
        self,
        table: str,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_values: dict[str, Any],
        expression_attribute_names: dict[str, str] | None = None,
        condition_expression: str | None = None,
    ) -> dict[str, Any] | None:
        """Update an item with expressions.

        Args:
            table: Table name without prefix
            key: Primary key dict
            update_expression: DynamoDB update expression
            expression_attribute_values: Values for expression
            expression_attribute_names: Names for expression (for reserved words)
            condition_expression: Optional condition for update

        Returns:
            Updated attributes or None if the condition failed
        """
        try:
            kwargs: dict[str, Any] = {
                "Key": key,
                "UpdateExpression": update_expression,
                "ExpressionAttributeValues": expression_attribute_values,
                "ReturnValues": "ALL_NEW",
            }
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            response = self._get_table(table).update_item(**kwargs)
            attrs: dict[str, Any] | None = response.get("Attributes")
            return attrs
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return None
            raise

    def scan(self, table: str) -> list[dict[str, Any]]:
        """Read every item in a table, following pagination.

        Args:
            table: Table name without prefix

        Returns:
            All items
        """
        items: list[dict[str, Any]] = []
        scan_kwargs: dict[str, Any] = {}
        while True:
            response = self._get_table(table).scan(**scan_kwargs)
            items.extend(response.get("Items", []))
            if "LastEvaluatedKey" not in response:
                return items
            scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    # Transactions

    def serialize(self, values: dict[str, Any]) -> dict[str, Any]:
        """Convert plain Python values to low-level DynamoDB attribute values."""
        return {k: self._serializer.serialize(v) for k, v in values.items()}

    def put_request(
        self,
        table: str,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        """Build a TransactWriteItem ``Put`` for transact_write."""
        put: dict[str, Any] = {
            "TableName": self.table_name(table),
            "Item": self.serialize(item),
        }
        if condition_expression:
            put["ConditionExpression"] = condition_expression
        return {"Put": put}

    def update_request(
        self,
        table: str,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_values: dict[str, Any],
        expression_attribute_names: dict[str, str] | None = None,
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        """Build a TransactWriteItem ``Update`` for transact_write."""
        update: dict[str, Any] = {
            "TableName": self.table_name(table),
            "Key": self.serialize(key),
            "UpdateExpression": update_expression,
            "ExpressionAttributeValues": self.serialize(expression_attribute_values),
        }
        if expression_attribute_names:
            update["ExpressionAttributeNames"] = expression_attribute_names
        if condition_expression:
            update["ConditionExpression"] = condition_expression
        return {"Update": update}

    def transact_write(
        self,
        items: list[dict[str, Any]],
    ) -> bool:
        """Execute a transactional write; all items commit or none do.

        Args:
            items: TransactWriteItem dicts from put_request/update_request

        Returns:
            True if committed, False if any condition cancelled the transaction
        """
        try:
            self._client.transact_write_items(TransactItems=items)  # type: ignore[arg-type]
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                return False
            raise
