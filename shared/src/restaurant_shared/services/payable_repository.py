"""Repository for the records payments act on: orders, bookings, catering requests."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Any, Iterable

from restaurant_shared.models.enums import OrderStatus, ReferenceKind
from restaurant_shared.models.payable import PayableRecord

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService


class PayableRepository:
    """Reads and status updates for payable records.

    The three record kinds live in separate tables, each keyed by the
    identifier the payment metadata carries.
    """

    TABLES: dict[ReferenceKind, tuple[str, str]] = {
        ReferenceKind.ORDER: ("orders", "order_id"),
        ReferenceKind.BOOKING: ("bookings", "booking_ref"),
        ReferenceKind.CATERING: ("catering-requests", "quote_ref"),
    }

    def __init__(self, db: "DynamoDBService") -> None:
        """Initialize repository.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    def _table(self, kind: ReferenceKind) -> tuple[str, str]:
        return self.TABLES[kind]

    def find_payable(
        self, kind: ReferenceKind, reference_id: str
    ) -> PayableRecord | None:
        """Look up a record with a strongly consistent read.

        Args:
            kind: Record kind
            reference_id: Record key

        Returns:
            PayableRecord or None if not found
        """
        table, key_name = self._table(kind)
        item = self.db.get_item(table, {key_name: reference_id}, consistent_read=True)
        if not item:
            return None
        return PayableRecord.from_item(kind, key_name, item)

    def update_status(
        self, kind: ReferenceKind, reference_id: str, new_status: str
    ) -> PayableRecord | None:
        """Set a record's status unconditionally, if the record exists.

        Args:
            kind: Record kind
            reference_id: Record key
            new_status: Status to write

        Returns:
            Updated PayableRecord or None if the record does not exist
        """
        table, key_name = self._table(kind)
        attrs = self.db.update_item(
            table,
            {key_name: reference_id},
            "SET #status = :status, updated_at = :now",
            {
                ":status": new_status,
                ":now": dt.datetime.now(dt.UTC).isoformat(),
            },
            {"#status": "status", "#pk": key_name},
            condition_expression="attribute_exists(#pk)",
        )
        if attrs is None:
            return None
        return PayableRecord.from_item(kind, key_name, attrs)

    def build_status_update(
        self,
        kind: ReferenceKind,
        reference_id: str,
        new_status: str,
        allowed_from: Iterable[str],
    ) -> dict[str, Any]:
        """TransactWriteItem moving a record to ``new_status``.

        The update only applies if the record exists and its current status
        is one of ``allowed_from``.
        """
        table, key_name = self._table(kind)
        allowed = list(allowed_from)
        values: dict[str, Any] = {
            ":status": new_status,
            ":now": dt.datetime.now(dt.UTC).isoformat(),
        }
        placeholders = []
        for i, status in enumerate(allowed):
            values[f":from{i}"] = status
            placeholders.append(f":from{i}")

        return self.db.update_request(
            table,
            {key_name: reference_id},
            "SET #status = :status, updated_at = :now",
            values,
            {"#status": "status", "#pk": key_name},
            condition_expression=(
                f"attribute_exists(#pk) AND #status IN ({', '.join(placeholders)})"
            ),
        )

    def create_order(
        self,
        *,
        customer_email: str,
        customer_name: str,
        items: list[dict[str, Any]],
        total_amount_cents: int,
        currency: str,
    ) -> dict[str, Any]:
        """Create a pending order ahead of checkout.

        Args:
            customer_email: Customer email
            customer_name: Customer display name
            items: Line items (product_id, name, price_cents, quantity, image)
            total_amount_cents: Order total in minor units
            currency: ISO currency code

        Returns:
            The stored order item
        """
        now = dt.datetime.now(dt.UTC).isoformat()
        order = {
            "order_id": f"ORD-{uuid.uuid4().hex[:12].upper()}",
            "customer_email": customer_email,
            "customer_name": customer_name,
            "items": items,
            "total_amount_cents": total_amount_cents,
            "currency": currency,
            "status": OrderStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        }
        self.db.put_item(
            "orders", order, condition_expression="attribute_not_exists(order_id)"
        )
        return order

    def list_orders(self) -> list[dict[str, Any]]:
        """All orders, newest first."""
        orders = self.db.scan("orders")
        return sorted(orders, key=lambda order: order.get("created_at", ""), reverse=True)
