"""Ledger of applied Stripe webhook events.

Stripe delivers at least once. Every event that changes state gets exactly
one row here, written with ``attribute_not_exists(event_id)`` so that two
concurrent deliveries race on the table's key rather than in Python.
"""

import datetime as dt
import hashlib
import json
from typing import TYPE_CHECKING, Any

from restaurant_shared.models.enums import ReferenceKind
from restaurant_shared.models.webhook_event import IdempotencyRecord
from restaurant_shared.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

INSERT_IF_ABSENT = "attribute_not_exists(event_id)"


class AlreadyAppliedError(Exception):
    """Raised when an event_id is already present in the ledger."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id} was already applied")
        self.event_id = event_id


class IdempotencyLedger:
    """Records which webhook events have been applied."""

    WEBHOOK_EVENTS_TABLE = "stripe-webhook-events"

    def __init__(self, db: "DynamoDBService", retention_days: int = 90) -> None:
        """Initialize ledger.

        Args:
            db: DynamoDB service instance
            retention_days: Days until a row's TTL lets DynamoDB archive it
        """
        self.db = db
        self.retention_days = retention_days

    @staticmethod
    def compute_payload_hash(payload: dict[str, Any]) -> str:
        """SHA-256 of the canonical JSON form of an event payload."""
        return hashlib.sha256(
            json.dumps(payload, sort_keys=True, default=str).encode()
        ).hexdigest()

    def has_applied(self, event_id: str) -> bool:
        """Check whether an event was already applied.

        Args:
            event_id: Stripe event ID

        Returns:
            True if a ledger row exists
        """
        existing = self.db.get_item(
            self.WEBHOOK_EVENTS_TABLE, {"event_id": event_id}, consistent_read=True
        )
        return existing is not None

    def build_record(
        self,
        event_id: str,
        applied_at: dt.datetime,
        *,
        event_type: str,
        payload_hash: str,
        reference_kind: ReferenceKind | None = None,
        reference_id: str | None = None,
        new_status: str | None = None,
    ) -> IdempotencyRecord:
        """Build the ledger row for an event without writing it."""
        expires_at = int((applied_at + dt.timedelta(days=self.retention_days)).timestamp())
        return IdempotencyRecord(
            event_id=event_id,
            event_type=event_type,
            applied_at=applied_at,
            payload_hash=payload_hash,
            reference_kind=reference_kind,
            reference_id=reference_id,
            new_status=new_status,
            expires_at=expires_at,
        )

    def build_mark_applied_put(self, record: IdempotencyRecord) -> dict[str, Any]:
        """TransactWriteItem that inserts ``record`` only if its event_id is new."""
        return self.db.put_request(
            self.WEBHOOK_EVENTS_TABLE,
            record.to_item(),
            condition_expression=INSERT_IF_ABSENT,
        )

    def mark_applied(
        self,
        event_id: str,
        applied_at: dt.datetime,
        *,
        event_type: str,
        payload_hash: str,
        reference_kind: ReferenceKind | None = None,
        reference_id: str | None = None,
        new_status: str | None = None,
    ) -> IdempotencyRecord:
        """Insert the ledger row for an event if it is not already there.

        Args:
            event_id: Stripe event ID
            applied_at: When the event was applied
            event_type: Stripe event type
            payload_hash: SHA-256 of the event payload
            reference_kind: Kind of record the event touched
            reference_id: Record the event touched
            new_status: Status the event wrote, if any

        Returns:
            The stored IdempotencyRecord

        Raises:
            AlreadyAppliedError: If the event_id is already in the ledger
        """
        record = self.build_record(
            event_id,
            applied_at,
            event_type=event_type,
            payload_hash=payload_hash,
            reference_kind=reference_kind,
            reference_id=reference_id,
            new_status=new_status,
        )
        written = self.db.put_item(
            self.WEBHOOK_EVENTS_TABLE,
            record.to_item(),
            condition_expression=INSERT_IF_ABSENT,
        )
        if not written:
            logger.info("Event %s already in ledger", event_id)
            raise AlreadyAppliedError(event_id)
        return record
