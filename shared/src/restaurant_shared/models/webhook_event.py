"""Idempotency ledger entry for applied Stripe webhook events."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import ReferenceKind


class IdempotencyRecord(BaseModel):
    """One applied Stripe webhook event.

    Written once, in the same transaction as the status change it caused.
    A second delivery of the same event_id finds this row and is a replay.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(
        ...,
        description="Stripe event ID (evt_xxx)",
        examples=["evt_1ABC123DEF456"],
    )
    event_type: str = Field(
        ...,
        description="Stripe event type",
        examples=["checkout.session.completed", "payment_intent.succeeded"],
    )
    applied_at: datetime = Field(
        ...,
        description="When the event was applied",
    )
    payload_hash: str = Field(
        ...,
        description="SHA-256 hash of the event payload",
        examples=["a1b2c3d4e5f6..."],
    )
    reference_kind: ReferenceKind | None = Field(
        default=None,
        description="Kind of record the event was applied to",
    )
    reference_id: str | None = Field(
        default=None,
        description="Record the event was applied to",
    )
    new_status: str | None = Field(
        default=None,
        description="Status written by the transition, if any",
    )
    expires_at: int | None = Field(
        default=None,
        description="Epoch seconds after which DynamoDB TTL may archive the row",
    )

    def to_item(self) -> dict:
        """Serialize to a DynamoDB item, omitting unset optional attributes."""
        item = {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "applied_at": self.applied_at.isoformat(),
            "payload_hash": self.payload_hash,
        }
        if self.reference_kind is not None:
            item["reference_kind"] = self.reference_kind.value
        if self.reference_id:
            item["reference_id"] = self.reference_id
        if self.new_status:
            item["new_status"] = self.new_status
        if self.expires_at is not None:
            item["expires_at"] = self.expires_at
        return item
