"""Payable record: the slice of a booking, order or catering request that payments touch."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import ReferenceKind


class PayableRecord(BaseModel):
    """A booking, order or catering request as seen by payment reconciliation."""

    model_config = ConfigDict(frozen=True)

    reference_kind: ReferenceKind
    reference_id: str = Field(..., description="Primary key of the record")
    status: str = Field(..., description="Current status value")
    customer_email: str | None = None
    customer_name: str | None = None

    @classmethod
    def from_item(
        cls, reference_kind: ReferenceKind, key_name: str, item: dict[str, Any]
    ) -> "PayableRecord":
        """Build from a raw DynamoDB item.

        Args:
            reference_kind: Kind of record the item came from
            key_name: Hash key attribute of that table
            item: DynamoDB item

        Returns:
            PayableRecord
        """
        return cls(
            reference_kind=reference_kind,
            reference_id=str(item[key_name]),
            status=str(item.get("status", "")),
            customer_email=item.get("customer_email"),
            customer_name=item.get("customer_name"),
        )
