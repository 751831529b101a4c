"""API models for deposit payment endpoints.

Amounts arrive in major units (dollars) and are converted to minor units
before they reach Stripe.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to integer cents, rounding half up."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class BookingPaymentRequest(BaseModel):
    """Request a PaymentIntent for a table booking deposit."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "bookingRef": "BK-7F3A",
                    "amount": "45.00",
                    "email": "ada@example.com",
                    "name": "Ada",
                }
            ]
        },
    )

    booking_ref: str = Field(..., alias="bookingRef", min_length=1)
    amount: Decimal = Field(..., gt=0, description="Deposit in major units")
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)


class CateringPaymentRequest(BaseModel):
    """Request a PaymentIntent for a catering deposit."""

    model_config = ConfigDict(populate_by_name=True)

    quote_ref: str = Field(..., alias="quoteRef", min_length=1)
    amount: Decimal = Field(..., gt=0, description="Deposit in major units")
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    event_date: str | None = Field(default=None, alias="eventDate")


class DepositPaymentResponse(BaseModel):
    """Client secret the frontend needs to confirm the PaymentIntent."""

    success: bool = True
    client_secret: str
    payment_intent_id: str


class PaymentDetails(BaseModel):
    """Summary of a PaymentIntent."""

    id: str
    amount: float = Field(..., description="Amount in major units")
    currency: str
    status: str
    created: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)


class PaymentDetailsResponse(BaseModel):
    success: bool = True
    payment: PaymentDetails


class RefundRequest(BaseModel):
    """Refund a PaymentIntent; omit ``amount`` for a full refund."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [{"paymentIntentId": "pi_3Nabc", "amount": "20.00"}]
        },
    )

    payment_intent_id: str = Field(..., alias="paymentIntentId", min_length=1)
    amount: Decimal | None = Field(
        default=None, gt=0, description="Amount to refund in major units"
    )
    reason: Literal["duplicate", "fraudulent", "requested_by_customer"] = (
        "requested_by_customer"
    )


class RefundDetails(BaseModel):
    id: str
    amount: float = Field(..., description="Refunded amount in major units")
    status: str


class RefundResponse(BaseModel):
    success: bool = True
    refund: RefundDetails
