"""Typed payment events decoded from Stripe webhook envelopes.

A webhook envelope looks like ``{"id", "type", "created", "data": {"object"}}``.
Each supported Stripe type decodes to its own variant; anything else decodes
to ``Unrecognized`` so callers can acknowledge and ignore it.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import DepositType, PaymentEventType, ReferenceKind

# Stripe event type -> domain event type
STRIPE_EVENT_TYPES: dict[str, PaymentEventType] = {
    "checkout.session.completed": PaymentEventType.CHECKOUT_COMPLETED,
    "payment_intent.succeeded": PaymentEventType.DEPOSIT_SUCCEEDED,
    "payment_intent.payment_failed": PaymentEventType.PAYMENT_FAILED,
    "charge.refunded": PaymentEventType.CHARGE_REFUNDED,
}

# Metadata key written at creation time -> kind of record it names
REFERENCE_KEYS: dict[str, ReferenceKind] = {
    "orderId": ReferenceKind.ORDER,
    "bookingRef": ReferenceKind.BOOKING,
    "quoteRef": ReferenceKind.CATERING,
}

DEPOSIT_KINDS: dict[DepositType, ReferenceKind] = {
    DepositType.BOOKING_DEPOSIT: ReferenceKind.BOOKING,
    DepositType.CATERING_DEPOSIT: ReferenceKind.CATERING,
}


class PaymentMetadata(BaseModel):
    """Correlation data attached when the payment was created."""

    model_config = ConfigDict(frozen=True)

    reference_id: str | None = Field(
        default=None,
        description="Booking ref, order ID or catering quote ref",
        examples=["BK-2026-0042"],
    )
    reference_kind: ReferenceKind | None = Field(
        default=None,
        description="Which kind of record reference_id names",
    )
    customer_email: str | None = None
    customer_name: str | None = None
    payment_type: str | None = Field(
        default=None,
        description="Raw metadata.type (booking_deposit, catering_deposit)",
    )


class _PaymentEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(..., description="Stripe event ID (evt_xxx)")
    gateway_type: str = Field(
        ...,
        description="Stripe event type as delivered",
        examples=["checkout.session.completed"],
    )
    created: datetime | None = None
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="The event's data.object, untouched",
    )
    metadata: PaymentMetadata = Field(default_factory=PaymentMetadata)


class CheckoutCompleted(_PaymentEventBase):
    """A Checkout Session finished (order payments)."""

    event_type: Literal[PaymentEventType.CHECKOUT_COMPLETED] = PaymentEventType.CHECKOUT_COMPLETED
    payment_status: str | None = None
    amount_total: int | None = None
    currency: str | None = None


class DepositSucceeded(_PaymentEventBase):
    """A PaymentIntent succeeded (booking and catering deposits)."""

    event_type: Literal[PaymentEventType.DEPOSIT_SUCCEEDED] = PaymentEventType.DEPOSIT_SUCCEEDED
    amount: int | None = None
    currency: str | None = None


class PaymentFailed(_PaymentEventBase):
    """A PaymentIntent failed."""

    event_type: Literal[PaymentEventType.PAYMENT_FAILED] = PaymentEventType.PAYMENT_FAILED
    failure_message: str | None = None


class ChargeRefunded(_PaymentEventBase):
    """A charge was fully or partially refunded."""

    event_type: Literal[PaymentEventType.CHARGE_REFUNDED] = PaymentEventType.CHARGE_REFUNDED
    amount_refunded: int | None = None
    currency: str | None = None


class Unrecognized(_PaymentEventBase):
    """Any Stripe event type this service does not act on."""

    event_type: Literal[PaymentEventType.UNRECOGNIZED] = PaymentEventType.UNRECOGNIZED


PaymentEvent = Annotated[
    Union[CheckoutCompleted, DepositSucceeded, PaymentFailed, ChargeRefunded, Unrecognized],
    Field(discriminator="event_type"),
]


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def extract_metadata(obj: dict[str, Any]) -> PaymentMetadata:
    """Build PaymentMetadata from a Stripe object's metadata.

    ``metadata.type`` decides the kind for deposits; otherwise the kind is
    inferred from whichever reference key is present.

    Args:
        obj: Stripe data.object (session, payment intent or charge)

    Returns:
        PaymentMetadata, with unset fields left as None
    """
    raw = obj.get("metadata") or {}
    if not isinstance(raw, dict):
        raw = {}

    payment_type = _as_str(raw.get("type"))
    reference_kind: ReferenceKind | None = None
    reference_id: str | None = None

    try:
        reference_kind = DEPOSIT_KINDS[DepositType(payment_type)]
    except ValueError:
        pass

    if reference_kind is not None:
        for key, kind in REFERENCE_KEYS.items():
            if kind == reference_kind:
                reference_id = _as_str(raw.get(key))
    else:
        for key, kind in REFERENCE_KEYS.items():
            value = _as_str(raw.get(key))
            if value:
                reference_kind, reference_id = kind, value
                break

    customer_email = _as_str(raw.get("customerEmail")) or _as_str(obj.get("customer_email"))
    if customer_email is None:
        details = obj.get("customer_details") or {}
        if isinstance(details, dict):
            customer_email = _as_str(details.get("email"))

    return PaymentMetadata(
        reference_id=reference_id,
        reference_kind=reference_kind,
        customer_email=customer_email,
        customer_name=_as_str(raw.get("customerName")),
        payment_type=payment_type,
    )


def decode_payment_event(envelope: Any) -> PaymentEvent:
    """Decode a parsed Stripe webhook envelope into a PaymentEvent.

    Args:
        envelope: JSON-decoded webhook body

    Returns:
        The matching PaymentEvent variant

    Raises:
        ValueError: If the envelope lacks id/type or data.object is not a map
    """
    if not isinstance(envelope, dict):
        raise ValueError("Webhook body is not a JSON object")

    event_id = envelope.get("id")
    gateway_type = envelope.get("type")
    if not isinstance(event_id, str) or not event_id:
        raise ValueError("Webhook body has no event id")
    if not isinstance(gateway_type, str) or not gateway_type:
        raise ValueError("Webhook body has no event type")

    data = envelope.get("data") or {}
    obj = data.get("object", {}) if isinstance(data, dict) else None
    if not isinstance(obj, dict):
        raise ValueError("Webhook data.object is not an object")

    created = None
    if isinstance(envelope.get("created"), int):
        created = datetime.fromtimestamp(envelope["created"], tz=timezone.utc)

    common: dict[str, Any] = {
        "event_id": event_id,
        "gateway_type": gateway_type,
        "created": created,
        "payload": obj,
        "metadata": extract_metadata(obj),
    }

    event_type = STRIPE_EVENT_TYPES.get(gateway_type, PaymentEventType.UNRECOGNIZED)

    if event_type == PaymentEventType.CHECKOUT_COMPLETED:
        return CheckoutCompleted(
            **common,
            payment_status=_as_str(obj.get("payment_status")),
            amount_total=obj.get("amount_total"),
            currency=_as_str(obj.get("currency")),
        )
    if event_type == PaymentEventType.DEPOSIT_SUCCEEDED:
        return DepositSucceeded(
            **common,
            amount=obj.get("amount_received", obj.get("amount")),
            currency=_as_str(obj.get("currency")),
        )
    if event_type == PaymentEventType.PAYMENT_FAILED:
        last_error = obj.get("last_payment_error") or {}
        return PaymentFailed(
            **common,
            failure_message=_as_str(last_error.get("message")) if isinstance(last_error, dict) else None,
        )
    if event_type == PaymentEventType.CHARGE_REFUNDED:
        return ChargeRefunded(
            **common,
            amount_refunded=obj.get("amount_refunded"),
            currency=_as_str(obj.get("currency")),
        )
    return Unrecognized(**common)
