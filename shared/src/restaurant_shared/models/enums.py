"""Enumeration types for restaurant payment data models."""

from enum import Enum


class ReferenceKind(str, Enum):
    """Kind of application record a payment event pertains to."""

    BOOKING = "booking"
    ORDER = "order"
    CATERING = "catering"


class OrderStatus(str, Enum):
    """Status of a food order."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class BookingStatus(str, Enum):
    """Status of a table/event booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class CateringStatus(str, Enum):
    """Status of a catering quote request."""

    PENDING = "pending"
    QUOTED = "quoted"
    DEPOSIT_PAID = "deposit_paid"
    CANCELLED = "cancelled"


class PaymentEventType(str, Enum):
    """Domain event types decoded from gateway webhooks."""

    CHECKOUT_COMPLETED = "checkout_completed"
    DEPOSIT_SUCCEEDED = "deposit_succeeded"
    PAYMENT_FAILED = "payment_failed"
    CHARGE_REFUNDED = "charge_refunded"
    UNRECOGNIZED = "unrecognized"


class DepositType(str, Enum):
    """Value of ``metadata.type`` written when a deposit intent is created."""

    BOOKING_DEPOSIT = "booking_deposit"
    CATERING_DEPOSIT = "catering_deposit"


class DispatchResult(str, Enum):
    """Result of dispatching a payment event."""

    APPLIED = "applied"
    REPLAY = "replay"
    IGNORED = "ignored"
    UNKNOWN_REFERENCE = "unknown_reference"
    MALFORMED = "malformed"


class VerificationFailure(str, Enum):
    """Reason a webhook payload failed verification."""

    BAD_SIGNATURE = "bad_signature"
    MALFORMED = "malformed"
    STALE = "stale"
