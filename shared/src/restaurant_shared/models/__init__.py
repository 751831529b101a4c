"""Pydantic models for restaurant payment reconciliation."""

from .dispatch import DispatchOutcome
from .enums import (
    BookingStatus,
    CateringStatus,
    DepositType,
    DispatchResult,
    OrderStatus,
    PaymentEventType,
    ReferenceKind,
    VerificationFailure,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    ErrorCode,
    ErrorResponse,
    RestaurantError,
)
from .payable import PayableRecord
from .payment_event import (
    ChargeRefunded,
    CheckoutCompleted,
    DepositSucceeded,
    PaymentEvent,
    PaymentFailed,
    PaymentMetadata,
    Unrecognized,
    decode_payment_event,
)
from .webhook_event import IdempotencyRecord

__all__ = [
    # Enums
    "BookingStatus",
    "CateringStatus",
    "DepositType",
    "DispatchResult",
    "OrderStatus",
    "PaymentEventType",
    "ReferenceKind",
    "VerificationFailure",
    # Events
    "ChargeRefunded",
    "CheckoutCompleted",
    "DepositSucceeded",
    "PaymentEvent",
    "PaymentFailed",
    "PaymentMetadata",
    "Unrecognized",
    "decode_payment_event",
    # Records
    "DispatchOutcome",
    "IdempotencyRecord",
    "PayableRecord",
    # Errors
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "ErrorCode",
    "ErrorResponse",
    "RestaurantError",
]
