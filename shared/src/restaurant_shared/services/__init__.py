"""Backend services for restaurant payment reconciliation."""

from .dynamodb import DynamoDBService, get_dynamodb_service, reset_dynamodb_service
from .event_verifier import EventVerifier, VerificationError
from .idempotency_ledger import AlreadyAppliedError, IdempotencyLedger
from .notification_service import (
    EmailDeliveryError,
    EmailSender,
    NotificationTrigger,
    SESEmailSender,
)
from .payable_repository import PayableRepository
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .stripe_service import StripeService, StripeServiceError, get_stripe_service
from .transition_dispatcher import TRANSITIONS, TransitionDispatcher

__all__ = [
    "AlreadyAppliedError",
    "DynamoDBService",
    "EmailDeliveryError",
    "EmailSender",
    "EventVerifier",
    "IdempotencyLedger",
    "NotificationTrigger",
    "PayableRepository",
    "SESEmailSender",
    "SSMService",
    "SSMServiceError",
    "StripeService",
    "StripeServiceError",
    "TRANSITIONS",
    "TransitionDispatcher",
    "VerificationError",
    "get_dynamodb_service",
    "get_ssm_service",
    "get_stripe_service",
    "reset_dynamodb_service",
]
