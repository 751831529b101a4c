"""Webhook endpoints for Stripe payment events.

Handles:
- checkout.session.completed (order paid)
- payment_intent.succeeded (booking / catering deposit paid)
- payment_intent.payment_failed and charge.refunded (recorded, notified)

Other event types are acknowledged and ignored. These endpoints do not
require authentication; trust comes from the Stripe-Signature header.
"""

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from starlette.status import HTTP_200_OK

from restaurant_api.dependencies import (
    get_event_verifier,
    get_notification_queue,
    get_notification_trigger,
    get_settings,
    get_stripe,
    get_transition_dispatcher,
)
from restaurant_api.models.webhooks import WebhookAck
from restaurant_shared.config import UnknownReferencePolicy, WebhookSettings
from restaurant_shared.models.enums import DispatchResult, VerificationFailure
from restaurant_shared.models.errors import ErrorCode, RestaurantError
from restaurant_shared.services.event_verifier import EventVerifier, VerificationError
from restaurant_shared.services.notification_service import (
    LambdaNotificationQueue,
    NotificationTrigger,
)
from restaurant_shared.services.stripe_service import StripeService, StripeServiceError
from restaurant_shared.services.transition_dispatcher import TransitionDispatcher
from restaurant_shared.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

SIGNATURE_HEADER = "Stripe-Signature"

VERIFICATION_ERROR_CODES = {
    VerificationFailure.BAD_SIGNATURE: ErrorCode.INVALID_WEBHOOK_SIGNATURE,
    VerificationFailure.MALFORMED: ErrorCode.MALFORMED_WEBHOOK_PAYLOAD,
    VerificationFailure.STALE: ErrorCode.STALE_WEBHOOK_TIMESTAMP,
}


@router.post(
    "/webhooks/stripe",
    summary="Stripe webhook receiver",
    description="""
Receive a signed Stripe event and apply it to the matching order, booking
or catering request.

**Notes:**
- The raw body is verified against the Stripe-Signature header before parsing
- Replayed events are acknowledged with outcome `replay` and change nothing
- Confirmation emails are sent off the response path, at most once per event
""",
    response_model=WebhookAck,
    status_code=HTTP_200_OK,
    responses={
        200: {"description": "Event acknowledged"},
        400: {"description": "Invalid signature, stale timestamp or malformed payload"},
        404: {"description": "Referenced record not found (reject policy only)"},
        500: {"description": "Storage failure; Stripe will retry"},
    },
)
@router.post("/webhook", response_model=WebhookAck, include_in_schema=False)
@router.post("/payments/webhook", response_model=WebhookAck, include_in_schema=False)
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: WebhookSettings = Depends(get_settings),
    verifier: EventVerifier = Depends(get_event_verifier),
    stripe_service: StripeService = Depends(get_stripe),
    dispatcher: TransitionDispatcher = Depends(get_transition_dispatcher),
    notifier: NotificationTrigger = Depends(get_notification_trigger),
    notification_queue: LambdaNotificationQueue | None = Depends(get_notification_queue),
) -> WebhookAck:
    """Verify, dispatch and acknowledge one webhook delivery."""
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER, "")

    try:
        secret = stripe_service.get_webhook_secret()
    except StripeServiceError as e:
        logger.error("Webhook secret unavailable: %s", e)
        raise RestaurantError(code=ErrorCode.WEBHOOK_PROCESSING_FAILED) from e

    try:
        event = verifier.verify(raw_body, signature, secret)
    except VerificationError as e:
        log_webhook_event(
            logger,
            "unverified",
            "unknown",
            result="rejected",
            reason=e.reason.value,
        )
        raise RestaurantError(
            code=VERIFICATION_ERROR_CODES[e.reason],
            details={"reason": str(e)},
        ) from e

    try:
        outcome = dispatcher.dispatch(event)
    except (ClientError, BotoCoreError) as e:
        log_webhook_event(
            logger,
            event.gateway_type,
            event.event_id,
            result="error",
            error=str(e),
        )
        raise RestaurantError(
            code=ErrorCode.WEBHOOK_PROCESSING_FAILED,
            details={"event_id": event.event_id},
        ) from e

    if outcome.result == DispatchResult.MALFORMED:
        raise RestaurantError(
            code=ErrorCode.MALFORMED_WEBHOOK_PAYLOAD,
            details={"event_id": event.event_id, "reason": outcome.message},
        )

    if (
        outcome.result == DispatchResult.UNKNOWN_REFERENCE
        and settings.unknown_reference_policy == UnknownReferencePolicy.REJECT
    ):
        raise RestaurantError(
            code=ErrorCode.UNKNOWN_REFERENCE,
            details={
                "event_id": event.event_id,
                "reference_kind": outcome.reference_kind,
                "reference_id": outcome.reference_id,
            },
        )

    if outcome.is_applied:
        if notification_queue is not None:
            notification_queue.enqueue(outcome, event)
        else:
            background_tasks.add_task(notifier.notify, outcome, event)

    return WebhookAck(event_id=event.event_id, outcome=outcome.result)
