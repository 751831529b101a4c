"""Payment endpoints for deposits.

Provides REST endpoints for:
- Creating a booking deposit PaymentIntent
- Creating a catering deposit PaymentIntent
- Looking up a PaymentIntent
- Refunding a PaymentIntent

The record itself is moved to its paid status by the webhook, not here.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_200_OK

from restaurant_api.dependencies import get_settings, get_stripe
from restaurant_api.models.payments import (
    BookingPaymentRequest,
    CateringPaymentRequest,
    DepositPaymentResponse,
    PaymentDetails,
    PaymentDetailsResponse,
    RefundDetails,
    RefundRequest,
    RefundResponse,
    to_minor_units,
)
from restaurant_shared.config import WebhookSettings
from restaurant_shared.models.enums import DepositType
from restaurant_shared.models.errors import ErrorCode, RestaurantError
from restaurant_shared.services.stripe_service import StripeService, StripeServiceError

router = APIRouter(prefix="/payments", tags=["payments"])

RESOURCE_MISSING = "resource_missing"


def _stripe_error(e: StripeServiceError) -> RestaurantError:
    return RestaurantError(
        code=ErrorCode.STRIPE_API_ERROR,
        details={"stripe_error_code": e.stripe_error_code},
    )


@router.post(
    "/create-booking-payment",
    summary="Create booking deposit",
    response_model=DepositPaymentResponse,
    status_code=HTTP_200_OK,
    responses={
        200: {"description": "PaymentIntent created"},
        422: {"description": "Invalid request body"},
        502: {"description": "Stripe API error"},
    },
)
async def create_booking_payment(
    body: BookingPaymentRequest,
    settings: WebhookSettings = Depends(get_settings),
    stripe_service: StripeService = Depends(get_stripe),
) -> DepositPaymentResponse:
    """Create a PaymentIntent carrying the booking reference in its metadata."""
    try:
        intent = stripe_service.create_deposit_intent(
            deposit_type=DepositType.BOOKING_DEPOSIT,
            reference_id=body.booking_ref,
            amount_cents=to_minor_units(body.amount),
            currency=settings.payment_currency,
            customer_email=body.email,
            customer_name=body.name,
        )
    except StripeServiceError as e:
        raise _stripe_error(e) from e

    return DepositPaymentResponse(**intent)


@router.post(
    "/create-catering-payment",
    summary="Create catering deposit",
    response_model=DepositPaymentResponse,
    status_code=HTTP_200_OK,
    responses={
        200: {"description": "PaymentIntent created"},
        422: {"description": "Invalid request body"},
        502: {"description": "Stripe API error"},
    },
)
async def create_catering_payment(
    body: CateringPaymentRequest,
    settings: WebhookSettings = Depends(get_settings),
    stripe_service: StripeService = Depends(get_stripe),
) -> DepositPaymentResponse:
    """Create a PaymentIntent carrying the catering quote reference."""
    extra = {"eventDate": body.event_date} if body.event_date else None
    try:
        intent = stripe_service.create_deposit_intent(
            deposit_type=DepositType.CATERING_DEPOSIT,
            reference_id=body.quote_ref,
            amount_cents=to_minor_units(body.amount),
            currency=settings.payment_currency,
            customer_email=body.email,
            customer_name=body.name,
            extra_metadata=extra,
        )
    except StripeServiceError as e:
        raise _stripe_error(e) from e

    return DepositPaymentResponse(**intent)


@router.get(
    "/payment/{payment_intent_id}",
    summary="Get payment",
    response_model=PaymentDetailsResponse,
    responses={
        200: {"description": "Payment found"},
        404: {"description": "No such PaymentIntent"},
        502: {"description": "Stripe API error"},
    },
)
async def get_payment(
    payment_intent_id: str,
    stripe_service: StripeService = Depends(get_stripe),
) -> PaymentDetailsResponse:
    try:
        details = stripe_service.retrieve_payment_intent(payment_intent_id)
    except StripeServiceError as e:
        if e.stripe_error_code == RESOURCE_MISSING:
            raise RestaurantError(
                code=ErrorCode.PAYMENT_NOT_FOUND,
                details={"payment_intent_id": payment_intent_id},
            ) from e
        raise _stripe_error(e) from e

    return PaymentDetailsResponse(payment=PaymentDetails(**details))


@router.post(
    "/refund",
    summary="Refund payment",
    description="""
Refund a PaymentIntent in full, or in part when `amount` is given.

**Notes:**
- `amount` is in major units
- Stripe sends `charge.refunded` to the webhook once the refund is processed
""",
    response_model=RefundResponse,
    status_code=HTTP_200_OK,
    responses={
        200: {"description": "Refund created"},
        422: {"description": "Invalid request body"},
        502: {"description": "Stripe API error"},
    },
)
async def refund_payment(
    body: RefundRequest,
    stripe_service: StripeService = Depends(get_stripe),
) -> RefundResponse:
    amount_cents = to_minor_units(body.amount) if body.amount is not None else None
    try:
        refund = stripe_service.create_refund(
            body.payment_intent_id,
            amount_cents=amount_cents,
            reason=body.reason,
        )
    except StripeServiceError as e:
        raise RestaurantError(
            code=ErrorCode.STRIPE_API_ERROR,
            details={
                "payment_intent_id": body.payment_intent_id,
                "stripe_error_code": e.stripe_error_code,
            },
        ) from e

    return RefundResponse(refund=RefundDetails(**refund))
