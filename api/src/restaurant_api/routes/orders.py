"""Order checkout endpoint.

Creates a pending order and a Stripe Checkout Session for it. The order is
marked paid when checkout.session.completed arrives on the webhook. Stored
orders can be listed, newest first.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_200_OK

from restaurant_api.dependencies import get_payable_repository, get_settings, get_stripe
from restaurant_api.models.orders import (
    CheckoutRequest,
    CheckoutResponse,
    OrderListResponse,
    OrderSummary,
)
from restaurant_api.models.payments import to_minor_units
from restaurant_shared.config import WebhookSettings
from restaurant_shared.models.errors import ErrorCode, RestaurantError
from restaurant_shared.services.payable_repository import PayableRepository
from restaurant_shared.services.stripe_service import StripeService, StripeServiceError
from restaurant_shared.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "/checkout",
    summary="Checkout cart",
    description="""
Create a pending order for the cart and return the Stripe Checkout URL.

**Notes:**
- Prices are in major units; the total is computed server-side
- The order ID is sent to Stripe as `metadata.orderId`
""",
    response_model=CheckoutResponse,
    status_code=HTTP_200_OK,
    responses={
        200: {"description": "Checkout session created"},
        400: {"description": "Cart is empty"},
        502: {"description": "Stripe API error"},
    },
)
async def checkout(
    body: CheckoutRequest,
    settings: WebhookSettings = Depends(get_settings),
    repository: PayableRepository = Depends(get_payable_repository),
    stripe_service: StripeService = Depends(get_stripe),
) -> CheckoutResponse:
    if not body.items:
        raise RestaurantError(code=ErrorCode.EMPTY_CART)

    line_items = [
        {
            "product_id": item.product_id,
            "name": item.name,
            "unit_amount": to_minor_units(item.price),
            "quantity": item.quantity,
            "image": item.image,
        }
        for item in body.items
    ]
    total = sum(line["unit_amount"] * line["quantity"] for line in line_items)

    order = repository.create_order(
        customer_email=body.customer_email,
        customer_name=body.customer_name,
        items=[{k: v for k, v in line.items() if v is not None} for line in line_items],
        total_amount_cents=total,
        currency=settings.payment_currency,
    )
    order_id = order["order_id"]

    client_url = settings.client_url.rstrip("/")
    try:
        session = stripe_service.create_order_checkout_session(
            order_id=order_id,
            line_items=line_items,
            currency=settings.payment_currency,
            customer_email=body.customer_email,
            customer_name=body.customer_name,
            success_url=f"{client_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{client_url}/cart",
        )
    except StripeServiceError as e:
        logger.warning("Checkout session failed for %s; order left pending", order_id)
        raise RestaurantError(
            code=ErrorCode.STRIPE_API_ERROR,
            details={"order_id": order_id, "stripe_error_code": e.stripe_error_code},
        ) from e

    return CheckoutResponse(url=session["checkout_url"], order_id=order_id)


@router.get(
    "",
    summary="List orders",
    response_model=OrderListResponse,
    responses={200: {"description": "All orders, newest first"}},
)
async def list_orders(
    repository: PayableRepository = Depends(get_payable_repository),
) -> OrderListResponse:
    orders = [OrderSummary.model_validate(order) for order in repository.list_orders()]
    return OrderListResponse(count=len(orders), orders=orders)
