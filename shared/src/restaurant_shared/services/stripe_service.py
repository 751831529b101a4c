"""Stripe gateway client for deposits, order checkout and payment lookups.

Uses the StripeClient pattern; API key and webhook signing secret come from
SSM Parameter Store.
"""

import datetime as dt
import os
from functools import lru_cache
from typing import Any

import stripe
from stripe import StripeClient

from restaurant_shared.models.enums import DepositType
from restaurant_shared.utils.logging import get_logger, log_payment_operation

from .ssm_service import SSMService, SSMServiceError, get_ssm_service

logger = get_logger(__name__)

# Metadata key carrying the record reference for each deposit type
DEPOSIT_REFERENCE_KEYS: dict[DepositType, str] = {
    DepositType.BOOKING_DEPOSIT: "bookingRef",
    DepositType.CATERING_DEPOSIT: "quoteRef",
}

DEPOSIT_DESCRIPTIONS: dict[DepositType, str] = {
    DepositType.BOOKING_DEPOSIT: "Booking deposit for {reference}",
    DepositType.CATERING_DEPOSIT: "Catering deposit for {reference}",
}


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class StripeService:
    """Stripe operations used by the payment routes and webhook intake.

    Usage:
        stripe_svc = get_stripe_service()
        intent = stripe_svc.create_deposit_intent(
            deposit_type=DepositType.BOOKING_DEPOSIT,
            reference_id="BK-2026-0042",
            amount_cents=5000,
            currency="nzd",
            customer_email="ama@example.com",
            customer_name="Ama Mensah",
        )
    """

    def __init__(
        self,
        environment: str | None = None,
        ssm: SSMService | None = None,
    ) -> None:
        """Initialize Stripe service.

        Args:
            environment: Environment name (dev, prod). Defaults to ENVIRONMENT env var.
            ssm: SSM service; defaults to the shared instance
        """
        self._environment = environment or os.environ.get("ENVIRONMENT", "dev")
        self._ssm = ssm or get_ssm_service()
        self._client: StripeClient | None = None
        self._webhook_secret: str | None = None

    def _parameter(self, name: str) -> str:
        return self._ssm.get_parameter(f"/restaurant/{self._environment}/stripe/{name}")

    def _get_client(self) -> StripeClient:
        """Get or lazily create the Stripe client.

        Raises:
            StripeServiceError: If the secret key cannot be retrieved.
        """
        if self._client is None:
            try:
                self._client = StripeClient(self._parameter("secret_key"))
            except SSMServiceError as e:
                raise StripeServiceError(f"Failed to initialize Stripe client: {e}") from e
            logger.info("Stripe client initialized for environment: %s", self._environment)
        return self._client

    def get_webhook_secret(self) -> str:
        """Get the webhook endpoint signing secret.

        Raises:
            StripeServiceError: If the secret cannot be retrieved.
        """
        if self._webhook_secret is None:
            try:
                self._webhook_secret = self._parameter("webhook_secret")
            except SSMServiceError as e:
                raise StripeServiceError(f"Failed to get webhook secret: {e}") from e
        return self._webhook_secret

    def create_deposit_intent(
        self,
        *,
        deposit_type: DepositType,
        reference_id: str,
        amount_cents: int,
        currency: str,
        customer_email: str,
        customer_name: str,
        extra_metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Create a PaymentIntent for a booking or catering deposit.

        The metadata written here is what the webhook dispatcher later reads
        to find the booking or catering request.

        Args:
            deposit_type: booking_deposit or catering_deposit
            reference_id: Booking ref or catering quote ref
            amount_cents: Deposit in minor units
            currency: ISO currency code
            customer_email: Receipt and notification address
            customer_name: Customer display name
            extra_metadata: Additional metadata (e.g. eventDate)

        Returns:
            Dict with client_secret and payment_intent_id

        Raises:
            StripeServiceError: If intent creation fails.
        """
        client = self._get_client()

        metadata = {
            DEPOSIT_REFERENCE_KEYS[deposit_type]: reference_id,
            "type": deposit_type.value,
            "customerEmail": customer_email,
            "customerName": customer_name,
        }
        if extra_metadata:
            metadata.update(extra_metadata)

        try:
            intent = client.payment_intents.create(
                params={
                    "amount": amount_cents,
                    "currency": currency,
                    "metadata": metadata,
                    "receipt_email": customer_email,
                    "description": DEPOSIT_DESCRIPTIONS[deposit_type].format(
                        reference=reference_id
                    ),
                },
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            log_payment_operation(
                logger,
                "create_deposit_intent",
                reference_id=reference_id,
                amount_cents=amount_cents,
                error=str(e),
            )
            raise StripeServiceError(
                f"Failed to create payment intent: {e}", stripe_error_code=error_code
            ) from e

        log_payment_operation(
            logger,
            "create_deposit_intent",
            reference_id=reference_id,
            amount_cents=amount_cents,
            status=intent.status,
            payment_intent_id=intent.id,
        )
        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.id,
        }

    def create_order_checkout_session(
        self,
        *,
        order_id: str,
        line_items: list[dict[str, Any]],
        currency: str,
        customer_email: str,
        customer_name: str,
        success_url: str,
        cancel_url: str,
    ) -> dict[str, Any]:
        """Create a Checkout Session for a pending order.

        Args:
            order_id: Order the session pays for (also the idempotency key)
            line_items: Items with name, unit_amount (minor units), quantity, image
            currency: ISO currency code
            customer_email: Customer email
            customer_name: Customer display name
            success_url: Redirect on success
            cancel_url: Redirect on cancel

        Returns:
            Dict with session_id and checkout_url

        Raises:
            StripeServiceError: If session creation fails.
        """
        client = self._get_client()

        stripe_line_items = []
        for item in line_items:
            product_data: dict[str, Any] = {"name": item["name"]}
            if item.get("image"):
                product_data["images"] = [item["image"]]
            stripe_line_items.append(
                {
                    "price_data": {
                        "currency": currency,
                        "unit_amount": item["unit_amount"],
                        "product_data": product_data,
                    },
                    "quantity": item["quantity"],
                }
            )

        try:
            session = client.checkout.sessions.create(
                params={
                    "mode": "payment",
                    "payment_method_types": ["card"],
                    "customer_email": customer_email,
                    "line_items": stripe_line_items,
                    "success_url": success_url,
                    "cancel_url": cancel_url,
                    "metadata": {
                        "orderId": order_id,
                        "customerEmail": customer_email,
                        "customerName": customer_name,
                    },
                },
                options={"idempotency_key": f"checkout_{order_id}"},
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            log_payment_operation(
                logger, "create_checkout_session", reference_id=order_id, error=str(e)
            )
            raise StripeServiceError(
                f"Failed to create checkout session: {e}", stripe_error_code=error_code
            ) from e

        log_payment_operation(
            logger,
            "create_checkout_session",
            reference_kind="order",
            reference_id=order_id,
            session_id=session.id,
        )
        return {"session_id": session.id, "checkout_url": session.url}

    def retrieve_payment_intent(self, payment_intent_id: str) -> dict[str, Any]:
        """Fetch a PaymentIntent summary.

        Args:
            payment_intent_id: Stripe PaymentIntent ID (pi_xxx)

        Returns:
            Dict with id, amount (major units), currency, status, created, metadata

        Raises:
            StripeServiceError: If the lookup fails; stripe_error_code is
                ``resource_missing`` for unknown IDs.
        """
        client = self._get_client()
        try:
            intent = client.payment_intents.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            raise StripeServiceError(
                f"Failed to retrieve payment intent: {e}",
                stripe_error_code=getattr(e, "code", None),
            ) from e

        return {
            "id": intent.id,
            "amount": intent.amount / 100,
            "currency": intent.currency,
            "status": intent.status,
            "created": dt.datetime.fromtimestamp(intent.created, tz=dt.UTC),
            "metadata": dict(intent.metadata or {}),
        }

    def create_refund(
        self,
        payment_intent_id: str,
        amount_cents: int | None = None,
        reason: str = "requested_by_customer",
    ) -> dict[str, Any]:
        """Refund a PaymentIntent in full or in part.

        Stripe follows up with a charge.refunded webhook event.

        Args:
            payment_intent_id: Stripe PaymentIntent ID (pi_xxx)
            amount_cents: Amount to refund in minor units; None refunds everything
            reason: duplicate, fraudulent or requested_by_customer

        Returns:
            Dict with id, amount (major units) and status

        Raises:
            StripeServiceError: If the refund cannot be created.
        """
        client = self._get_client()

        params: dict[str, Any] = {"payment_intent": payment_intent_id, "reason": reason}
        if amount_cents is not None:
            params["amount"] = amount_cents

        try:
            refund = client.refunds.create(params=params)
        except stripe.StripeError as e:
            log_payment_operation(
                logger,
                "create_refund",
                payment_intent_id=payment_intent_id,
                amount_cents=amount_cents,
                error=str(e),
            )
            raise StripeServiceError(
                f"Failed to create refund: {e}", stripe_error_code=getattr(e, "code", None)
            ) from e

        log_payment_operation(
            logger,
            "create_refund",
            payment_intent_id=payment_intent_id,
            amount_cents=refund.amount,
            status=refund.status,
            refund_id=refund.id,
        )
        return {"id": refund.id, "amount": refund.amount / 100, "status": refund.status}


@lru_cache(maxsize=1)
def get_stripe_service() -> StripeService:
    """Get the shared StripeService instance."""
    return StripeService()
