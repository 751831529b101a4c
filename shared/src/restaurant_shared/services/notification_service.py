"""Customer emails sent after a payment event is applied.

Email is best-effort: NotificationTrigger.notify never raises, so a failed
send can never turn an applied event into a gateway retry.

On Lambda the webhook does not send email itself. LambdaNotificationQueue
invokes the function asynchronously with a NOTIFICATION_EVENT_KEY payload
and handle_notification does the sending in that separate invocation.
"""

import html
import json
from typing import Any, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from restaurant_shared.models.dispatch import DispatchOutcome
from restaurant_shared.models.enums import ReferenceKind
from restaurant_shared.models.payment_event import (
    ChargeRefunded,
    CheckoutCompleted,
    DepositSucceeded,
    PaymentEvent,
    PaymentFailed,
    decode_payment_event,
)
from restaurant_shared.utils.logging import get_logger

logger = get_logger(__name__)

NOTIFICATION_EVENT_KEY = "restaurant_notification"

# Single attempt with short timeouts
SES_CLIENT_CONFIG = Config(
    connect_timeout=2,
    read_timeout=5,
    retries={"max_attempts": 1, "mode": "standard"},
)


class EmailDeliveryError(Exception):
    """Raised when an email cannot be handed to the mail service."""


class EmailSender(Protocol):
    def send(self, to: str, subject: str, html_body: str) -> None: ...


class SESEmailSender:
    """Sends HTML email through Amazon SES."""

    def __init__(self, from_address: str | None, region: str | None = None) -> None:
        """Initialize sender.

        Args:
            from_address: Verified SES sender address
            region: SES region; defaults to the session region
        """
        self.from_address = from_address
        if region:
            self._client = boto3.client("ses", region_name=region, config=SES_CLIENT_CONFIG)
        else:
            self._client = boto3.client("ses", config=SES_CLIENT_CONFIG)

    def send(self, to: str, subject: str, html_body: str) -> None:
        """Send one email.

        Raises:
            EmailDeliveryError: If no sender is configured or SES rejects the call
        """
        if not self.from_address:
            raise EmailDeliveryError("SES_FROM_EMAIL is not configured")

        try:
            response = self._client.send_email(
                Source=self.from_address,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": html_body, "Charset": "UTF-8"}},
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise EmailDeliveryError(f"SES send_email failed: {e}") from e

        logger.info("Email sent to %s (message id %s)", to, response.get("MessageId"))


def format_amount(amount_minor: int | None, currency: str | None) -> str:
    """Render minor units as e.g. ``$45.00 NZD``."""
    if amount_minor is None:
        return "n/a"
    return f"${amount_minor / 100:.2f} {(currency or '').upper()}".rstrip()


class NotificationTrigger:
    """Builds and sends the customer email for an applied payment event."""

    def __init__(self, sender: EmailSender, brand_name: str = "Afroflavours") -> None:
        self.sender = sender
        self.brand_name = brand_name

    def notify(self, outcome: DispatchOutcome, event: PaymentEvent) -> None:
        """Send the email matching ``outcome``; log and swallow any failure.

        Args:
            outcome: Dispatch outcome; anything but APPLIED is a no-op
            event: The event that produced the outcome
        """
        if not outcome.is_applied:
            return

        try:
            message = self._build_message(outcome, event)
            if message is None:
                return
            recipient = event.metadata.customer_email
            if not recipient:
                logger.info("No customer email on event %s, skipping notification", event.event_id)
                return
            subject, html_body = message
            self.sender.send(recipient, subject, html_body)
        except Exception:
            logger.exception("Notification for event %s failed", event.event_id)

    def _build_message(
        self, outcome: DispatchOutcome, event: PaymentEvent
    ) -> tuple[str, str] | None:
        name = html.escape(event.metadata.customer_name or "customer")
        reference = html.escape(outcome.reference_id or event.metadata.reference_id or "")
        brand = html.escape(self.brand_name)
        signature = f"<p>Best regards,<br>The {brand} Team</p>"

        if isinstance(event, CheckoutCompleted):
            paid = format_amount(event.amount_total, event.currency)
            return (
                "Order Payment Confirmed",
                f"<h2>Payment Confirmed</h2>"
                f"<p>Dear {name},</p>"
                f"<p>Your order has been paid and is being prepared.</p>"
                f"<p><strong>Order Reference:</strong> {reference}</p>"
                f"<p><strong>Amount Paid:</strong> {paid}</p>"
                f"{signature}",
            )

        if isinstance(event, DepositSucceeded):
            paid = format_amount(event.amount, event.currency)
            if outcome.reference_kind == ReferenceKind.BOOKING:
                return (
                    f"Payment Confirmed - {self.brand_name} Booking",
                    f"<h2>Payment Confirmed!</h2>"
                    f"<p>Dear {name},</p>"
                    f"<p>Your payment has been successfully processed.</p>"
                    f"<p><strong>Booking Reference:</strong> {reference}</p>"
                    f"<p><strong>Amount Paid:</strong> {paid}</p>"
                    f"<p>Your booking is now confirmed. We look forward to serving you!</p>"
                    f"{signature}",
                )
            return (
                f"Catering Deposit Confirmed - {self.brand_name}",
                f"<h2>Deposit Received!</h2>"
                f"<p>Dear {name},</p>"
                f"<p>Your catering deposit has been successfully processed.</p>"
                f"<p><strong>Quote Reference:</strong> {reference}</p>"
                f"<p><strong>Deposit Paid:</strong> {paid}</p>"
                f"<p>Your catering booking is now secured. "
                f"We'll be in touch with final details soon.</p>"
                f"{signature}",
            )

        if isinstance(event, PaymentFailed):
            reason = html.escape(event.failure_message or "Unknown error")
            return (
                f"Payment Failed - {self.brand_name}",
                f"<h2>Payment Failed</h2>"
                f"<p>Dear {name},</p>"
                f"<p>Unfortunately, your payment could not be processed.</p>"
                f"<p><strong>Reference:</strong> {reference}</p>"
                f"<p><strong>Reason:</strong> {reason}</p>"
                f"<p>Please try again or contact us for assistance.</p>"
                f"{signature}",
            )

        if isinstance(event, ChargeRefunded):
            logger.info("Refund for event %s recorded; no customer email", event.event_id)
        return None


def build_notification_payload(outcome: DispatchOutcome, event: PaymentEvent) -> dict[str, Any]:
    """Serialize an applied outcome and its event for an async invocation.

    The event travels as its webhook envelope and is decoded again on the
    receiving side.
    """
    envelope: dict[str, Any] = {
        "id": event.event_id,
        "type": event.gateway_type,
        "data": {"object": event.payload},
    }
    if event.created is not None:
        envelope["created"] = int(event.created.timestamp())
    return {
        NOTIFICATION_EVENT_KEY: {
            "outcome": outcome.model_dump(mode="json"),
            "envelope": envelope,
        }
    }


def handle_notification(payload: dict[str, Any], trigger: NotificationTrigger) -> None:
    """Send the email for a payload built by build_notification_payload."""
    body = payload[NOTIFICATION_EVENT_KEY]
    outcome = DispatchOutcome.model_validate(body["outcome"])
    event = decode_payment_event(body["envelope"])
    trigger.notify(outcome, event)


class LambdaNotificationQueue:
    """Hands notifications to a Lambda function invoked asynchronously.

    ``invoke`` with InvocationType "Event" returns once Lambda has queued
    the request, so the webhook response does not wait for SES.
    """

    def __init__(self, function_name: str, lambda_client: Any = None) -> None:
        self.function_name = function_name
        self._client = lambda_client or boto3.client("lambda")

    def enqueue(self, outcome: DispatchOutcome, event: PaymentEvent) -> bool:
        """Queue the notification for ``outcome``.

        Returns:
            True if Lambda accepted the invocation; failures are logged, not raised
        """
        payload = build_notification_payload(outcome, event)
        try:
            self._client.invoke(
                FunctionName=self.function_name,
                InvocationType="Event",
                Payload=json.dumps(payload).encode("utf-8"),
            )
        except (ClientError, BotoCoreError):
            logger.exception(
                "Could not queue notification for event %s on %s",
                event.event_id,
                self.function_name,
            )
            return False

        logger.info("Notification for event %s queued on %s", event.event_id, self.function_name)
        return True
