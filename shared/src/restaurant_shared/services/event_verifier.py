"""Stripe webhook signature verification and event decoding.

Signature checking is delegated to ``stripe.WebhookSignature``: it
recomputes HMAC-SHA256 over ``"{t}.{raw_body}"`` with the endpoint secret,
compares in constant time, and enforces the timestamp tolerance. The
verifier maps its failures onto VerificationFailure reasons and decodes the
verified bytes into a typed PaymentEvent.
"""

import json

import stripe

from restaurant_shared.models.enums import VerificationFailure
from restaurant_shared.models.payment_event import PaymentEvent, decode_payment_event
from restaurant_shared.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300

# Prefix of the stripe error raised when the signed timestamp is too old
_STALE_MESSAGE = "Timestamp outside the tolerance zone"


class VerificationError(Exception):
    """Raised when a webhook payload cannot be trusted or decoded."""

    def __init__(self, reason: VerificationFailure, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class EventVerifier:
    """Verifies webhook signatures and decodes payloads into PaymentEvents.

    Usage:
        verifier = EventVerifier(tolerance_seconds=300)
        event = verifier.verify(raw_body, request.headers["Stripe-Signature"], secret)
    """

    def __init__(self, tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS) -> None:
        """Initialize verifier.

        Args:
            tolerance_seconds: Maximum accepted age of the signed timestamp.
                0 disables the freshness check.
        """
        self.tolerance_seconds = tolerance_seconds

    def verify(self, raw_body: bytes, signature_header: str, secret: str) -> PaymentEvent:
        """Verify a webhook delivery and decode it.

        Args:
            raw_body: Unparsed request body, byte-for-byte as received
            signature_header: Stripe-Signature header value
            secret: Endpoint signing secret (whsec_xxx)

        Returns:
            Decoded PaymentEvent (Unrecognized for unsupported types)

        Raises:
            VerificationError: bad_signature, stale or malformed
        """
        if not signature_header:
            raise VerificationError(
                VerificationFailure.BAD_SIGNATURE, "Missing Stripe-Signature header"
            )

        # Invalid bytes become U+FFFD, so a body that is not the signed
        # UTF-8 text can never match the HMAC and fails as bad_signature.
        body = raw_body.decode("utf-8", errors="replace")

        try:
            stripe.WebhookSignature.verify_header(
                body,
                signature_header,
                secret,
                tolerance=self.tolerance_seconds or None,
            )
        except stripe.SignatureVerificationError as e:
            reason = (
                VerificationFailure.STALE
                if str(e).startswith(_STALE_MESSAGE)
                else VerificationFailure.BAD_SIGNATURE
            )
            logger.warning("Webhook signature verification failed (%s): %s", reason.value, e)
            raise VerificationError(reason, str(e)) from e

        try:
            envelope = json.loads(body)
            event = decode_payment_event(envelope)
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            logger.warning("Verified webhook body could not be decoded: %s", e)
            raise VerificationError(VerificationFailure.MALFORMED, str(e)) from e

        logger.info("Webhook signature verified for event: %s", event.event_id)
        return event

