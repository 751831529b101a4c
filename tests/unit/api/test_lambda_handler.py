"""Unit tests for the Lambda entry point."""

import json
from unittest.mock import MagicMock, patch

from restaurant_api import main
from restaurant_shared.models.dispatch import DispatchOutcome
from restaurant_shared.models.enums import ReferenceKind
from restaurant_shared.models.payment_event import decode_payment_event
from restaurant_shared.services.notification_service import (
    NotificationTrigger,
    build_notification_payload,
)
from webhook_payloads import deposit_succeeded_event


class RecordingSender:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to: str, subject: str, html_body: str) -> None:
        self.sent.append((to, subject, html_body))


class TestLambdaHandler:
    def test_notification_payload_sends_email(self) -> None:
        sender = RecordingSender()
        event = decode_payment_event(deposit_succeeded_event("booking_deposit", "BK-7F3A"))
        outcome = DispatchOutcome.applied(ReferenceKind.BOOKING, "BK-7F3A", "confirmed")
        payload = json.loads(json.dumps(build_notification_payload(outcome, event)))

        with (
            patch.object(main, "get_notification_trigger", return_value=NotificationTrigger(sender)),
            patch.object(main, "asgi_handler") as asgi_handler,
        ):
            assert main.handler(payload, MagicMock()) is None

        asgi_handler.assert_not_called()
        assert [subject for _, subject, _ in sender.sent] == [
            "Payment Confirmed - Afroflavours Booking"
        ]

    def test_http_events_go_to_the_app(self) -> None:
        http_event = {"version": "2.0", "rawPath": "/api/ping", "requestContext": {}}
        context = MagicMock()

        with patch.object(main, "asgi_handler", return_value={"statusCode": 200}) as asgi_handler:
            assert main.handler(http_event, context) == {"statusCode": 200}

        asgi_handler.assert_called_once_with(http_event, context)
