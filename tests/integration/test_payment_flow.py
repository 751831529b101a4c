"""End-to-end payment flows through the API against moto DynamoDB.

Stripe itself is stubbed; the webhook leg is signed for real so the whole
verify -> dispatch -> ledger -> notify path runs.
"""

from typing import Any, Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from restaurant_api.dependencies import get_notification_trigger, get_stripe
from restaurant_api.main import app
from restaurant_shared.services.notification_service import NotificationTrigger
from webhook_payloads import (
    TEST_WEBHOOK_SECRET,
    checkout_completed_event,
    create_stripe_signature,
    deposit_succeeded_event,
    encode,
)

pytestmark = pytest.mark.integration


class RecordingSender:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to: str, subject: str, html_body: str) -> None:
        self.sent.append((to, subject, html_body))


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def stripe_service() -> MagicMock:
    service = MagicMock()
    service.get_webhook_secret.return_value = TEST_WEBHOOK_SECRET
    service.create_order_checkout_session.return_value = {
        "session_id": "cs_flow",
        "checkout_url": "https://checkout.stripe.com/c/pay/cs_flow",
    }
    return service


@pytest.fixture
def client(
    dynamodb_tables: Any, stripe_service: MagicMock, sender: RecordingSender
) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_stripe] = lambda: stripe_service
    app.dependency_overrides[get_notification_trigger] = lambda: NotificationTrigger(sender)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _deliver(client: TestClient, event: dict[str, Any]) -> Any:
    body = encode(event)
    return client.post(
        "/api/webhooks/stripe",
        content=body,
        headers={"Stripe-Signature": create_stripe_signature(body)},
    )


class TestOrderFlow:
    def test_checkout_then_webhook_marks_paid(
        self, client: TestClient, read_record: Any, sender: RecordingSender
    ) -> None:
        checkout = client.post(
            "/api/orders/checkout",
            json={
                "items": [{"productId": "suya", "name": "Suya", "price": "22.00", "quantity": 1}],
                "customerEmail": "ada@example.com",
                "customerName": "Ada",
            },
        )
        order_id = checkout.json()["order_id"]
        assert read_record("orders", order_id)["status"] == "pending"

        for _ in range(3):
            response = _deliver(
                client, checkout_completed_event(order_id=order_id, amount_total=2200)
            )
            assert response.status_code == 200

        assert read_record("orders", order_id)["status"] == "paid"
        assert read_record("stripe-webhook-events", "evt_checkout_1")["reference_id"] == order_id
        assert len(sender.sent) == 1
        assert "$22.00 NZD" in sender.sent[0][2]


class TestDepositFlow:
    def test_two_events_for_two_bookings(
        self, client: TestClient, seed_record: Any, read_record: Any
    ) -> None:
        seed_record("bookings", "BK-A")
        seed_record("bookings", "BK-B")

        first = _deliver(client, deposit_succeeded_event("booking_deposit", "BK-A", event_id="evt_a"))
        second = _deliver(client, deposit_succeeded_event("booking_deposit", "BK-B", event_id="evt_b"))

        assert first.json()["outcome"] == "applied"
        assert second.json()["outcome"] == "applied"
        assert read_record("bookings", "BK-A")["status"] == "confirmed"
        assert read_record("bookings", "BK-B")["status"] == "confirmed"

    def test_second_event_for_same_booking_ignored(
        self, client: TestClient, seed_record: Any, read_record: Any
    ) -> None:
        seed_record("bookings", "BK-A")

        _deliver(client, deposit_succeeded_event("booking_deposit", "BK-A", event_id="evt_a"))
        again = _deliver(client, deposit_succeeded_event("booking_deposit", "BK-A", event_id="evt_a2"))

        assert again.json()["outcome"] == "ignored"
        assert read_record("bookings", "BK-A")["status"] == "confirmed"
        assert read_record("stripe-webhook-events", "evt_a2") is None
