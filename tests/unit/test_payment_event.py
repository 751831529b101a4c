"""Unit tests for decoding Stripe envelopes into PaymentEvents."""

import pytest
from pydantic import TypeAdapter

from restaurant_shared.models.enums import PaymentEventType, ReferenceKind
from restaurant_shared.models.payment_event import (
    ChargeRefunded,
    PaymentEvent,
    PaymentFailed,
    decode_payment_event,
    extract_metadata,
)
from webhook_payloads import (
    charge_refunded_event,
    checkout_completed_event,
    deposit_succeeded_event,
    payment_failed_event,
)


class TestExtractMetadata:
    """Reference kind and customer fields come from Stripe metadata."""

    def test_order_reference(self) -> None:
        metadata = extract_metadata({"metadata": {"orderId": "ORD-1"}})
        assert metadata.reference_kind == ReferenceKind.ORDER
        assert metadata.reference_id == "ORD-1"

    def test_deposit_type_decides_kind(self) -> None:
        metadata = extract_metadata(
            {"metadata": {"type": "catering_deposit", "quoteRef": "Q-1", "bookingRef": "B-1"}}
        )
        assert metadata.reference_kind == ReferenceKind.CATERING
        assert metadata.reference_id == "Q-1"

    def test_deposit_type_without_its_reference(self) -> None:
        metadata = extract_metadata({"metadata": {"type": "booking_deposit"}})
        assert metadata.reference_kind == ReferenceKind.BOOKING
        assert metadata.reference_id is None

    def test_blank_reference_ignored(self) -> None:
        metadata = extract_metadata({"metadata": {"orderId": "   "}})
        assert metadata.reference_id is None
        assert metadata.reference_kind is None

    def test_email_falls_back_to_customer_details(self) -> None:
        metadata = extract_metadata(
            {"metadata": {}, "customer_details": {"email": "ada@example.com"}}
        )
        assert metadata.customer_email == "ada@example.com"

    def test_metadata_not_a_map(self) -> None:
        metadata = extract_metadata({"metadata": "oops"})
        assert metadata.reference_id is None


class TestDecodePaymentEvent:
    """Each supported Stripe type maps onto its own variant."""

    def test_checkout_completed(self) -> None:
        event = decode_payment_event(checkout_completed_event(amount_total=1850))
        assert event.event_type == PaymentEventType.CHECKOUT_COMPLETED
        assert event.amount_total == 1850
        assert event.currency == "nzd"
        assert event.created is not None

    def test_deposit_prefers_amount_received(self) -> None:
        envelope = deposit_succeeded_event(amount=4500)
        envelope["data"]["object"]["amount_received"] = 4000

        event = decode_payment_event(envelope)
        assert event.event_type == PaymentEventType.DEPOSIT_SUCCEEDED
        assert event.amount == 4000

    def test_payment_failed_reason(self) -> None:
        event = decode_payment_event(payment_failed_event(message="Insufficient funds"))
        assert isinstance(event, PaymentFailed)
        assert event.failure_message == "Insufficient funds"

    def test_payment_failed_without_reason(self) -> None:
        event = decode_payment_event(payment_failed_event(message=None))
        assert isinstance(event, PaymentFailed)
        assert event.failure_message is None

    def test_charge_refunded(self) -> None:
        event = decode_payment_event(charge_refunded_event())
        assert isinstance(event, ChargeRefunded)
        assert event.amount_refunded == 4500

    def test_missing_data_object_is_empty_payload(self) -> None:
        event = decode_payment_event({"id": "evt_1", "type": "invoice.paid"})
        assert event.event_type == PaymentEventType.UNRECOGNIZED
        assert event.payload == {}

    @pytest.mark.parametrize(
        "envelope",
        [
            None,
            "evt_1",
            {"type": "charge.refunded"},
            {"id": "", "type": "charge.refunded"},
            {"id": "evt_1", "type": 42},
            {"id": "evt_1", "type": "charge.refunded", "data": {"object": []}},
        ],
    )
    def test_invalid_envelopes(self, envelope: object) -> None:
        with pytest.raises(ValueError):
            decode_payment_event(envelope)

    def test_discriminated_union_round_trip(self) -> None:
        event = decode_payment_event(deposit_succeeded_event())
        adapter: TypeAdapter[PaymentEvent] = TypeAdapter(PaymentEvent)

        restored = adapter.validate_python(event.model_dump())
        assert type(restored) is type(event)
        assert restored == event
