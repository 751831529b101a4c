"""Maps verified payment events to status transitions on payable records.

Each event is applied at most once: the status update and the ledger row
commit in one DynamoDB transaction, and the ledger row is conditioned on
the event_id being new. Redelivered events come back as REPLAY with no
side effects.

Transitions:
    order     checkout_completed (paid)   pending          -> paid
    booking   deposit_succeeded           pending          -> confirmed
    catering  deposit_succeeded           pending, quoted  -> deposit_paid
    any       payment_failed              recorded, no status change
    any       charge_refunded             recorded, no status change
"""

import datetime as dt
from typing import TYPE_CHECKING, Callable, NamedTuple, assert_never

from restaurant_shared.models.dispatch import DispatchOutcome
from restaurant_shared.models.enums import (
    BookingStatus,
    CateringStatus,
    DepositType,
    OrderStatus,
    ReferenceKind,
)
from restaurant_shared.models.payment_event import (
    DEPOSIT_KINDS,
    ChargeRefunded,
    CheckoutCompleted,
    DepositSucceeded,
    PaymentEvent,
    PaymentFailed,
    Unrecognized,
)
from restaurant_shared.utils.logging import get_logger, log_webhook_event

from .idempotency_ledger import AlreadyAppliedError, IdempotencyLedger
from .payable_repository import PayableRepository

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


class Transition(NamedTuple):
    allowed_from: frozenset[str]
    new_status: str


TRANSITIONS: dict[ReferenceKind, Transition] = {
    ReferenceKind.ORDER: Transition(
        frozenset({OrderStatus.PENDING.value}),
        OrderStatus.PAID.value,
    ),
    ReferenceKind.BOOKING: Transition(
        frozenset({BookingStatus.PENDING.value}),
        BookingStatus.CONFIRMED.value,
    ),
    ReferenceKind.CATERING: Transition(
        frozenset({CateringStatus.PENDING.value, CateringStatus.QUOTED.value}),
        CateringStatus.DEPOSIT_PAID.value,
    ),
}


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class TransitionDispatcher:
    """Applies payment events to bookings, orders and catering requests."""

    def __init__(
        self,
        db: "DynamoDBService",
        ledger: IdempotencyLedger,
        repository: PayableRepository,
        clock: Callable[[], dt.datetime] = _utc_now,
    ) -> None:
        """Initialize dispatcher.

        Args:
            db: DynamoDB service used for the apply-and-record transaction
            ledger: Idempotency ledger
            repository: Payable record repository
            clock: Source of applied_at timestamps
        """
        self.db = db
        self.ledger = ledger
        self.repository = repository
        self._clock = clock

    def dispatch(self, event: PaymentEvent) -> DispatchOutcome:
        """Apply one verified payment event.

        Args:
            event: Decoded payment event

        Returns:
            DispatchOutcome describing what happened
        """
        if self.ledger.has_applied(event.event_id):
            outcome = DispatchOutcome.replay()
        else:
            match event:
                case CheckoutCompleted():
                    outcome = self._checkout_completed(event)
                case DepositSucceeded():
                    outcome = self._deposit_succeeded(event)
                case PaymentFailed() | ChargeRefunded():
                    outcome = self._record_only(event)
                case Unrecognized():
                    outcome = DispatchOutcome.ignored(
                        f"Event type '{event.gateway_type}' not handled"
                    )
                case _:
                    assert_never(event)

        log_webhook_event(
            logger,
            event.gateway_type,
            event.event_id,
            result=outcome.result.value,
            reference_kind=outcome.reference_kind.value if outcome.reference_kind else None,
            reference_id=outcome.reference_id,
            new_status=outcome.new_status,
            reason=outcome.message,
        )
        return outcome

    def _checkout_completed(self, event: CheckoutCompleted) -> DispatchOutcome:
        if event.payment_status != "paid":
            return DispatchOutcome.ignored(
                f"Payment status is '{event.payment_status}', not 'paid'"
            )
        kind = event.metadata.reference_kind or ReferenceKind.ORDER
        if kind != ReferenceKind.ORDER:
            return DispatchOutcome.ignored(f"Checkout for {kind.value} is not handled")
        return self._transition(event, kind)

    def _deposit_succeeded(self, event: DepositSucceeded) -> DispatchOutcome:
        try:
            deposit_type = DepositType(event.metadata.payment_type)
        except ValueError:
            return DispatchOutcome.ignored(
                f"Payment type '{event.metadata.payment_type}' is not a deposit"
            )
        return self._transition(event, DEPOSIT_KINDS[deposit_type])

    def _transition(
        self, event: CheckoutCompleted | DepositSucceeded, kind: ReferenceKind
    ) -> DispatchOutcome:
        reference_id = event.metadata.reference_id
        if not reference_id:
            return DispatchOutcome.malformed(f"Missing {kind.value} reference in metadata")

        record = self.repository.find_payable(kind, reference_id)
        if record is None:
            return DispatchOutcome.unknown_reference(kind, reference_id)

        transition = TRANSITIONS[kind]
        if record.status not in transition.allowed_from:
            return DispatchOutcome.ignored(
                f"{kind.value} {reference_id} is '{record.status}', "
                f"expected one of {sorted(transition.allowed_from)}"
            )

        ledger_record = self.ledger.build_record(
            event.event_id,
            self._clock(),
            event_type=event.gateway_type,
            payload_hash=IdempotencyLedger.compute_payload_hash(event.payload),
            reference_kind=kind,
            reference_id=reference_id,
            new_status=transition.new_status,
        )
        committed = self.db.transact_write(
            [
                self.ledger.build_mark_applied_put(ledger_record),
                self.repository.build_status_update(
                    kind, reference_id, transition.new_status, transition.allowed_from
                ),
            ]
        )
        if not committed:
            # Either a concurrent delivery of this event won, or the record's
            # status moved between the read and the write.
            if self.ledger.has_applied(event.event_id):
                return DispatchOutcome.replay()
            return DispatchOutcome.ignored(
                f"{kind.value} {reference_id} changed status concurrently"
            )

        logger.info(
            "%s %s moved to %s via webhook", kind.value, reference_id, transition.new_status
        )
        return DispatchOutcome.applied(kind, reference_id, transition.new_status)

    def _record_only(self, event: PaymentFailed | ChargeRefunded) -> DispatchOutcome:
        metadata = event.metadata
        try:
            self.ledger.mark_applied(
                event.event_id,
                self._clock(),
                event_type=event.gateway_type,
                payload_hash=IdempotencyLedger.compute_payload_hash(event.payload),
                reference_kind=metadata.reference_kind,
                reference_id=metadata.reference_id,
            )
        except AlreadyAppliedError:
            return DispatchOutcome.replay()

        if isinstance(event, PaymentFailed):
            logger.warning(
                "Payment failed: %s (%s)",
                event.payload.get("id"),
                event.failure_message or "no reason given",
            )
        else:
            logger.info(
                "Refund processed: %s amount_refunded=%s",
                event.payload.get("id"),
                event.amount_refunded,
            )
        return DispatchOutcome.applied(metadata.reference_kind, metadata.reference_id, None)
