"""Unit tests for structured logging helpers."""

import logging

import pytest

from restaurant_shared.utils.logging import (
    NO_CORRELATION_ID,
    CorrelationIdFilter,
    StructuredFormatter,
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    get_logger,
    log_payment_operation,
    log_webhook_event,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def _clear_cid() -> None:
    clear_correlation_id()


class TestCorrelationId:
    def test_generated_when_absent(self) -> None:
        cid = set_correlation_id()
        assert cid
        assert get_correlation_id() == cid

    def test_reuses_incoming(self) -> None:
        assert set_correlation_id("req-123") == "req-123"

    def test_filter_stamps_record(self) -> None:
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
        CorrelationIdFilter().filter(record)
        assert record.correlation_id == NO_CORRELATION_ID  # type: ignore[attr-defined]

    def test_formatter_prefix(self) -> None:
        set_correlation_id("req-9")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "hello", None, None)
        assert StructuredFormatter("%(message)s").format(record) == "[req-9] hello"

    def test_get_logger_attaches_filter_once(self) -> None:
        logger = get_logger("restaurant.test")
        get_logger("restaurant.test")
        assert sum(isinstance(f, CorrelationIdFilter) for f in logger.filters) == 1

    def test_configure_logging_reuses_handlers(self) -> None:
        root = logging.getLogger()
        before = len(root.handlers)
        configure_logging("DEBUG")
        configure_logging("INFO")
        assert len(root.handlers) == max(before, 1)
        assert root.level == logging.INFO


class TestLogWebhookEvent:
    """Log level follows the dispatch result."""

    @pytest.mark.parametrize(
        ("result", "level"),
        [
            ("applied", logging.INFO),
            ("replay", logging.WARNING),
            ("unknown_reference", logging.WARNING),
            ("malformed", logging.WARNING),
            ("rejected", logging.WARNING),
            ("ignored", logging.DEBUG),
            ("error", logging.ERROR),
        ],
    )
    def test_level(self, caplog: pytest.LogCaptureFixture, result: str, level: int) -> None:
        logger = get_logger("restaurant.test.webhook")
        with caplog.at_level(logging.DEBUG, logger="restaurant.test.webhook"):
            log_webhook_event(logger, "checkout.session.completed", "evt_1", result=result)

        [record] = caplog.records
        assert record.levelno == level
        assert record.event_id == "evt_1"  # type: ignore[attr-defined]

    def test_context_in_message(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("restaurant.test.webhook")
        with caplog.at_level(logging.INFO, logger="restaurant.test.webhook"):
            log_webhook_event(
                logger,
                "payment_intent.succeeded",
                "evt_2",
                result="applied",
                reference_kind="booking",
                reference_id="BK-1",
                new_status=None,
            )

        message = caplog.records[0].getMessage()
        assert "reference_id=BK-1" in message
        assert "new_status" not in message


class TestLogPaymentOperation:
    def test_error_logged_at_error(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("restaurant.test.payments")
        with caplog.at_level(logging.INFO, logger="restaurant.test.payments"):
            log_payment_operation(logger, "create_deposit_intent", reference_id="BK-1", error="boom")

        assert caplog.records[0].levelno == logging.ERROR
        assert "error=boom" in caplog.records[0].getMessage()

    def test_success_logged_at_info(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("restaurant.test.payments")
        with caplog.at_level(logging.INFO, logger="restaurant.test.payments"):
            log_payment_operation(logger, "create_checkout_session", amount_cents=3700)

        assert caplog.records[0].levelno == logging.INFO
        assert "amount_cents=3700" in caplog.records[0].getMessage()
