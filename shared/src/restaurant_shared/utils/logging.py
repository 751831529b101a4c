"""Structured logging with correlation ID support.

Usage:
    from restaurant_shared.utils.logging import get_logger, set_correlation_id

    # In middleware:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    logger.info("Order marked as paid", extra={"reference_id": "ORD-123"})
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

NO_CORRELATION_ID = "no-correlation-id"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Webhook results that warrant a warning rather than info
_WARNING_RESULTS = {"replay", "unknown_reference", "malformed", "rejected"}
_DEBUG_RESULTS = {"ignored"}


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Incoming ID to reuse. A new UUID is generated if None.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the correlation ID for the current context, if any."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that stamps correlation_id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Prefixes each line with the correlation ID for grep-friendly output."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return f"[{record.correlation_id}] {super().format(record)}"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Install StructuredFormatter on the root logger.

    Safe to call more than once; existing root handlers are reformatted
    rather than duplicated.

    Args:
        level: Root log level name or number
    """
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        handler.setFormatter(StructuredFormatter(LOG_FORMAT))
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger with a CorrelationIdFilter attached
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def _format_context(title: str, context: dict[str, Any], skip: set[str]) -> str:
    parts = [title]
    for key, value in context.items():
        if key not in skip:
            parts.append(f"{key}={value}")
    return " | ".join(parts)


def log_payment_operation(
    logger: logging.Logger,
    operation: str,
    *,
    reference_kind: str | None = None,
    reference_id: str | None = None,
    amount_cents: int | None = None,
    status: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a gateway-facing payment operation with structured context.

    Args:
        logger: Logger instance
        operation: Operation name (e.g. "create_deposit_intent")
        reference_kind: booking, order or catering
        reference_id: Record the payment belongs to
        amount_cents: Amount in minor units
        status: Gateway status
        error: Error message; switches the record to ERROR level
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"operation": operation}
    if reference_kind:
        context["reference_kind"] = reference_kind
    if reference_id:
        context["reference_id"] = reference_id
    if amount_cents is not None:
        context["amount_cents"] = amount_cents
    if status:
        context["status"] = status
    if error:
        context["error"] = error
    context.update({k: v for k, v in extra.items() if v is not None})

    message = _format_context(f"Payment operation: {operation}", context, {"operation"})
    if error:
        logger.error(message, extra=context)
    else:
        logger.info(message, extra=context)


def log_webhook_event(
    logger: logging.Logger,
    event_type: str,
    event_id: str,
    *,
    result: str | None = None,
    reference_kind: str | None = None,
    reference_id: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a webhook event with structured context.

    Level follows the result: ``error`` logs at ERROR; replays, unknown
    references and malformed events at WARNING; ignored events at DEBUG;
    the rest at INFO.

    Args:
        logger: Logger instance
        event_type: Stripe event type
        event_id: Stripe event ID
        result: received, applied, replay, ignored, unknown_reference, ...
        reference_kind: booking, order or catering
        reference_id: Record the event pertains to
        error: Error message if processing failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"event_type": event_type, "event_id": event_id}
    if result:
        context["result"] = result
    if reference_kind:
        context["reference_kind"] = reference_kind
    if reference_id:
        context["reference_id"] = reference_id
    if error:
        context["error"] = error
    context.update({k: v for k, v in extra.items() if v is not None})

    message = _format_context(
        f"Webhook event: {event_type} ({event_id})",
        context,
        {"event_type", "event_id"},
    )
    if result == "error" or error:
        logger.error(message, extra=context)
    elif result in _WARNING_RESULTS:
        logger.warning(message, extra=context)
    elif result in _DEBUG_RESULTS:
        logger.debug(message, extra=context)
    else:
        logger.info(message, extra=context)
