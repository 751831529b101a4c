"""Standard error codes for the restaurant payments backend.

Every error surfaced over HTTP carries one of these codes together with a
human-readable message and a recovery hint for whoever operates the service.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Webhook intake (ERR_WEBHOOK_001-ERR_WEBHOOK_005)
    INVALID_WEBHOOK_SIGNATURE = "ERR_WEBHOOK_001"
    MALFORMED_WEBHOOK_PAYLOAD = "ERR_WEBHOOK_002"
    STALE_WEBHOOK_TIMESTAMP = "ERR_WEBHOOK_003"
    UNKNOWN_REFERENCE = "ERR_WEBHOOK_004"
    WEBHOOK_PROCESSING_FAILED = "ERR_WEBHOOK_005"

    # Checkout and deposits (ERR_PAYMENT_001-ERR_PAYMENT_003)
    EMPTY_CART = "ERR_PAYMENT_001"
    STRIPE_API_ERROR = "ERR_PAYMENT_002"
    PAYMENT_NOT_FOUND = "ERR_PAYMENT_003"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.MALFORMED_WEBHOOK_PAYLOAD: "Webhook payload could not be processed",
    ErrorCode.STALE_WEBHOOK_TIMESTAMP: "Webhook timestamp is outside the tolerance window",
    ErrorCode.UNKNOWN_REFERENCE: "Payment event references an unknown record",
    ErrorCode.WEBHOOK_PROCESSING_FAILED: "Webhook handler failed",
    ErrorCode.EMPTY_CART: "Cart is empty",
    ErrorCode.STRIPE_API_ERROR: "Payment gateway error occurred",
    ErrorCode.PAYMENT_NOT_FOUND: "Payment not found",
}

ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Verify webhook secret configuration",
    ErrorCode.MALFORMED_WEBHOOK_PAYLOAD: "Check the metadata attached when the payment was created",
    ErrorCode.STALE_WEBHOOK_TIMESTAMP: "Check server clock drift or resend the event from the dashboard",
    ErrorCode.UNKNOWN_REFERENCE: "The gateway will retry; confirm the record was created",
    ErrorCode.WEBHOOK_PROCESSING_FAILED: "The gateway will retry; check storage availability",
    ErrorCode.EMPTY_CART: "Add at least one item before checking out",
    ErrorCode.STRIPE_API_ERROR: "Try again or contact support",
    ErrorCode.PAYMENT_NOT_FOUND: "Verify the payment intent ID",
}


class ErrorResponse(BaseModel):
    """Standard error body returned by every failing endpoint."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, Any]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class RestaurantError(Exception):
    """Exception raised by request handling; converted to an HTTP response."""

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse body."""
        return ErrorResponse.from_code(self.code, self.details)
