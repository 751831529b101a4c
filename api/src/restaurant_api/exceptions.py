"""FastAPI exception handlers converting RestaurantError to HTTP responses.

ErrorCode-to-HTTP status mapping:
- 400 Bad Request: webhook verification failures, malformed payloads, empty cart
- 404 Not Found: unknown payment or (reject policy) unknown webhook reference
- 500 Internal Server Error: storage failures while applying a webhook
- 502 Bad Gateway: Stripe API failures

Usage:
    from restaurant_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from restaurant_shared.models.errors import ErrorCode, RestaurantError

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    ErrorCode.MALFORMED_WEBHOOK_PAYLOAD: HTTP_400_BAD_REQUEST,
    ErrorCode.STALE_WEBHOOK_TIMESTAMP: HTTP_400_BAD_REQUEST,
    ErrorCode.UNKNOWN_REFERENCE: HTTP_404_NOT_FOUND,
    ErrorCode.WEBHOOK_PROCESSING_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.EMPTY_CART: HTTP_400_BAD_REQUEST,
    ErrorCode.STRIPE_API_ERROR: HTTP_502_BAD_GATEWAY,
    ErrorCode.PAYMENT_NOT_FOUND: HTTP_404_NOT_FOUND,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """HTTP status for an ErrorCode, 400 if not explicitly mapped."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def restaurant_error_handler(request: Request, exc: RestaurantError) -> JSONResponse:
    """Convert a RestaurantError into a JSON ErrorResponse.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The RestaurantError exception

    Returns:
        JSONResponse with error details and the mapped status code.
    """
    return JSONResponse(
        status_code=get_http_status_for_error(exc.code),
        content=exc.to_error_response().model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(RestaurantError, restaurant_error_handler)  # type: ignore[arg-type]
