"""FastAPI application for the restaurant payments API.

This package provides REST endpoints for:
- Stripe webhooks (order, booking and catering payment reconciliation)
- Deposit PaymentIntents and order checkout
- Health checks
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from restaurant_api.dependencies import get_notification_trigger, get_settings
from restaurant_api.exceptions import register_exception_handlers
from restaurant_api.middleware.correlation import CorrelationIdMiddleware
from restaurant_api.routes.health import router as health_router
from restaurant_api.routes.orders import router as orders_router
from restaurant_api.routes.payments import router as payments_router
from restaurant_api.routes.webhooks import router as webhooks_router
from restaurant_shared.services.notification_service import (
    NOTIFICATION_EVENT_KEY,
    handle_notification,
)
from restaurant_shared.utils.logging import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title="Restaurant Payments API",
    description="Stripe webhooks, deposits and checkout for the restaurant site",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url, "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

# /api/* is routed to API Gateway
app.include_router(health_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")
app.include_router(payments_router, prefix="/api")
app.include_router(orders_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Liveness check at /api/ping."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "restaurant-api",
    }


# Mangum wraps FastAPI for AWS Lambda + API Gateway
asgi_handler = Mangum(app, lifespan="off")


def handler(event: dict[str, Any], context: Any) -> Any:
    """Lambda entry point.

    API Gateway events go to the FastAPI app. Payloads queued by the webhook
    with LambdaNotificationQueue send their customer email here, in an
    invocation of their own.
    """
    if NOTIFICATION_EVENT_KEY in event:
        handle_notification(event, get_notification_trigger())
        return None
    return asgi_handler(event, context)


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        uvicorn.run(
            "restaurant_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["api/src", "shared/src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
