"""API routes package.

Routers are organized by domain:

- health: Health check endpoints
- webhooks: Stripe webhook receiver
- payments: Deposit PaymentIntents and payment lookup
- orders: Cart checkout

All routers are registered in main.py with /api prefix.
"""

from restaurant_api.routes.health import router as health_router
from restaurant_api.routes.orders import router as orders_router
from restaurant_api.routes.payments import router as payments_router
from restaurant_api.routes.webhooks import router as webhooks_router

__all__ = [
    "health_router",
    "orders_router",
    "payments_router",
    "webhooks_router",
]
