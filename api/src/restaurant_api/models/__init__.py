"""API-specific request/response models.

Domain models (PaymentEvent, DispatchOutcome, ErrorResponse) live in
restaurant_shared.models and are reused here where appropriate.

Modules:
- webhooks: Webhook acknowledgement body
- payments: Deposit PaymentIntent requests, payment lookups and refunds
- orders: Cart checkout and order listing
"""

__all__: list[str] = []
