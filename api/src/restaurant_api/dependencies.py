"""FastAPI dependency providers for shared services.

Providers are cached with @lru_cache so each service is built once per
process. Routes receive them through ``Depends``; tests replace them with
``app.dependency_overrides``.

Service Dependency Graph:
    WebhookSettings
    DynamoDBService (singleton via get_dynamodb_service)
        ├── IdempotencyLedger
        ├── PayableRepository
        └── TransitionDispatcher (+ ledger, repository)
    StripeService (SSM-backed)
    EventVerifier (tolerance from settings)
    NotificationTrigger
        └── SESEmailSender
    LambdaNotificationQueue (only when a notification function is configured)

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from restaurant_shared.config import WebhookSettings
from restaurant_shared.services.dynamodb import get_dynamodb_service
from restaurant_shared.services.event_verifier import EventVerifier
from restaurant_shared.services.idempotency_ledger import IdempotencyLedger
from restaurant_shared.services.notification_service import (
    LambdaNotificationQueue,
    NotificationTrigger,
    SESEmailSender,
)
from restaurant_shared.services.payable_repository import PayableRepository
from restaurant_shared.services.stripe_service import StripeService, get_stripe_service
from restaurant_shared.services.transition_dispatcher import TransitionDispatcher


@lru_cache
def get_settings() -> WebhookSettings:
    """Settings read from the environment."""
    return WebhookSettings.from_env()


def get_stripe() -> StripeService:
    """Shared StripeService instance."""
    return get_stripe_service()


@lru_cache
def get_event_verifier() -> EventVerifier:
    """EventVerifier using the configured tolerance window."""
    return EventVerifier(tolerance_seconds=get_settings().tolerance_seconds)


@lru_cache
def get_idempotency_ledger() -> IdempotencyLedger:
    return IdempotencyLedger(
        db=get_dynamodb_service(),
        retention_days=get_settings().ledger_retention_days,
    )


@lru_cache
def get_payable_repository() -> PayableRepository:
    return PayableRepository(db=get_dynamodb_service())


@lru_cache
def get_transition_dispatcher() -> TransitionDispatcher:
    """TransitionDispatcher wired to the shared ledger and repository."""
    return TransitionDispatcher(
        db=get_dynamodb_service(),
        ledger=get_idempotency_ledger(),
        repository=get_payable_repository(),
    )


@lru_cache
def get_notification_trigger() -> NotificationTrigger:
    """NotificationTrigger sending through SES."""
    settings = get_settings()
    return NotificationTrigger(
        sender=SESEmailSender(settings.ses_from_email, settings.ses_region),
        brand_name=settings.brand_name,
    )


@lru_cache
def get_notification_queue() -> LambdaNotificationQueue | None:
    """Async notification queue, or None to notify in-process."""
    function_name = get_settings().notification_function_name
    if not function_name:
        return None
    return LambdaNotificationQueue(function_name)


def reset_services() -> None:
    """Clear all cached service instances and the DynamoDB singleton.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    from restaurant_shared.services.dynamodb import reset_dynamodb_service
    from restaurant_shared.services.ssm_service import get_ssm_service

    get_settings.cache_clear()
    get_event_verifier.cache_clear()
    get_idempotency_ledger.cache_clear()
    get_payable_repository.cache_clear()
    get_transition_dispatcher.cache_clear()
    get_notification_trigger.cache_clear()
    get_notification_queue.cache_clear()
    get_stripe_service.cache_clear()
    get_ssm_service.cache_clear()

    reset_dynamodb_service()
