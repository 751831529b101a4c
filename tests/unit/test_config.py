"""Unit tests for WebhookSettings."""

import pytest
from pydantic import ValidationError

from restaurant_shared.config import UnknownReferencePolicy, WebhookSettings


class TestWebhookSettings:
    def test_defaults(self) -> None:
        settings = WebhookSettings.from_env({})

        assert settings.tolerance_seconds == 300
        assert settings.unknown_reference_policy == UnknownReferencePolicy.ACKNOWLEDGE
        assert settings.ledger_retention_days == 90
        assert settings.brand_name == "Afroflavours"
        assert settings.payment_currency == "nzd"

    def test_reads_environment(self) -> None:
        settings = WebhookSettings.from_env(
            {
                "ENVIRONMENT": "prod",
                "WEBHOOK_TOLERANCE_SECONDS": "60",
                "UNKNOWN_REFERENCE_POLICY": "reject",
                "SES_FROM_EMAIL": "hello@example.com",
            }
        )

        assert settings.environment == "prod"
        assert settings.tolerance_seconds == 60
        assert settings.unknown_reference_policy == UnknownReferencePolicy.REJECT
        assert settings.ses_from_email == "hello@example.com"

    def test_empty_values_fall_back_to_defaults(self) -> None:
        assert WebhookSettings.from_env({"BRAND_NAME": ""}).brand_name == "Afroflavours"

    @pytest.mark.parametrize(
        "environ",
        [
            {"WEBHOOK_TOLERANCE_SECONDS": "-1"},
            {"WEBHOOK_TOLERANCE_SECONDS": "soon"},
            {"UNKNOWN_REFERENCE_POLICY": "shrug"},
            {"LEDGER_RETENTION_DAYS": "0"},
        ],
    )
    def test_invalid_values(self, environ: dict[str, str]) -> None:
        with pytest.raises(ValidationError):
            WebhookSettings.from_env(environ)


class TestNotificationFunction:
    def test_unset_outside_lambda(self) -> None:
        assert WebhookSettings.from_env({}).notification_function_name is None

    def test_defaults_to_running_lambda(self) -> None:
        settings = WebhookSettings.from_env({"AWS_LAMBDA_FUNCTION_NAME": "restaurant-api-prod"})

        assert settings.notification_function_name == "restaurant-api-prod"

    def test_explicit_function_wins(self) -> None:
        settings = WebhookSettings.from_env(
            {
                "AWS_LAMBDA_FUNCTION_NAME": "restaurant-api-prod",
                "NOTIFICATION_FUNCTION_NAME": "restaurant-notifier-prod",
            }
        )

        assert settings.notification_function_name == "restaurant-notifier-prod"
