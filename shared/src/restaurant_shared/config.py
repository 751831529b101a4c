"""Runtime settings read from environment variables.

Secrets (Stripe keys, webhook signing secret) are not here; they come from
SSM Parameter Store through StripeService.
"""

import os
from enum import Enum
from typing import Mapping

from pydantic import BaseModel, Field


class UnknownReferencePolicy(str, Enum):
    """What the webhook endpoint answers when an event names a missing record."""

    ACKNOWLEDGE = "acknowledge"  # 200 + warning log
    REJECT = "reject"  # non-2xx so the gateway retries


class WebhookSettings(BaseModel):
    """Settings for webhook intake, notifications and checkout."""

    environment: str = Field(default="dev", description="dev, staging or prod")
    tolerance_seconds: int = Field(
        default=300,
        ge=0,
        description="Maximum age of a signed webhook timestamp; 0 disables the check",
    )
    unknown_reference_policy: UnknownReferencePolicy = UnknownReferencePolicy.ACKNOWLEDGE
    ledger_retention_days: int = Field(default=90, ge=1)
    ses_from_email: str | None = None
    ses_region: str | None = None
    brand_name: str = "Afroflavours"
    client_url: str = "http://localhost:3000"
    payment_currency: str = "nzd"
    log_level: str = "INFO"
    notification_function_name: str | None = Field(
        default=None,
        description="Lambda invoked asynchronously to send emails; None sends in-process",
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WebhookSettings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (tests)

        Returns:
            WebhookSettings with defaults for anything unset
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        mapping = {
            "ENVIRONMENT": "environment",
            "WEBHOOK_TOLERANCE_SECONDS": "tolerance_seconds",
            "UNKNOWN_REFERENCE_POLICY": "unknown_reference_policy",
            "LEDGER_RETENTION_DAYS": "ledger_retention_days",
            "SES_FROM_EMAIL": "ses_from_email",
            "SES_REGION": "ses_region",
            "BRAND_NAME": "brand_name",
            "CLIENT_URL": "client_url",
            "PAYMENT_CURRENCY": "payment_currency",
            "LOG_LEVEL": "log_level",
            "NOTIFICATION_FUNCTION_NAME": "notification_function_name",
        }
        for var, field in mapping.items():
            value = env.get(var)
            if value:
                values[field] = value

        # On Lambda the function notifies by invoking itself asynchronously
        if "notification_function_name" not in values and env.get("AWS_LAMBDA_FUNCTION_NAME"):
            values["notification_function_name"] = env["AWS_LAMBDA_FUNCTION_NAME"]

        return cls.model_validate(values)
