"""Health check endpoint."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends

from restaurant_api.dependencies import get_settings
from restaurant_shared.config import WebhookSettings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Service health")
async def health(settings: WebhookSettings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "status": "healthy",
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }
