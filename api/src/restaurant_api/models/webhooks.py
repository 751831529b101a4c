"""API models for the webhook endpoint."""

from pydantic import BaseModel, Field

from restaurant_shared.models.enums import DispatchResult


class WebhookAck(BaseModel):
    """Body returned for every acknowledged (2xx) webhook delivery."""

    received: bool = True
    event_id: str = Field(..., description="Gateway event ID", examples=["evt_1Abc"])
    outcome: DispatchResult = Field(
        ...,
        description="applied, replay, ignored or unknown_reference",
    )
