"""HTTP-boundary DTOs for HubSpot webhook deliveries."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator
from pydantic.alias_generators import to_camel


class HubspotEventDto(BaseModel):
    """One webhook event; ``occurred_at`` is epoch milliseconds."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    object_id: StrictInt
    subscription_type: str
    portal_id: StrictInt
    app_id: StrictInt
    occurred_at: StrictInt

    @field_validator("subscription_type")
    @classmethod
    def _validate_subscription_type(cls, value: str) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError("must not be empty")
        return normalized


class HubspotWebhookDto(BaseModel):
    """One webhook delivery, which HubSpot batches as a list of events."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    events: tuple[HubspotEventDto, ...]
