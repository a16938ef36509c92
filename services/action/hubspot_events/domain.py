"""Domain contracts for HubSpot Events Service payloads."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SubscriptionType(StrEnum):
    """Webhook subscription types that change monitored workflows."""

    CREATION = "workflow.creation"
    PROPERTY_CHANGE = "workflow.propertyChange"
    DELETION = "workflow.deletion"


class IngestSummary(BaseModel):
    """Per-delivery counts.

    ``processed``, ``skipped`` and ``failed`` count events. ``skipped`` covers
    unhandled subscription types and workflows nobody monitors. The remaining
    counts are per matching workflow, since several accounts may monitor the
    same HubSpot workflow.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    received: int = 0
    processed: int = 0
    versions_created: int = 0
    unchanged: int = 0
    deleted: int = 0
    skipped: int = 0
    failed: int = 0
