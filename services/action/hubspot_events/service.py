"""Authoritative in-process Python API for HubSpot Events Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.hubspot.adapter import HubspotAdapter
from services.action.hubspot_events.domain import IngestSummary
from services.state.workflow_versions.service import WorkflowVersionService


class HubspotEventsService(ABC):
    """Public API turning HubSpot webhook events into workflow versions."""

    @abstractmethod
    def ingest_events(
        self, *, meta: EnvelopeMeta, events: Sequence[Mapping[str, Any]]
    ) -> Envelope[IngestSummary]:
        """Validate and apply one webhook delivery."""


def build_hubspot_events_service(
    *,
    settings: GuardSettings,
    workflow_versions: WorkflowVersionService,
    hubspot: HubspotAdapter,
) -> HubspotEventsService:
    """Build default HubSpot Events implementation from typed settings."""
    from services.action.hubspot_events.config import resolve_hubspot_events_settings
    from services.action.hubspot_events.implementation import (
        DefaultHubspotEventsService,
    )

    return DefaultHubspotEventsService(
        settings=resolve_hubspot_events_settings(settings),
        workflow_versions=workflow_versions,
        hubspot=hubspot,
    )
