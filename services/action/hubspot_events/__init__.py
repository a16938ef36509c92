"""HubSpot Events Service native package exports."""

from services.action.hubspot_events.component import MANIFEST
from services.action.hubspot_events.config import HubspotEventsSettings
from services.action.hubspot_events.domain import IngestSummary, SubscriptionType
from services.action.hubspot_events.dto import HubspotEventDto, HubspotWebhookDto
from services.action.hubspot_events.implementation import DefaultHubspotEventsService
from services.action.hubspot_events.service import HubspotEventsService

__all__ = [
    "MANIFEST",
    "DefaultHubspotEventsService",
    "HubspotEventDto",
    "HubspotEventsService",
    "HubspotEventsSettings",
    "HubspotWebhookDto",
    "IngestSummary",
    "SubscriptionType",
]
