"""Transport-agnostic HubSpot adapter contracts and DTOs."""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict


class HubspotAdapterError(Exception):
    """Base exception for adapter-level failures."""


class HubspotAdapterDependencyError(HubspotAdapterError):
    """Dependency-level failure (network/upstream unavailable)."""


class HubspotAdapterInternalError(HubspotAdapterError):
    """Internal adapter failure (schema/mapping/contract mismatch)."""


class HubspotAdapterNotFoundError(HubspotAdapterError):
    """Workflow does not exist in the HubSpot portal."""


class HubspotWorkflowDefinition(BaseModel):
    """Current definition of one HubSpot workflow.

    ``data`` is the workflow document with volatile bookkeeping fields removed,
    so two fetches of an unchanged workflow compare equal.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    hubspot_id: str
    name: str
    enabled: bool
    data: dict[str, Any]


class HubspotAdapter(Protocol):
    """Protocol for HubSpot-backed workflow definition lookups."""

    def get_workflow(self, *, hubspot_id: str) -> HubspotWorkflowDefinition:
        """Fetch the current definition of one workflow."""
