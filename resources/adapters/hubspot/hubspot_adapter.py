"""In-process HubSpot adapter implementation over the Automation API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from packages.guard_shared.http import (
    HttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)
from packages.guard_shared.logging import get_logger, public_api_instrumented
from resources.adapters.hubspot.adapter import (
    HubspotAdapter,
    HubspotAdapterDependencyError,
    HubspotAdapterInternalError,
    HubspotAdapterNotFoundError,
    HubspotWorkflowDefinition,
)
from resources.adapters.hubspot.component import RESOURCE_COMPONENT_ID
from resources.adapters.hubspot.config import HubspotAdapterSettings

_LOGGER = get_logger(__name__)
_NAME_KEYS = ("name", "workflowName", "label")


class HubspotAutomationAdapter(HubspotAdapter):
    """HubSpot adapter backed by ``GET /automation/v3/workflows/{id}``."""

    def __init__(
        self,
        *,
        settings: HubspotAdapterSettings,
        client: HttpClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or HttpClient(
            base_url=settings.base_url.rstrip("/"),
            timeout_seconds=settings.timeout_seconds,
            headers=_headers(settings.access_token),
        )

    def close(self) -> None:
        """Release the underlying HTTP client."""
        self._client.close()

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(RESOURCE_COMPONENT_ID),
        id_fields=("hubspot_id",),
    )
    def get_workflow(self, *, hubspot_id: str) -> HubspotWorkflowDefinition:
        """Fetch one workflow and strip volatile fields from its document."""
        normalized = hubspot_id.strip()
        if normalized == "":
            raise HubspotAdapterInternalError("hubspot_id is required")
        try:
            payload = self._client.get_json(f"/automation/v3/workflows/{normalized}")
        except HttpStatusError as exc:
            if exc.status_code == 404:
                raise HubspotAdapterNotFoundError(
                    f"hubspot workflow '{normalized}' not found"
                ) from exc
            raise HubspotAdapterDependencyError(
                f"hubspot request failed with status {exc.status_code}"
            ) from exc
        except HttpRequestError as exc:
            raise HubspotAdapterDependencyError("hubspot is unreachable") from exc
        except HttpJsonDecodeError as exc:
            raise HubspotAdapterInternalError(
                "hubspot workflow response is not valid JSON"
            ) from exc

        if not isinstance(payload, Mapping):
            raise HubspotAdapterInternalError(
                "hubspot workflow response must be an object"
            )
        return _definition(
            hubspot_id=normalized,
            payload=payload,
            volatile_fields=self._settings.volatile_fields,
        )


def _headers(access_token: str) -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def _definition(
    *,
    hubspot_id: str,
    payload: Mapping[str, Any],
    volatile_fields: tuple[str, ...],
) -> HubspotWorkflowDefinition:
    name = next(
        (payload[key] for key in _NAME_KEYS if isinstance(payload.get(key), str)),
        hubspot_id,
    )
    enabled = payload.get("enabled")
    if enabled is None:
        enabled = payload.get("status", "active") == "active"
    return HubspotWorkflowDefinition(
        hubspot_id=hubspot_id,
        name=name,
        enabled=bool(enabled),
        data={key: value for key, value in payload.items() if key not in volatile_fields},
    )
