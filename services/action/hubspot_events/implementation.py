"""Concrete HubSpot Events Service implementation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from packages.guard_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.guard_shared.errors import (
    ErrorDetail,
    codes,
    dependency_error,
    internal_error,
    validation_error,
)
from packages.guard_shared.logging import get_logger, public_api_instrumented
from resources.adapters.hubspot.adapter import (
    HubspotAdapter,
    HubspotAdapterDependencyError,
    HubspotAdapterError,
    HubspotAdapterNotFoundError,
    HubspotWorkflowDefinition,
)
from services.action.hubspot_events.component import SERVICE_COMPONENT_ID
from services.action.hubspot_events.config import HubspotEventsSettings
from services.action.hubspot_events.domain import IngestSummary, SubscriptionType
from services.action.hubspot_events.dto import HubspotEventDto, HubspotWebhookDto
from services.action.hubspot_events.service import HubspotEventsService
from services.state.workflow_versions.changes import documents_equal
from services.state.workflow_versions.domain import Workflow
from services.state.workflow_versions.service import WorkflowVersionService

_LOGGER = get_logger(__name__)


class _Tally:
    """Mutable counters folded into one ``IngestSummary``."""

    def __init__(self, received: int) -> None:
        self.received = received
        self.processed = 0
        self.versions_created = 0
        self.unchanged = 0
        self.deleted = 0
        self.skipped = 0
        self.failed = 0

    def summary(self) -> IngestSummary:
        return IngestSummary(**vars(self))


class DefaultHubspotEventsService(HubspotEventsService):
    """Apply webhook events to monitored workflows, one event at a time.

    A failing event never aborts the delivery; its errors are collected and
    returned alongside the counts.
    """

    def __init__(
        self,
        *,
        settings: HubspotEventsSettings,
        workflow_versions: WorkflowVersionService,
        hubspot: HubspotAdapter,
    ) -> None:
        self._settings = settings
        self._workflow_versions = workflow_versions
        self._hubspot = hubspot

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def ingest_events(
        self, *, meta: EnvelopeMeta, events: Sequence[Mapping[str, Any]]
    ) -> Envelope[IngestSummary]:
        """Create versions for changed workflows and deactivate deleted ones."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return failure(
                meta=meta,
                errors=[validation_error(str(exc), code=codes.INVALID_ARGUMENT)],
            )
        try:
            request = HubspotWebhookDto.model_validate({"events": list(events)})
        except ValidationError as exc:
            return failure(
                meta=meta,
                errors=[
                    validation_error(
                        f"request validation failed: {err['msg']}",
                        code=codes.INVALID_ARGUMENT,
                        metadata={"field": ".".join(str(p) for p in err["loc"])},
                    )
                    for err in exc.errors()
                ],
            )

        tally = _Tally(received=len(request.events))
        errors: list[ErrorDetail] = []
        for event in request.events:
            event_errors = self._apply(meta=meta, event=event, tally=tally)
            if event_errors:
                tally.failed += 1
                errors.extend(event_errors)

        summary = tally.summary()
        _LOGGER.info(
            "hubspot delivery applied: received=%d processed=%d versions_created=%d "
            "skipped=%d failed=%d",
            summary.received,
            summary.processed,
            summary.versions_created,
            summary.skipped,
            summary.failed,
        )
        if errors:
            return failure(meta=meta, errors=errors, payload=summary)
        return success(meta=meta, payload=summary)

    def _apply(
        self, *, meta: EnvelopeMeta, event: HubspotEventDto, tally: _Tally
    ) -> list[ErrorDetail]:
        try:
            subscription = SubscriptionType(event.subscription_type)
        except ValueError:
            _LOGGER.info(
                "skipping unhandled hubspot event: subscription_type=%s object_id=%d",
                event.subscription_type,
                event.object_id,
            )
            tally.skipped += 1
            return []

        hubspot_id = str(event.object_id)
        matches = self._workflow_versions.find_workflow_by_hubspot_id(
            meta=meta, hubspot_id=hubspot_id
        )
        if not matches.ok or matches.payload is None:
            return list(matches.errors)
        workflows: list[Workflow] = matches.payload.value
        if not workflows:
            tally.skipped += 1
            return []

        if subscription == SubscriptionType.DELETION:
            errors = self._delete(meta=meta, workflows=workflows, tally=tally)
        else:
            errors = self._snapshot(
                meta=meta,
                hubspot_id=hubspot_id,
                subscription=subscription,
                workflows=workflows,
                tally=tally,
            )
        if not errors:
            tally.processed += 1
        return errors

    def _delete(
        self, *, meta: EnvelopeMeta, workflows: list[Workflow], tally: _Tally
    ) -> list[ErrorDetail]:
        errors: list[ErrorDetail] = []
        for workflow in workflows:
            deleted = self._workflow_versions.delete_workflow(
                meta=meta, workflow_id=workflow.id
            )
            if deleted.ok:
                tally.deleted += 1
            else:
                errors.extend(deleted.errors)
        return errors

    def _snapshot(
        self,
        *,
        meta: EnvelopeMeta,
        hubspot_id: str,
        subscription: SubscriptionType,
        workflows: list[Workflow],
        tally: _Tally,
    ) -> list[ErrorDetail]:
        fetched = self._fetch(hubspot_id=hubspot_id)
        if isinstance(fetched, ErrorDetail):
            return [fetched]
        if fetched is None:
            tally.unchanged += len(workflows)
            return []

        errors: list[ErrorDetail] = []
        for workflow in workflows:
            head = self._workflow_versions.get_latest_version(
                meta=meta, workflow_id=workflow.id
            )
            if head.ok and head.payload is not None:
                if documents_equal(head.payload.value.data, fetched.data):
                    tally.unchanged += 1
                    continue
            elif any(error.code != codes.VERSION_NOT_FOUND for error in head.errors):
                errors.extend(head.errors)
                continue

            created = self._workflow_versions.create_version(
                meta=meta,
                workflow_id=workflow.id,
                snapshot_type=self._settings.snapshot_type,
                created_by=self._settings.system_actor,
                data=fetched.data,
                description=f"Captured from HubSpot {subscription.value} event",
            )
            if created.ok:
                tally.versions_created += 1
            else:
                errors.extend(created.errors)
        return errors

    def _fetch(
        self, *, hubspot_id: str
    ) -> HubspotWorkflowDefinition | ErrorDetail | None:
        """Return the definition, ``None`` when HubSpot no longer has it."""
        try:
            return self._hubspot.get_workflow(hubspot_id=hubspot_id)
        except HubspotAdapterNotFoundError:
            _LOGGER.info("hubspot workflow vanished before fetch: hubspot_id=%s", hubspot_id)
            return None
        except HubspotAdapterDependencyError as exc:
            _LOGGER.warning(
                "hubspot fetch failed: hubspot_id=%s exception_type=%s",
                hubspot_id,
                type(exc).__name__,
                exc_info=exc,
            )
            return dependency_error(
                f"hubspot workflow fetch failed: {exc}",
                code=codes.DEPENDENCY_UNAVAILABLE,
                metadata={"hubspot_id": hubspot_id},
            )
        except HubspotAdapterError as exc:
            _LOGGER.warning(
                "hubspot fetch returned unusable payload: hubspot_id=%s",
                hubspot_id,
                exc_info=exc,
            )
            return internal_error(
                f"hubspot workflow payload invalid: {exc}",
                metadata={"hubspot_id": hubspot_id},
            )
