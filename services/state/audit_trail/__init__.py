"""Audit Trail Service native package exports."""

from packages.guard_shared.envelope import Envelope, EnvelopeKind, EnvelopeMeta
from packages.guard_shared.errors import ErrorCategory, ErrorDetail
from services.state.audit_trail.component import MANIFEST
from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.domain import AuditAction, AuditEntry, HealthStatus
from services.state.audit_trail.implementation import DefaultAuditTrailService
from services.state.audit_trail.service import AuditTrailService

__all__ = [
    "MANIFEST",
    "AuditAction",
    "AuditEntry",
    "AuditTrailService",
    "AuditTrailSettings",
    "DefaultAuditTrailService",
    "HealthStatus",
    "Envelope",
    "EnvelopeKind",
    "EnvelopeMeta",
    "ErrorCategory",
    "ErrorDetail",
]
