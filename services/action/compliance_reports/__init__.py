"""Compliance Report Service native package exports."""

from services.action.compliance_reports.component import MANIFEST
from services.action.compliance_reports.config import ComplianceReportSettings
from services.action.compliance_reports.domain import (
    ComplianceReport,
    HealthStatus,
    ReportPeriod,
    ReportSummary,
    ReportVersion,
)
from services.action.compliance_reports.implementation import (
    DefaultComplianceReportService,
)
from services.action.compliance_reports.service import ComplianceReportService

__all__ = [
    "MANIFEST",
    "ComplianceReport",
    "ComplianceReportService",
    "ComplianceReportSettings",
    "DefaultComplianceReportService",
    "HealthStatus",
    "ReportPeriod",
    "ReportSummary",
    "ReportVersion",
]
