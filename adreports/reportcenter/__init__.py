"""Report Center snapshot orchestration."""

from __future__ import annotations

from adreports.reportcenter.errors import (
    AuthenticationError,
    ConnectivityError,
    NotFoundError,
    RateLimitedError,
    RemoteApiError,
    ReportCenterError,
)
from adreports.reportcenter.models import CompositeCampaignReport, ReportOptions, ReportTemplate
from adreports.reportcenter.resolver import ReportModelResolver
from adreports.reportcenter.service import ReportCenterService
from adreports.reportcenter.snapshots import SnapshotRunner
from adreports.reportcenter.transport import BASE_URL, ReportCenterTransport

TEMPLATES = {template.name: template.value for template in ReportTemplate}

__all__ = [
    "AuthenticationError",
    "BASE_URL",
    "CompositeCampaignReport",
    "ConnectivityError",
    "NotFoundError",
    "RateLimitedError",
    "RemoteApiError",
    "ReportCenterError",
    "ReportCenterService",
    "ReportCenterTransport",
    "ReportModelResolver",
    "ReportOptions",
    "ReportTemplate",
    "SnapshotRunner",
    "TEMPLATES",
]
