"""Report Center service: per-report fetches and the campaign aggregator."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import TYPE_CHECKING, Any, Mapping

from sqlalchemy.engine import Engine

from adreports.reportcenter.cache import MemoryModelCache, SqlModelCache
from adreports.reportcenter.errors import AuthenticationError
from adreports.reportcenter.models import (
    CompositeCampaignReport,
    ConversionSummary,
    DeviceRecord,
    DomainRecord,
    GeoFenceRecord,
    KeywordRecord,
    LocationRecord,
    ReportOptions,
    ViewabilitySummary,
)
from adreports.reportcenter.reports import REPORTS, ReportDefinition
from adreports.reportcenter.resolver import ReportModelResolver
from adreports.reportcenter.snapshots import SnapshotRunner
from adreports.reportcenter.transport import ReportCenterTransport
from adreports.utils.dates import report_date_range

if TYPE_CHECKING:
    from adreports.config import ReportCenterSettings

logger = logging.getLogger(__name__)

DateLike = str | date


class ReportCenterService:
    """Fetches normalized Report Center data for campaigns.

    Each report runs model resolution, one snapshot and normalization in
    sequence. Per-report methods return None when the report could not be
    produced; only rejected credentials and invalid arguments raise.
    """

    def __init__(
        self,
        transport: ReportCenterTransport,
        *,
        resolver: ReportModelResolver | None = None,
        runner: SnapshotRunner | None = None,
    ) -> None:
        self.transport = transport
        self.resolver = resolver or ReportModelResolver(transport)
        self.runner = runner or SnapshotRunner(transport)

    @classmethod
    def from_settings(cls, settings: ReportCenterSettings, *, engine: Engine | None = None) -> "ReportCenterService":
        settings.require_credentials()
        transport = ReportCenterTransport(
            settings.app_key,
            settings.user_key,
            base_url=settings.base_url,
            timeout=settings.http_timeout,
        )
        cache = SqlModelCache(engine) if engine is not None else MemoryModelCache()
        return cls(
            transport,
            resolver=ReportModelResolver(transport, cache),
            runner=SnapshotRunner(transport, poll_interval=settings.poll_interval, max_wait=settings.max_wait),
        )

    async def close(self) -> None:
        await self.transport.close()

    async def list_templates(self, organization_id: str | int) -> list[dict[str, Any]]:
        return await self.resolver.list_templates(organization_id)

    async def fetch_report(
        self,
        report: str | ReportDefinition,
        organization_id: str | int,
        campaign_id: str | int,
        start_date: DateLike,
        end_date: DateLike,
    ) -> Any:
        definition = report if isinstance(report, ReportDefinition) else REPORTS[report]
        _require(organization_id, campaign_id)
        start, end = report_date_range(start_date, end_date)
        model_id = await self.resolver.resolve(organization_id, definition.template, definition.title)
        if model_id is None:
            return None
        rows = await self.runner.run_and_wait(
            organization_id, model_id, definition.filters(campaign_id, start, end)
        )
        if rows is None:
            return None
        result = definition.normalize(rows)
        logger.info(
            "%s for campaign %s (org %s): %s rows", definition.title, campaign_id, organization_id, len(rows)
        )
        return result

    async def get_geo_fence_performance(self, organization_id, campaign_id, start_date, end_date) -> list[GeoFenceRecord] | None:
        return await self.fetch_report("geo_fence_performance", organization_id, campaign_id, start_date, end_date)

    async def get_location_performance(self, organization_id, campaign_id, start_date, end_date) -> list[LocationRecord] | None:
        return await self.fetch_report("location_performance", organization_id, campaign_id, start_date, end_date)

    async def get_conversion_data(self, organization_id, campaign_id, start_date, end_date) -> ConversionSummary | None:
        return await self.fetch_report("conversions", organization_id, campaign_id, start_date, end_date)

    get_conversions = get_conversion_data

    async def get_device_breakdown(self, organization_id, campaign_id, start_date, end_date) -> list[DeviceRecord] | None:
        return await self.fetch_report("device_breakdown", organization_id, campaign_id, start_date, end_date)

    async def get_viewability_metrics(self, organization_id, campaign_id, start_date, end_date) -> ViewabilitySummary | None:
        return await self.fetch_report("viewability", organization_id, campaign_id, start_date, end_date)

    async def get_domain_performance(self, organization_id, campaign_id, start_date, end_date) -> list[DomainRecord] | None:
        return await self.fetch_report("domain_performance", organization_id, campaign_id, start_date, end_date)

    async def get_keyword_performance(self, organization_id, campaign_id, start_date, end_date) -> list[KeywordRecord] | None:
        return await self.fetch_report("keyword_performance", organization_id, campaign_id, start_date, end_date)

    async def get_enhanced_campaign_data(
        self,
        organization_id: str | int,
        campaign_id: str | int,
        start_date: DateLike,
        end_date: DateLike,
        options: ReportOptions | Mapping[str, Any] | None = None,
    ) -> CompositeCampaignReport:
        """Fetch every enabled report concurrently; failed reports come back as None."""
        if not isinstance(options, ReportOptions):
            options = ReportOptions.from_mapping(options)
        _require(organization_id, campaign_id)
        start, end = report_date_range(start_date, end_date)

        enabled = [definition for definition in REPORTS.values() if getattr(options, definition.option)]
        tasks = {
            definition.key: asyncio.create_task(
                self._settle(definition, organization_id, campaign_id, start, end),
                name=f"report-center:{definition.key}",
            )
            for definition in enabled
        }
        try:
            await asyncio.gather(*tasks.values())
        except BaseException:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise
        return CompositeCampaignReport(**{key: task.result() for key, task in tasks.items()})

    async def _settle(
        self, definition: ReportDefinition, organization_id: str | int, campaign_id: str | int, start: str, end: str
    ) -> Any:
        try:
            return await self.fetch_report(definition, organization_id, campaign_id, start, end)
        except AuthenticationError:
            raise
        except Exception:
            logger.exception("%s failed for campaign %s (org %s)", definition.title, campaign_id, organization_id)
            return None


def _require(organization_id: str | int, campaign_id: str | int) -> None:
    if organization_id is None or str(organization_id).strip() == "":
        raise ValueError("organization_id is required")
    if campaign_id is None or str(campaign_id).strip() == "":
        raise ValueError("campaign_id is required")
