"""Registry of the report types the service knows how to fetch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from adreports.reportcenter import normalize
from adreports.reportcenter.models import ReportTemplate

DELIVERY_EVENTS = "summary_delivery_events"
VIEWABILITY_EVENTS = "summary_viewability_events"


@dataclass(frozen=True, slots=True)
class ReportDefinition:
    key: str
    template: ReportTemplate
    title: str
    event_table: str
    normalize: Callable[[Sequence[dict[str, Any]]], Any]
    option: str
    slug: str

    def filters(self, campaign_id: str | int, start_date: str, end_date: str) -> dict[str, str]:
        return {
            f"{self.event_table}.event_date": f"{start_date} to {end_date}",
            f"{self.event_table}.campaign_id": str(campaign_id),
        }


GEO_FENCE = ReportDefinition(
    key="geo_fence_performance",
    template=ReportTemplate.GEO_FENCE_BY_CAMPAIGN,
    title="Geo-Fence Performance",
    event_table=DELIVERY_EVENTS,
    normalize=normalize.geo_fence_report,
    option="include_geo_fence",
    slug="geo-fences",
)
LOCATION = ReportDefinition(
    key="location_performance",
    template=ReportTemplate.LOCATION_BY_CAMPAIGN,
    title="Location Performance",
    event_table=DELIVERY_EVENTS,
    normalize=normalize.location_report,
    option="include_location",
    slug="locations",
)
CONVERSIONS = ReportDefinition(
    key="conversions",
    template=ReportTemplate.CONVERSION_BY_CAMPAIGN,
    title="Conversion Performance",
    event_table=DELIVERY_EVENTS,
    normalize=normalize.conversion_report,
    option="include_conversions",
    slug="conversions",
)
DEVICES = ReportDefinition(
    key="device_breakdown",
    template=ReportTemplate.DEVICE_BY_CAMPAIGN,
    title="Device Breakdown",
    event_table=DELIVERY_EVENTS,
    normalize=normalize.device_report,
    option="include_devices",
    slug="devices",
)
VIEWABILITY = ReportDefinition(
    key="viewability",
    template=ReportTemplate.VIEWABILITY_BY_CAMPAIGN,
    title="Viewability Metrics",
    event_table=VIEWABILITY_EVENTS,
    normalize=normalize.viewability_report,
    option="include_viewability",
    slug="viewability",
)
DOMAINS = ReportDefinition(
    key="domain_performance",
    template=ReportTemplate.DOMAIN_BY_CAMPAIGN,
    title="Domain Performance",
    event_table=DELIVERY_EVENTS,
    normalize=normalize.domain_report,
    option="include_domains",
    slug="domains",
)
KEYWORDS = ReportDefinition(
    key="keyword_performance",
    template=ReportTemplate.KEYWORD_BY_CAMPAIGN,
    title="Keyword Performance",
    event_table=DELIVERY_EVENTS,
    normalize=normalize.keyword_report,
    option="include_keywords",
    slug="keywords",
)

REPORTS: dict[str, ReportDefinition] = {
    definition.key: definition
    for definition in (GEO_FENCE, LOCATION, CONVERSIONS, DEVICES, VIEWABILITY, DOMAINS, KEYWORDS)
}
REPORTS_BY_SLUG: dict[str, ReportDefinition] = {definition.slug: definition for definition in REPORTS.values()}
