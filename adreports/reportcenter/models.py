"""Report Center data models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import Any, Mapping


class ReportTemplate(enum.IntEnum):
    """Template ids registered on the platform. Values must not change."""

    GEO_FENCE_BY_CAMPAIGN = 53617
    LOCATION_BY_CAMPAIGN = 53634
    CONVERSION_BY_CAMPAIGN = 26573
    DEVICE_BY_CAMPAIGN = 53593
    VIEWABILITY_BY_CAMPAIGN = 105322
    DOMAIN_BY_CAMPAIGN = 53602
    DOMAIN_VIDEO_INTERACTION = 177969
    KEYWORD_BY_CAMPAIGN = 53622


class SnapshotStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: Any) -> "SnapshotStatus":
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.PENDING



def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class _Record:
    __slots__ = ()

    def to_dict(self) -> dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(slots=True, frozen=True)
class ReportModelRef:
    organization_id: str
    template_id: int
    model_id: str | int


@dataclass(slots=True)
class SnapshotJob:
    organization_id: str
    report_model_id: str | int
    snapshot_id: str | int
    filters: Mapping[str, str]
    status: SnapshotStatus = SnapshotStatus.PENDING
    download_link: str | None = None

    @property
    def finished(self) -> bool:
        """A job is done once it has a download link or has failed; a bare "completed" is not."""
        return self.download_link is not None or self.status is SnapshotStatus.FAILED

    def advance(self, status: SnapshotStatus, download_link: str | None = None) -> None:
        if self.finished:
            return
        self.status = status
        if download_link:
            self.download_link = download_link
            self.status = SnapshotStatus.COMPLETED


@dataclass(slots=True)
class GeoFenceRecord(_Record):
    geo_fence_id: str | int
    geo_fence_name: str | None
    impressions: int
    clicks: int
    ctr: float
    spend: float


@dataclass(slots=True)
class LocationRecord(_Record):
    city: str | None
    metro: str | None
    region: str | None
    country: str | None
    impressions: int
    clicks: int
    ctr: float
    spend: float


@dataclass(slots=True)
class ConversionSummary(_Record):
    total_conversions: int
    view_through_conversions: int
    click_through_conversions: int
    raw: list[dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class DeviceRecord(_Record):
    device_type: str
    impressions: int
    clicks: int
    ctr: float
    spend: float


@dataclass(slots=True)
class ViewabilitySummary(_Record):
    viewability_rate: float
    measured_impressions: int
    viewable_impressions: int
    avg_view_time: float


@dataclass(slots=True)
class DomainRecord(_Record):
    domain: str
    impressions: int
    clicks: int
    ctr: float
    spend: float
    complete_rate: float


@dataclass(slots=True)
class KeywordRecord(_Record):
    keyword: str
    impressions: int
    clicks: int
    ctr: float
    spend: float
    ecpm: float
    ecpc: float


_OPTION_ALIASES = {
    "includeGeoFence": "include_geo_fence",
    "includeLocation": "include_location",
    "includeConversions": "include_conversions",
    "includeDevices": "include_devices",
    "includeViewability": "include_viewability",
    "includeDomains": "include_domains",
    "includeKeywords": "include_keywords",
}


@dataclass(slots=True)
class ReportOptions:
    include_geo_fence: bool = True
    include_location: bool = True
    include_conversions: bool = True
    include_devices: bool = True
    include_viewability: bool = True
    include_domains: bool = True
    include_keywords: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ReportOptions":
        """Accept camelCase or snake_case flags; unknown keys are ignored."""
        options = cls()
        for key, value in (data or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name in _OPTION_ALIASES.values() and value is not None:
                setattr(options, name, _flag(value))
        return options


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


@dataclass(slots=True)
class CompositeCampaignReport:
    geo_fence_performance: list[GeoFenceRecord] | None = None
    location_performance: list[LocationRecord] | None = None
    conversions: ConversionSummary | None = None
    device_breakdown: list[DeviceRecord] | None = None
    viewability: ViewabilitySummary | None = None
    domain_performance: list[DomainRecord] | None = None
    keyword_performance: list[KeywordRecord] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {_camel(f.name): serialize(getattr(self, f.name)) for f in fields(self)}


def serialize(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [serialize(item) for item in value]
    if isinstance(value, _Record):
        return value.to_dict()
    return value
