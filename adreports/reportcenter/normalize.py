"""Normalize raw Report Center rows into typed records.

Field names differ between templates and between API versions. Every field is
looked up through an ordered tuple of candidate keys; the first key holding a
non-empty value wins. The orderings below mirror what the platform has been
observed to return and should not be reordered.

A numeric 0 is a present value for metrics. Identifying dimensions are
stricter: a geo-fence id of 0 marks an unattributed row and the row is dropped.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from adreports.reportcenter.models import (
    ConversionSummary,
    DeviceRecord,
    DomainRecord,
    GeoFenceRecord,
    KeywordRecord,
    LocationRecord,
    ViewabilitySummary,
)

Row = Mapping[str, Any]
T = TypeVar("T")

IMPRESSIONS = ("summary_delivery_events.impressions",)
CLICKS = ("summary_delivery_events.clicks",)
CTR = ("summary_delivery_events.ctr",)
ECPM = ("summary_delivery_events.ecpm",)
ECPC = ("summary_delivery_events.ecpc",)
SPEND = ("summary_delivery_events.spend", "summary_delivery_events.total_cust")
# total_cust is the populated spend column on keyword reports
KEYWORD_SPEND = ("summary_delivery_events.total_cust", "summary_delivery_events.spend")

GEO_FENCE_ID = ("summary_delivery_events.target_geo_fence_id",)
GEO_FENCE_NAME = ("summary_delivery_events.target_geo_fence_name",)

CITY = ("summary_delivery_events.location_city_name",)
METRO = ("summary_delivery_events.location_dma_name",)
REGION = ("summary_delivery_events.location_region_name",)
COUNTRY = ("summary_delivery_events.location_country_name",)

DEVICE_TYPE = ("dim_device_type.device_type_name", "summary_delivery_events.device_type")

DOMAIN = (
    "summary_delivery_events.domain_reporting_name",
    "summary_delivery_events.domain",
    "dim_domain.domain_name",
    "dim_domain.domain_reporting_name",
)
VIDEO_COMPLETE_RATE = ("summary_delivery_events.video_complete_rate", "summary_delivery_events.vcr")

KEYWORD = (
    "summary_delivery_events.keyword_reporting_name",
    "dim_keyword.keyword",
    "summary_delivery_events.keyword",
    "keyword",
)

CONVERSIONS = ("summary_delivery_events.conversions",)
VIEW_CONVERSIONS = ("summary_delivery_events.view_conversions",)
CLICK_CONVERSIONS = ("summary_delivery_events.click_conversions",)

VIEWABILITY_RATE = ("summary_viewability_events.viewability_rate",)
MEASURED_IMPRESSIONS = ("summary_viewability_events.measured_impressions",)
VIEWABLE_IMPRESSIONS = ("summary_viewability_events.viewable_impressions",)
AVG_VIEW_TIME = ("summary_viewability_events.avg_view_time",)


def first_value(row: Row, candidates: Sequence[str]) -> Any:
    for key in candidates:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def to_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def ctr_for(row: Row, impressions: int, clicks: int) -> float:
    reported = first_value(row, CTR)
    if reported is not None:
        return to_float(reported)
    if impressions <= 0:
        return 0.0
    return clicks / impressions * 100


def reconstructed_spend(row: Row, impressions: int, spend_fields: Sequence[str] = SPEND) -> float:
    """Reported spend, else (impressions / 1000) * eCPM.

    Location and keyword templates do not always expose spend; eCPM is the
    only cost column they reliably carry.
    """
    reported = first_value(row, spend_fields)
    if reported is not None:
        return to_float(reported)
    return (impressions / 1000) * to_float(first_value(row, ECPM))


def _delivery(row: Row) -> tuple[int, int, float]:
    impressions = to_int(first_value(row, IMPRESSIONS))
    clicks = to_int(first_value(row, CLICKS))
    return impressions, clicks, ctr_for(row, impressions, clicks)


def normalize_geo_fence(row: Row) -> GeoFenceRecord | None:
    geo_fence_id = first_value(row, GEO_FENCE_ID)
    if geo_fence_id is None or geo_fence_id == 0:
        return None
    impressions, clicks, ctr = _delivery(row)
    return GeoFenceRecord(
        geo_fence_id=geo_fence_id,
        geo_fence_name=first_value(row, GEO_FENCE_NAME),
        impressions=impressions,
        clicks=clicks,
        ctr=ctr,
        spend=to_float(first_value(row, SPEND)),
    )


def normalize_location(row: Row) -> LocationRecord | None:
    city = first_value(row, CITY)
    metro = first_value(row, METRO)
    region = first_value(row, REGION)
    if city is None and metro is None and region is None:
        return None
    impressions, clicks, ctr = _delivery(row)
    return LocationRecord(
        city=city,
        metro=metro,
        region=region,
        country=first_value(row, COUNTRY),
        impressions=impressions,
        clicks=clicks,
        ctr=ctr,
        spend=reconstructed_spend(row, impressions),
    )


def normalize_device(row: Row) -> DeviceRecord | None:
    device_type = first_value(row, DEVICE_TYPE)
    if device_type is None:
        return None
    impressions, clicks, ctr = _delivery(row)
    return DeviceRecord(
        device_type=str(device_type),
        impressions=impressions,
        clicks=clicks,
        ctr=ctr,
        spend=to_float(first_value(row, SPEND)),
    )


def normalize_domain(row: Row) -> DomainRecord | None:
    domain = first_value(row, DOMAIN)
    if domain is None:
        return None
    impressions, clicks, ctr = _delivery(row)
    return DomainRecord(
        domain=str(domain),
        impressions=impressions,
        clicks=clicks,
        ctr=ctr,
        spend=to_float(first_value(row, SPEND)),
        complete_rate=to_float(first_value(row, VIDEO_COMPLETE_RATE)) * 100,
    )


def normalize_keyword(row: Row) -> KeywordRecord | None:
    keyword = first_value(row, KEYWORD)
    if keyword is None:
        return None
    impressions, clicks, ctr = _delivery(row)
    return KeywordRecord(
        keyword=str(keyword),
        impressions=impressions,
        clicks=clicks,
        ctr=ctr,
        spend=reconstructed_spend(row, impressions, KEYWORD_SPEND),
        ecpm=to_float(first_value(row, ECPM)),
        ecpc=to_float(first_value(row, ECPC)),
    )


def normalize_rows(rows: Iterable[Row], normalizer: Callable[[Row], T | None]) -> list[T]:
    records = (normalizer(row) for row in rows if isinstance(row, Mapping))
    return [record for record in records if record is not None]


def _by_impressions(records: list[T]) -> list[T]:
    return sorted(records, key=lambda record: record.impressions, reverse=True)


def geo_fence_report(rows: Iterable[Row]) -> list[GeoFenceRecord]:
    return normalize_rows(rows, normalize_geo_fence)


def location_report(rows: Iterable[Row]) -> list[LocationRecord]:
    return normalize_rows(rows, normalize_location)


def device_report(rows: Iterable[Row]) -> list[DeviceRecord]:
    return normalize_rows(rows, normalize_device)


def domain_report(rows: Iterable[Row]) -> list[DomainRecord]:
    return _by_impressions(normalize_rows(rows, normalize_domain))


def keyword_report(rows: Iterable[Row]) -> list[KeywordRecord]:
    return _by_impressions(normalize_rows(rows, normalize_keyword))


def conversion_report(rows: Iterable[Row]) -> ConversionSummary:
    raw = [dict(row) for row in rows if isinstance(row, Mapping)]
    return ConversionSummary(
        total_conversions=sum(to_int(first_value(row, CONVERSIONS)) for row in raw),
        view_through_conversions=sum(to_int(first_value(row, VIEW_CONVERSIONS)) for row in raw),
        click_through_conversions=sum(to_int(first_value(row, CLICK_CONVERSIONS)) for row in raw),
        raw=raw,
    )


def viewability_report(rows: Sequence[Row]) -> ViewabilitySummary | None:
    # the template yields a single aggregate row per query
    if not rows or not isinstance(rows[0], Mapping):
        return None
    row = rows[0]
    return ViewabilitySummary(
        viewability_rate=to_float(first_value(row, VIEWABILITY_RATE)),
        measured_impressions=to_int(first_value(row, MEASURED_IMPRESSIONS)),
        viewable_impressions=to_int(first_value(row, VIEWABLE_IMPRESSIONS)),
        avg_view_time=to_float(first_value(row, AVG_VIEW_TIME)),
    )
