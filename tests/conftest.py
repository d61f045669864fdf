import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from adreports.db.schema import metadata
from adreports.reportcenter.errors import RemoteApiError
from adreports.reportcenter.models import ReportTemplate
from adreports.reportcenter.resolver import ReportModelResolver
from adreports.reportcenter.service import ReportCenterService
from adreports.reportcenter.snapshots import SnapshotRunner
from adreports.reportcenter.transport import BASE_URL

SAMPLE_ROWS = {
    ReportTemplate.GEO_FENCE_BY_CAMPAIGN: [
        {
            "summary_delivery_events.target_geo_fence_id": 901,
            "summary_delivery_events.target_geo_fence_name": "Main St Dealership",
            "summary_delivery_events.impressions": "1200",
            "summary_delivery_events.clicks": "6",
            "summary_delivery_events.ctr": "0.5",
            "summary_delivery_events.spend": "14.40",
        },
    ],
    ReportTemplate.LOCATION_BY_CAMPAIGN: [
        {
            "summary_delivery_events.location_city_name": "Tulsa",
            "summary_delivery_events.location_dma_name": "Tulsa",
            "summary_delivery_events.location_region_name": "Oklahoma",
            "summary_delivery_events.location_country_name": "United States",
            "summary_delivery_events.impressions": "2000",
            "summary_delivery_events.clicks": "4",
            "summary_delivery_events.ecpm": "5.0",
        },
    ],
    ReportTemplate.CONVERSION_BY_CAMPAIGN: [
        {"summary_delivery_events.conversions": "3", "summary_delivery_events.view_conversions": "2"},
        {"summary_delivery_events.conversions": "5", "summary_delivery_events.click_conversions": "5"},
    ],
    ReportTemplate.DEVICE_BY_CAMPAIGN: [
        {"dim_device_type.device_type_name": "Mobile", "summary_delivery_events.impressions": "800"},
        {"summary_delivery_events.device_type": "Desktop", "summary_delivery_events.impressions": "300"},
    ],
    ReportTemplate.VIEWABILITY_BY_CAMPAIGN: [
        {
            "summary_viewability_events.viewability_rate": "0.72",
            "summary_viewability_events.measured_impressions": "1000",
            "summary_viewability_events.viewable_impressions": "720",
            "summary_viewability_events.avg_view_time": "11.5",
        },
    ],
    ReportTemplate.DOMAIN_BY_CAMPAIGN: [
        {"summary_delivery_events.domain": "weather.com", "summary_delivery_events.impressions": "50"},
        {"dim_domain.domain_name": "espn.com", "summary_delivery_events.impressions": "500"},
    ],
    ReportTemplate.KEYWORD_BY_CAMPAIGN: [
        {
            "summary_delivery_events.keyword_reporting_name": "used trucks",
            "summary_delivery_events.impressions": "2000",
            "summary_delivery_events.ecpm": "5.0",
        },
    ],
}


class FakeReportCenter:
    """In-process stand-in for ReportCenterTransport.

    Report models are named ``model-<template>``; snapshots become ready on
    the first poll after ``delays[template]`` seconds.
    """

    def __init__(self, rows=None, *, delays=None, failing=(), existing=(), ready=True):
        self.rows = SAMPLE_ROWS if rows is None else rows
        self.delays = delays or {}
        self.failing = set(failing)
        self.ready = ready
        self.models = {f"model-{template}": int(template) for template in existing}
        self.calls = []
        self.created = []
        self.closed = False

    async def get(self, path):
        return await self.request("GET", path)

    async def post(self, path, body=None):
        return await self.request("POST", path, body)

    async def close(self):
        self.closed = True

    async def request(self, method, path, body=None):
        self.calls.append((method, path, body))
        path = path.replace(BASE_URL, "")
        parts = path.split("?")[0].strip("/").split("/")
        if parts[0] == "downloads":
            return self.rows.get(int(parts[1]), [])
        if parts[-1] == "templates":
            return {"templates": [{"template_id": int(template), "title": template.name} for template in ReportTemplate]}
        if parts[-1] == "reports" and method == "GET":
            return {"reports": [{"id": model_id, "template_id": template} for model_id, template in self.models.items()]}
        if parts[-1] == "reports" and method == "POST":
            model_id = f"model-{body['template_id']}"
            self.models[model_id] = body["template_id"]
            self.created.append(body["template_id"])
            return {"reports": [{"id": model_id, "title": body["title"]}]}
        template = self.models[parts[4]]
        if parts[-1] == "create_snapshot":
            if template in self.failing:
                raise RemoteApiError(500, "snapshot backend unavailable")
            return {"snapshots": [{"id": f"snap-{template}", "status": "pending"}]}
        if parts[-2] == "snapshots":
            await asyncio.sleep(self.delays.get(template, 0))
            if not self.ready:
                return {"snapshots": [{"id": parts[-1], "status": "running"}]}
            return {
                "snapshots": [
                    {"id": parts[-1], "status": "completed", "download_link": f"{BASE_URL}/downloads/{template}"}
                ]
            }
        raise AssertionError(f"Unexpected request {method} {path}")


def build_service(fake, *, poll_interval=0.01, max_wait=1.0):
    return ReportCenterService(
        fake,
        resolver=ReportModelResolver(fake, retry_delay=0),
        runner=SnapshotRunner(fake, poll_interval=poll_interval, max_wait=max_wait, retry_delay=0),
    )


@pytest.fixture()
def fake_center():
    return FakeReportCenter


@pytest.fixture()
def service_factory():
    return build_service


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://", future=True, poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()
