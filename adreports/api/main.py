"""FastAPI routes exposing Report Center data to the dashboard."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from adreports.config import ReportCenterSettings
from adreports.db.session import create_engine_from_env
from adreports.reportcenter.errors import AuthenticationError, ReportCenterError
from adreports.reportcenter.models import ReportOptions, serialize
from adreports.reportcenter.reports import REPORTS_BY_SLUG
from adreports.reportcenter.service import ReportCenterService
from adreports.utils.dates import default_date_range

logger = logging.getLogger(__name__)

_service: ReportCenterService | None = None


def get_service() -> ReportCenterService:
    global _service
    if _service is None:
        load_dotenv()
        _service = ReportCenterService.from_settings(ReportCenterSettings.from_env(), engine=create_engine_from_env())
    return _service


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    global _service
    if _service is not None:
        await _service.close()
        _service = None


app = FastAPI(title="Report Center API", lifespan=lifespan)


def _date_range(start: str | None, end: str | None) -> tuple[str, str]:
    default_start, default_end = default_date_range()
    return start or default_start, end or default_end


@app.get("/organizations/{organization_id}/campaigns/{campaign_id}/report-center")
async def enhanced_campaign_data(
    organization_id: str,
    campaign_id: str,
    start: str | None = Query(None, description="YYYY-MM-DD"),
    end: str | None = Query(None, description="YYYY-MM-DD"),
    include_geo_fence: bool = True,
    include_location: bool = True,
    include_conversions: bool = True,
    include_devices: bool = True,
    include_viewability: bool = True,
    include_domains: bool = True,
    include_keywords: bool = False,
    service: ReportCenterService = Depends(get_service),
) -> JSONResponse:
    options = ReportOptions(
        include_geo_fence=include_geo_fence,
        include_location=include_location,
        include_conversions=include_conversions,
        include_devices=include_devices,
        include_viewability=include_viewability,
        include_domains=include_domains,
        include_keywords=include_keywords,
    )
    start_date, end_date = _date_range(start, end)
    try:
        report = await service.get_enhanced_campaign_data(organization_id, campaign_id, start_date, end_date, options)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AuthenticationError as exc:
        logger.error("Report Center rejected credentials: %s", exc)
        raise HTTPException(status_code=502, detail="Report Center rejected credentials") from exc
    return JSONResponse({"startDate": start_date, "endDate": end_date, **report.to_dict()})


@app.get("/organizations/{organization_id}/campaigns/{campaign_id}/report-center/{report}")
async def single_report(
    organization_id: str,
    campaign_id: str,
    report: str,
    start: str | None = Query(None, description="YYYY-MM-DD"),
    end: str | None = Query(None, description="YYYY-MM-DD"),
    service: ReportCenterService = Depends(get_service),
) -> JSONResponse:
    definition = REPORTS_BY_SLUG.get(report)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Unknown report {report}")
    start_date, end_date = _date_range(start, end)
    try:
        data = await service.fetch_report(definition, organization_id, campaign_id, start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AuthenticationError as exc:
        raise HTTPException(status_code=502, detail="Report Center rejected credentials") from exc
    body: dict[str, Any] = {"report": definition.slug, "startDate": start_date, "endDate": end_date}
    body["data"] = serialize(data)
    return JSONResponse(body)


@app.get("/organizations/{organization_id}/report-center/templates")
async def report_templates(
    organization_id: str, service: ReportCenterService = Depends(get_service)
) -> JSONResponse:
    try:
        templates = await service.list_templates(organization_id)
    except ReportCenterError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return JSONResponse({"templates": templates})
