"""Pre-resolve report models so dashboard requests skip model creation."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from dotenv import load_dotenv

from adreports.config import ReportCenterSettings
from adreports.db.migrate import run_migrations
from adreports.db.session import create_engine_from_env
from adreports.reportcenter.reports import REPORTS
from adreports.reportcenter.service import ReportCenterService

logger = logging.getLogger(__name__)


async def warm_report_models(
    service: ReportCenterService, organization_ids: Iterable[str | int]
) -> dict[str, dict[str, str | int | None]]:
    """Resolve every registered template for each organization concurrently."""
    organizations = [str(org) for org in organization_ids]
    pairs = [(org, definition) for org in organizations for definition in REPORTS.values()]
    model_ids = await asyncio.gather(
        *(service.resolver.resolve(org, definition.template, definition.title) for org, definition in pairs)
    )
    warmed: dict[str, dict[str, str | int | None]] = {org: {} for org in organizations}
    for (org, definition), model_id in zip(pairs, model_ids):
        warmed[org][definition.key] = model_id
        if model_id is None:
            logger.warning("No report model for %s in org %s", definition.title, org)
    return warmed


async def run_warm() -> dict[str, dict[str, str | int | None]]:
    load_dotenv()
    settings = ReportCenterSettings.from_env()
    if not settings.organization_ids:
        logger.info("REPORT_CENTER_ORG_IDS is empty; nothing to warm")
        return {}
    engine = create_engine_from_env()
    if engine is not None:
        run_migrations(engine)
    service = ReportCenterService.from_settings(settings, engine=engine)
    try:
        return await warm_report_models(service, settings.organization_ids)
    finally:
        await service.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run_warm())
