"""Resolve report model ids for (organization, template) pairs."""

from __future__ import annotations

import logging
from typing import Any

from adreports.reportcenter.cache import MemoryModelCache, ModelCache, cache_key
from adreports.reportcenter.errors import (
    AuthenticationError,
    RateLimitedError,
    ReportCenterError,
    ReportModelUnavailable,
)
from adreports.reportcenter.models import ReportModelRef
from adreports.reportcenter.transport import ReportCenterTransport
from adreports.utils.retry import retry_async

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class ReportModelResolver:
    """List-then-create resolution of report models, cached per pair.

    Two tasks resolving the same uncached pair at once can both create a
    remote model. That race is left unguarded.
    """

    def __init__(
        self,
        transport: ReportCenterTransport,
        cache: ModelCache | None = None,
        *,
        page_size: int = PAGE_SIZE,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        self.transport = transport
        self.cache = cache if cache is not None else MemoryModelCache()
        self.page_size = page_size
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

    async def resolve(self, organization_id: str | int, template_id: int, title: str) -> str | int | None:
        """Return the model id, or None when the template is not available."""
        key = cache_key(organization_id, template_id)
        cached = await self.cache.get(key)
        if cached is not None:
            return cached
        try:
            model_id = await self._find_or_create(organization_id, int(template_id), title)
        except AuthenticationError:
            raise
        except ReportCenterError as exc:
            logger.warning("Report model for template %s (org %s) unavailable: %s", template_id, organization_id, exc)
            return None
        await self.cache.set(key, model_id)
        return model_id

    async def resolve_ref(self, organization_id: str | int, template_id: int, title: str) -> ReportModelRef | None:
        model_id = await self.resolve(organization_id, template_id, title)
        if model_id is None:
            return None
        return ReportModelRef(str(organization_id), int(template_id), model_id)

    async def list_models(self, organization_id: str | int) -> list[dict[str, Any]]:
        data = await self._call(self.transport.get)(
            f"/organizations/{organization_id}/report_center/reports?size={self.page_size}"
        )
        return list(_payload(data).get("reports") or [])

    async def list_templates(self, organization_id: str | int) -> list[dict[str, Any]]:
        data = await self._call(self.transport.get)(
            f"/organizations/{organization_id}/report_center/reports/templates"
        )
        return list(_payload(data).get("templates") or [])

    async def create_model(self, organization_id: str | int, template_id: int, title: str) -> str | int:
        data = await self._call(self.transport.post)(
            f"/organizations/{organization_id}/report_center/reports",
            {"template_id": template_id, "title": title},
        )
        reports = _payload(data).get("reports") or []
        model_id = reports[0].get("id") if reports else None
        if model_id is None:
            raise ReportModelUnavailable(f"No report id returned for template {template_id}")
        logger.info("Created report model %s for template %s (org %s)", model_id, template_id, organization_id)
        return model_id

    async def _find_or_create(self, organization_id: str | int, template_id: int, title: str) -> str | int:
        for report in await self.list_models(organization_id):
            if _template_of(report) == template_id and report.get("id") is not None:
                return report["id"]
        return await self.create_model(organization_id, template_id, title)

    def _call(self, func):
        return retry_async(
            func, attempts=self.retry_attempts, delay=self.retry_delay, exceptions=(RateLimitedError,)
        )


def _template_of(report: dict[str, Any]) -> int | None:
    try:
        return int(report.get("template_id"))
    except (TypeError, ValueError):
        return None


def _payload(data: Any) -> dict[str, Any]:
    return data if isinstance(data, dict) else {}
