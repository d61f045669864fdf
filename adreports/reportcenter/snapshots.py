"""Snapshot creation, polling and download."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from adreports.reportcenter.errors import (
    AuthenticationError,
    RateLimitedError,
    RemoteApiError,
    ReportCenterError,
    SnapshotFailedError,
    SnapshotTimeoutError,
)
from adreports.reportcenter.models import SnapshotJob, SnapshotStatus
from adreports.reportcenter.transport import ReportCenterTransport
from adreports.utils.retry import retry_async

logger = logging.getLogger(__name__)

POLL_INTERVAL = 2.0
MAX_WAIT = 60.0
DESTINATION_FORMAT = "json"


class SnapshotRunner:
    def __init__(
        self,
        transport: ReportCenterTransport,
        *,
        poll_interval: float = POLL_INTERVAL,
        max_wait: float = MAX_WAIT,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        self.transport = transport
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

    async def run_and_wait(
        self,
        organization_id: str | int,
        model_id: str | int,
        filters: Mapping[str, str],
        *,
        max_wait: float | None = None,
    ) -> list[dict[str, Any]] | None:
        """Run one snapshot to completion. Returns None on any failure except bad credentials."""
        try:
            job = await self.create_snapshot(organization_id, model_id, filters)
            return await self.wait_for_rows(job, max_wait=self.max_wait if max_wait is None else max_wait)
        except AuthenticationError:
            raise
        except (ReportCenterError, ValueError) as exc:
            logger.warning("Snapshot for report %s (org %s) failed: %s", model_id, organization_id, exc)
            return None

    async def create_snapshot(
        self, organization_id: str | int, model_id: str | int, filters: Mapping[str, str]
    ) -> SnapshotJob:
        create = retry_async(
            self.transport.post,
            attempts=self.retry_attempts,
            delay=self.retry_delay,
            exceptions=(RateLimitedError,),
        )
        data = await create(
            f"/organizations/{organization_id}/report_center/reports/{model_id}/schedules/create_snapshot",
            {"scheduled_plan": {}, "destination_format": DESTINATION_FORMAT, "filters": dict(filters)},
        )
        snapshot = _first(data, "snapshots")
        if not snapshot or snapshot.get("id") is None:
            raise RemoteApiError(200, "No snapshot ID returned")
        job = SnapshotJob(
            organization_id=str(organization_id),
            report_model_id=model_id,
            snapshot_id=snapshot["id"],
            filters=dict(filters),
        )
        job.advance(SnapshotStatus.parse(snapshot.get("status")), snapshot.get("download_link"))
        return job

    async def poll(self, job: SnapshotJob) -> SnapshotJob:
        data = await self.transport.get(
            f"/organizations/{job.organization_id}/report_center/reports/{job.report_model_id}"
            f"/schedules/snapshots/{job.snapshot_id}"
        )
        snapshot = _first(data, "snapshots") or {}
        job.advance(SnapshotStatus.parse(snapshot.get("status")), snapshot.get("download_link"))
        return job

    async def download(self, job: SnapshotJob) -> list[dict[str, Any]]:
        if not job.download_link:
            raise RemoteApiError(200, f"Snapshot {job.snapshot_id} has no download link")
        data = await self.transport.get(job.download_link)
        if not isinstance(data, list):
            raise RemoteApiError(200, f"Snapshot {job.snapshot_id} returned {type(data).__name__}, expected rows")
        return data

    async def wait_for_rows(self, job: SnapshotJob, *, max_wait: float) -> list[dict[str, Any]]:
        loop = asyncio.get_running_loop()
        started = loop.time()
        while loop.time() - started < max_wait:
            await asyncio.sleep(self.poll_interval)
            await self.poll(job)
            if job.download_link:
                rows = await self.download(job)
                logger.info("Snapshot %s ready with %s rows", job.snapshot_id, len(rows))
                return rows
            if job.status is SnapshotStatus.FAILED:
                raise SnapshotFailedError(f"Snapshot {job.snapshot_id} failed")
        raise SnapshotTimeoutError(f"Snapshot {job.snapshot_id} not ready after {max_wait:g}s")


def _first(data: Any, key: str) -> dict[str, Any] | None:
    if not isinstance(data, dict):
        return None
    items = data.get(key) or []
    return items[0] if items else None
