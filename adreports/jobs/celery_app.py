"""Celery configuration for scheduled jobs."""

from __future__ import annotations

import os

from celery import Celery
from celery.schedules import crontab

from adreports.utils.dates import timezone_name

broker_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
backend_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")

celery_app = Celery("adreports", broker=broker_url, backend=backend_url)
celery_app.conf.timezone = timezone_name()
celery_app.conf.beat_schedule = {
    "warm-report-models": {
        "task": "adreports.jobs.warm.run_warm",
        "schedule": crontab(hour=int(os.environ.get("WARM_HOUR", "5")), minute=int(os.environ.get("WARM_MINUTE", "0"))),
    },
}


@celery_app.task(name="adreports.jobs.warm.run_warm")
def run_warm_task():  # pragma: no cover - executed by worker
    import asyncio

    from adreports.jobs.warm import run_warm

    return asyncio.run(run_warm())
