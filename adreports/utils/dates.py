"""Datetime helpers."""

from __future__ import annotations

import os
from datetime import date

import pendulum

DEFAULT_TZ = "America/Los_Angeles"
DATE_FORMAT = "YYYY-MM-DD"


def timezone_name() -> str:
    return os.environ.get("TIMEZONE", DEFAULT_TZ)


def now_in_tz() -> pendulum.DateTime:
    tz = pendulum.timezone(timezone_name())
    return pendulum.now(tz)


def today_in_tz() -> date:
    return now_in_tz().date()


def parse_iso_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD string; dates pass through."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid date {value!r}; expected YYYY-MM-DD")
    try:
        return pendulum.from_format(value.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f"Invalid date {value!r}; expected YYYY-MM-DD") from exc


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def report_date_range(start: str | date, end: str | date) -> tuple[str, str]:
    start_date = parse_iso_date(start)
    end_date = parse_iso_date(end)
    if start_date > end_date:
        raise ValueError(f"Start date {format_date(start_date)} is after end date {format_date(end_date)}")
    return format_date(start_date), format_date(end_date)


def default_date_range(days: int = 30) -> tuple[str, str]:
    now = now_in_tz()
    return format_date(now.subtract(days=days).date()), format_date(now.date())
