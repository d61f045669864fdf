"""Database engine helpers."""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


def database_url() -> str | None:
    return os.environ.get("DATABASE_URL") or None


def create_engine_from_env() -> Engine | None:
    """Create an engine from DATABASE_URL, or None when it is unset."""
    url = database_url()
    if url is None:
        return None
    return create_engine(url, pool_pre_ping=True, future=True)
