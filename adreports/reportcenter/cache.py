"""Caches for resolved report model ids."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import text

logger = logging.getLogger(__name__)

CacheKey = tuple[str, int]


def cache_key(organization_id: str | int, template_id: int) -> CacheKey:
    return (str(organization_id), int(template_id))


class ModelCache(Protocol):
    async def get(self, key: CacheKey) -> str | int | None: ...

    async def set(self, key: CacheKey, model_id: str | int) -> None: ...


class MemoryModelCache:
    """Process-lifetime map guarded by a lock."""

    def __init__(self) -> None:
        self._data: dict[CacheKey, str | int] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: CacheKey) -> str | int | None:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: CacheKey, model_id: str | int) -> None:
        async with self._lock:
            self._data[key] = model_id

    def __len__(self) -> int:
        return len(self._data)


class SqlModelCache:
    """Model ids persisted in the report_models table, memoized in process.

    Database errors are logged and never raised: a failed read is a miss and a
    failed write keeps the id in memory only.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._memory = MemoryModelCache()

    async def get(self, key: CacheKey) -> str | int | None:
        cached = await self._memory.get(key)
        if cached is not None:
            return cached
        try:
            model_id = await asyncio.get_running_loop().run_in_executor(None, self._load, key)
        except SQLAlchemyError as exc:
            logger.warning("Report model lookup for %s failed: %s", key, exc)
            return None
        if model_id is not None:
            await self._memory.set(key, model_id)
        return model_id

    async def set(self, key: CacheKey, model_id: str | int) -> None:
        await self._memory.set(key, model_id)
        try:
            await asyncio.get_running_loop().run_in_executor(None, self._store, key, model_id)
        except SQLAlchemyError as exc:
            logger.warning("Storing report model %s for %s failed: %s", model_id, key, exc)

    def _load(self, key: CacheKey) -> str | None:
        organization_id, template_id = key
        with self.engine.connect() as conn:
            return conn.execute(
                text(
                    """
                    SELECT model_id FROM report_models
                    WHERE organization_id = :organization_id AND template_id = :template_id
                    """
                ),
                {"organization_id": organization_id, "template_id": template_id},
            ).scalar_one_or_none()

    def _store(self, key: CacheKey, model_id: str | int) -> None:
        organization_id, template_id = key
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO report_models (organization_id, template_id, model_id)
                    VALUES (:organization_id, :template_id, :model_id)
                    ON CONFLICT (organization_id, template_id) DO UPDATE SET
                      model_id = EXCLUDED.model_id
                    """
                ),
                {"organization_id": organization_id, "template_id": template_id, "model_id": str(model_id)},
            )
        logger.debug("Stored report model %s for org %s template %s", model_id, organization_id, template_id)
