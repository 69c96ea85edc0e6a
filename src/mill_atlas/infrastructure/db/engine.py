# src/mill_atlas/infrastructure/db/engine.py
"""
Async engine factory.

Maps the configured pool parameters onto the asyncpg QueuePool; unset values
fall back to SQLAlchemy defaults.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from mill_atlas.config import MillAtlasConfig

logger = structlog.get_logger(__name__)


def create_async_db_engine(cfg: MillAtlasConfig) -> AsyncEngine:
    db = cfg.database
    kwargs: dict[str, Any] = {
        "echo": db.echo,
        "pool_pre_ping": db.pool_pre_ping,
        "pool_timeout": db.pool_timeout,
    }
    if db.pool_size is not None:
        kwargs["pool_size"] = db.pool_size
    if db.max_overflow is not None:
        kwargs["max_overflow"] = db.max_overflow
    if db.pool_recycle is not None:
        kwargs["pool_recycle"] = db.pool_recycle

    logger.debug("Creating async engine", pool_size=db.pool_size, echo=db.echo)
    return create_async_engine(db.url, **kwargs)


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
