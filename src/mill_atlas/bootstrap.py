# src/mill_atlas/bootstrap.py
"""
Application bootstrap: the single initialization entry point.

1. Load `.env` files for the selected environment mode.
2. Build and validate `MillAtlasConfig`.
3. Create the DI container (or, for lightweight callers, a bare UoW factory).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import structlog
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncEngine

from mill_atlas.config import MillAtlasConfig
from mill_atlas.containers import ApplicationContainer
from mill_atlas.exceptions import ConfigurationError
from mill_atlas.infrastructure.db import (
    create_async_db_engine,
    create_async_sessionmaker,
    dispose_engine,
)
from mill_atlas.infrastructure.uow import SqlAlchemyUnitOfWork, UowFactory
from mill_atlas.management.config_utils import mask_db_url

EnvMode = Literal["prod", "dev", "test"]

PROJECT_ROOT = Path(__file__).resolve().parents[2]
# Un-prefixed variables an older deployment may still export.
LEGACY_ENV_VARS = ("DATABASE_URL", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")

logger = structlog.get_logger(__name__)


def resolve_env_mode(value: str | None = None) -> EnvMode:
    mode = (value or os.getenv("MILLATLAS_ENV") or "prod").strip().lower()
    if mode not in ("prod", "dev", "test"):
        raise ConfigurationError(f"MILLATLAS_ENV must be prod, dev or test, got {mode!r}")
    return mode  # type: ignore[return-value]


def _load_dotenv_files(env_mode: EnvMode, root: Path | None = None) -> list[Path]:
    """`.env` never overrides the real environment; `.env.dev`/`.env.test` override `.env`."""
    root = root or PROJECT_ROOT
    loaded: list[Path] = []
    base_env = root / ".env"
    if base_env.is_file():
        load_dotenv(base_env, override=False)
        loaded.append(base_env)

    mode_env = root / f".env.{env_mode}"
    if env_mode in ("dev", "test") and mode_env.is_file():
        load_dotenv(mode_env, override=True)
        loaded.append(mode_env)

    logger.debug("Dotenv files loaded", files=[p.name for p in loaded])
    return loaded


def _ensure_no_legacy_vars() -> None:
    legacy = [k for k in LEGACY_ENV_VARS if k in os.environ]
    if legacy:
        raise ConfigurationError(
            f"Legacy environment variables detected: {legacy}. "
            "Use the MILLATLAS_ prefix with '__' for nesting, "
            "e.g. MILLATLAS_DATABASE__URL."
        )


def create_app_config(env_mode: EnvMode | None = None) -> MillAtlasConfig:
    """Load, validate and return the application configuration."""
    mode = resolve_env_mode(env_mode)
    _load_dotenv_files(mode)
    _ensure_no_legacy_vars()
    try:
        config = MillAtlasConfig()
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
    logger.debug(
        "Config instance created",
        env_mode=mode,
        db_url=mask_db_url(config.database.url),
        maint_url=mask_db_url(config.maintenance_database_url),
    )
    return config


def create_uow_factory(config: MillAtlasConfig) -> tuple[UowFactory, AsyncEngine]:
    """UoW factory plus the engine that backs it (callers dispose it)."""
    db_engine = create_async_db_engine(config)
    sessionmaker = create_async_sessionmaker(db_engine)

    def uow_factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(sessionmaker)

    return uow_factory, db_engine


def create_container(
    config: MillAtlasConfig, service_name: str = "mill-atlas"
) -> ApplicationContainer:
    container = ApplicationContainer()
    container.pydantic_config.override(config)
    container.config.from_pydantic(config)
    container.config.service_name.from_value(service_name)
    container.core.init_resources()
    return container


async def shutdown_container(container: ApplicationContainer) -> None:
    """Close the storage client and dispose the database engine."""
    storage = container.infrastructure.storage_client()
    if storage is not None:
        await storage.aclose()
    await dispose_engine(container.persistence.db_engine())
    container.persistence.shutdown_resources()
