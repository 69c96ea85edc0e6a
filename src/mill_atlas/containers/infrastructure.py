# src/mill_atlas/containers/infrastructure.py
"""Cache and object storage."""

from __future__ import annotations

from typing import Optional

import structlog
from dependency_injector import containers, providers

from mill_atlas.config import CacheSettings, MillAtlasConfig, StorageSettings
from mill_atlas.infrastructure.cache import MemoryCacheHandler
from mill_atlas.infrastructure.storage import SupabaseClient

logger = structlog.get_logger(__name__)


def create_cache_handler(settings: CacheSettings) -> MemoryCacheHandler:
    return MemoryCacheHandler(maxsize=settings.maxsize, ttl=settings.ttl)


def create_storage_client(settings: StorageSettings) -> Optional[SupabaseClient]:
    """None when storage credentials are absent; uploads then fail with ConfigurationError."""
    if not settings.base_url or not settings.service_key:
        logger.info("Object storage not configured; uploads and magic links disabled")
        return None
    return SupabaseClient(settings)


class InfrastructureContainer(containers.DeclarativeContainer):
    config = providers.Dependency(instance_of=MillAtlasConfig)

    cache_handler = providers.Singleton(
        create_cache_handler,
        settings=config.provided.cache,
    )
    storage_client = providers.Singleton(
        create_storage_client,
        settings=config.provided.storage,
    )
