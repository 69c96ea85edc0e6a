# src/mill_atlas/containers/__init__.py
"""
Composition root.

`ApplicationContainer` assembles the sub-containers and owns the lifecycle
of shared resources such as the database engine.
"""

from __future__ import annotations

from dependency_injector import containers, providers

from mill_atlas.config import MillAtlasConfig

from .core import CoreContainer
from .infrastructure import InfrastructureContainer
from .persistence import PersistenceContainer
from .services import ServicesContainer


class ApplicationContainer(containers.DeclarativeContainer):
    # Whole config object, passed down to every sub-container.
    pydantic_config = providers.Dependency(instance_of=MillAtlasConfig)
    # Field-level view for providers that want scalars (logging).
    config = providers.Configuration()

    core = providers.Container(
        CoreContainer,
        config=config,
    )
    persistence = providers.Container(
        PersistenceContainer,
        config=pydantic_config,
    )
    infrastructure = providers.Container(
        InfrastructureContainer,
        config=pydantic_config,
    )
    services = providers.Container(
        ServicesContainer,
        config=pydantic_config,
        uow_factory=persistence.uow_factory.provider,
        cache_handler=infrastructure.cache_handler,
        storage_client=infrastructure.storage_client,
    )


__all__ = ["ApplicationContainer"]
