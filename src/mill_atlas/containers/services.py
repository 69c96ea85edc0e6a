# src/mill_atlas/containers/services.py
"""Application services and the Coordinator facade."""

from dependency_injector import containers, providers

from mill_atlas.application import services
from mill_atlas.application.coordinator import Coordinator
from mill_atlas.config import MillAtlasConfig


class ServicesContainer(containers.DeclarativeContainer):
    config = providers.Dependency(instance_of=MillAtlasConfig)
    uow_factory = providers.Dependency()
    cache_handler = providers.Dependency()
    storage_client = providers.Dependency()

    public_query = providers.Singleton(
        services.PublicQueryService,
        uow_factory=uow_factory,
        config=config,
        cache=cache_handler,
    )
    review = providers.Singleton(
        services.ReviewService,
        uow_factory=uow_factory,
        config=config,
        public_query=public_query,
        cache=cache_handler,
    )
    authoring = providers.Singleton(
        services.AuthoringService,
        uow_factory=uow_factory,
        config=config,
        cache=cache_handler,
    )
    bibliography = providers.Singleton(
        services.BibliographyService,
        uow_factory=uow_factory,
    )
    media = providers.Singleton(
        services.MediaService,
        config=config,
        storage=storage_client,
    )
    access = providers.Singleton(
        services.AccessService,
        uow_factory=uow_factory,
        config=config,
        auth_gateway=storage_client,
    )
    maintenance = providers.Singleton(
        services.MaintenanceService,
        uow_factory=uow_factory,
        config=config,
        cache=cache_handler,
    )

    coordinator = providers.Singleton(
        Coordinator,
        public_query=public_query,
        review=review,
        authoring=authoring,
        bibliography=bibliography,
        media=media,
        access=access,
        maintenance=maintenance,
    )
