# src/mill_atlas/containers/persistence.py
"""Persistence container: engine, session factory and Unit of Work."""

from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mill_atlas.config import MillAtlasConfig
from mill_atlas.infrastructure.db import create_async_db_engine, create_async_sessionmaker
from mill_atlas.infrastructure.uow import SqlAlchemyUnitOfWork


class PersistenceContainer(containers.DeclarativeContainer):
    config = providers.Dependency(instance_of=MillAtlasConfig)

    db_engine: providers.Resource[AsyncEngine] = providers.Resource(
        create_async_db_engine,
        cfg=config,
    )

    session_maker: providers.Singleton[async_sessionmaker[AsyncSession]] = (
        providers.Singleton(
            create_async_sessionmaker,
            engine=db_engine,
        )
    )

    # A new UoW per call; inject `uow_factory.provider` where a factory is wanted.
    uow_factory: providers.Factory[SqlAlchemyUnitOfWork] = providers.Factory(
        SqlAlchemyUnitOfWork,
        sessionmaker=session_maker,
    )
