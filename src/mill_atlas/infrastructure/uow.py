# src/mill_atlas/infrastructure/uow.py
"""SQLAlchemy implementation of the Unit of Work."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mill_atlas.interfaces import IUnitOfWork, UowFactory

from .persistence.repositories import (
    SqlAlchemyBibliographyRepository,
    SqlAlchemyConstructionRepository,
    SqlAlchemyMillRepository,
    SqlAlchemyPocaRepository,
    SqlAlchemyProfileRepository,
    SqlAlchemyWaterLineRepository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """One session, one transaction: commit on clean exit, rollback on error."""

    def __init__(self, sessionmaker: "async_sessionmaker[AsyncSession]"):
        self._sessionmaker = sessionmaker
        self.session: "AsyncSession"

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._sessionmaker()
        self.constructions = SqlAlchemyConstructionRepository(self.session)
        self.mills = SqlAlchemyMillRepository(self.session)
        self.water_lines = SqlAlchemyWaterLineRepository(self.session)
        self.pocas = SqlAlchemyPocaRepository(self.session)
        self.profiles = SqlAlchemyProfileRepository(self.session)
        self.bibliography = SqlAlchemyBibliographyRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
            else:
                await self.commit()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


__all__ = ["SqlAlchemyUnitOfWork", "UowFactory"]
