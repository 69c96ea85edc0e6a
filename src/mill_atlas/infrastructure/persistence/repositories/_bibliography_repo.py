# src/mill_atlas/infrastructure/persistence/repositories/_bibliography_repo.py
"""Bibliography repository."""

from __future__ import annotations

import uuid

from sqlalchemy import delete, select

from mill_atlas.domain.types import BibliographyEntry, BibliographyInput
from mill_atlas.infrastructure.db._schema import BibliographyRecord

from ._base_repo import BaseRepository


class SqlAlchemyBibliographyRepository(BaseRepository):
    async def list_entries(self) -> list[BibliographyEntry]:
        stmt = select(BibliographyRecord).order_by(
            BibliographyRecord.year.desc().nulls_last(),
            BibliographyRecord.created_at.desc(),
        )
        return [
            BibliographyEntry.from_orm_model(r)
            for r in (await self._session.execute(stmt)).scalars()
        ]

    async def add(self, data: BibliographyInput) -> BibliographyEntry:
        record = BibliographyRecord(**data.model_dump())
        self._session.add(record)
        await self._session.flush()
        await self._session.refresh(record)
        return BibliographyEntry.from_orm_model(record)

    async def delete(self, entry_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(BibliographyRecord).where(BibliographyRecord.id == entry_id)
        )
        return result.rowcount > 0
