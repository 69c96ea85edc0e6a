# src/mill_atlas/infrastructure/persistence/repositories/_poca_repo.py
"""Poca (`pocas_data`) repository."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import and_, insert, select, update
from sqlalchemy.engine import RowMapping

from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory
from mill_atlas.infrastructure.db._schema import (
    Construction,
    ConstructionTranslation,
    PocaData,
    WaterLine,
)
from mill_atlas.infrastructure.db._types import lat_of, lng_of

from ._base_repo import BaseRepository


def _select(locale: Optional[str] = None):
    columns = [
        Construction.id,
        Construction.slug,
        Construction.status,
        lat_of(Construction.geom).label("lat"),
        lng_of(Construction.geom).label("lng"),
        PocaData.water_line_id,
        WaterLine.slug.label("water_line_slug"),
    ]
    if locale is not None:
        columns.append(ConstructionTranslation.title)
    stmt = (
        select(*columns)
        .join(PocaData, PocaData.construction_id == Construction.id)
        .outerjoin(WaterLine, WaterLine.id == PocaData.water_line_id)
    )
    if locale is not None:
        stmt = stmt.outerjoin(
            ConstructionTranslation,
            and_(
                ConstructionTranslation.construction_id == Construction.id,
                ConstructionTranslation.lang_code == locale,
            ),
        )
    return stmt


class SqlAlchemyPocaRepository(BaseRepository):
    """Poca repository."""

    async def list_published(self, locale: Optional[str] = None) -> list[RowMapping]:
        stmt = _select(locale).where(Construction.status == ConstructionStatus.PUBLISHED)
        return list((await self._session.execute(stmt)).mappings().all())

    async def get_for_edit(self, construction_id: uuid.UUID) -> RowMapping | None:
        stmt = _select().where(
            Construction.id == construction_id,
            Construction.type_category == TypeCategory.POCA.value,
        )
        return (await self._session.execute(stmt)).mappings().first()

    async def add(self, construction_id: uuid.UUID, water_line_id: uuid.UUID) -> None:
        await self._session.execute(
            insert(PocaData).values(
                construction_id=construction_id, water_line_id=water_line_id
            )
        )

    async def update(self, construction_id: uuid.UUID, water_line_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            update(PocaData)
            .where(PocaData.construction_id == construction_id)
            .values(water_line_id=water_line_id)
        )
        return result.rowcount > 0
