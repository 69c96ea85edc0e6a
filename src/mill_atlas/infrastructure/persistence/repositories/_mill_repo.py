# src/mill_atlas/infrastructure/persistence/repositories/_mill_repo.py
"""
Mill read/write queries.

Coordinates are extracted in SQL with `ST_Y(geom::geometry)` (lat) and
`ST_X(geom::geometry)` (lng); rows are returned as plain mappings and the
application layer validates coordinates before building the public DTOs.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import and_, insert, select, update
from sqlalchemy.engine import RowMapping

from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory
from mill_atlas.domain.types import MILL_ATTRIBUTE_FIELDS, MillFilters
from mill_atlas.infrastructure.db._schema import (
    Construction,
    ConstructionTranslation,
    MillData,
    WaterLine,
)
from mill_atlas.infrastructure.db._types import lat_of, lng_of

from ._base_repo import BaseRepository

_CONSTRUCTION_COLUMNS = (
    Construction.id,
    Construction.slug,
    Construction.legacy_id,
    Construction.status,
    Construction.district,
    Construction.municipality,
    Construction.parish,
    Construction.place,
    Construction.address,
    Construction.drainage_basin,
    Construction.main_image,
    Construction.gallery_images,
    Construction.custom_icon_url,
    Construction.created_at,
    Construction.updated_at,
)


def _mill_data_columns() -> list[Any]:
    return [getattr(MillData, name) for name in MILL_ATTRIBUTE_FIELDS]


def _coordinate_columns() -> list[Any]:
    return [lat_of(Construction.geom).label("lat"), lng_of(Construction.geom).label("lng")]


def _filter_conditions(filters: Optional[MillFilters]) -> list[Any]:
    if filters is None:
        return []
    conditions: list[Any] = []
    for field, values in filters:
        if field == "district":
            if values:
                conditions.append(Construction.district == values)
            continue
        if values:
            conditions.append(getattr(MillData, field).in_(values))
    return conditions


class SqlAlchemyMillRepository(BaseRepository):
    """Mill (`mills_data`) repository."""

    def _base_select(self, locale: Optional[str]):
        columns = [*_CONSTRUCTION_COLUMNS, *_coordinate_columns(), *_mill_data_columns()]
        if locale is not None:
            columns += [
                ConstructionTranslation.title,
                ConstructionTranslation.description,
                ConstructionTranslation.lang_code,
                ConstructionTranslation.observations_structure,
                ConstructionTranslation.observations_roof,
                ConstructionTranslation.observations_hydraulic,
                ConstructionTranslation.observations_mechanism,
                ConstructionTranslation.observations_general,
            ]
        stmt = select(*columns).join(
            MillData, MillData.construction_id == Construction.id
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

    async def list_published(
        self, locale: str, filters: Optional[MillFilters] = None
    ) -> list[RowMapping]:
        stmt = self._base_select(locale).where(
            Construction.status == ConstructionStatus.PUBLISHED,
            *_filter_conditions(filters),
        )
        return list((await self._session.execute(stmt)).mappings().all())

    async def get_detail(
        self,
        locale: str,
        *,
        slug: Optional[str] = None,
        construction_id: Optional[uuid.UUID] = None,
        published_only: bool = True,
    ) -> RowMapping | None:
        """Single mill with water line slug; `published_only=False` is for reviewers."""
        stmt = self._base_select(locale).add_columns(
            WaterLine.slug.label("water_line_slug")
        ).outerjoin(WaterLine, WaterLine.id == MillData.water_line_id)
        if slug is not None:
            stmt = stmt.where(Construction.slug == slug)
        if construction_id is not None:
            stmt = stmt.where(Construction.id == construction_id)
        if published_only:
            stmt = stmt.where(Construction.status == ConstructionStatus.PUBLISHED)
        return (await self._session.execute(stmt.limit(1))).mappings().first()

    async def list_published_on_water_line(
        self, water_line_id: uuid.UUID, locale: str, exclude_id: Optional[uuid.UUID] = None
    ) -> list[RowMapping]:
        stmt = self._base_select(locale).where(
            Construction.status == ConstructionStatus.PUBLISHED,
            MillData.water_line_id == water_line_id,
        )
        if exclude_id is not None:
            stmt = stmt.where(Construction.id != exclude_id)
        return list((await self._session.execute(stmt)).mappings().all())

    async def list_searchable(self) -> list[RowMapping]:
        stmt = self._base_select(None).where(
            Construction.status == ConstructionStatus.PUBLISHED
        )
        return list((await self._session.execute(stmt)).mappings().all())

    async def list_published_districts(self) -> list[Optional[str]]:
        stmt = (
            select(Construction.district)
            .join(MillData, MillData.construction_id == Construction.id)
            .where(Construction.status == ConstructionStatus.PUBLISHED)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def get_water_line_id(self, construction_id: uuid.UUID) -> uuid.UUID | None:
        stmt = select(MillData.water_line_id).where(
            MillData.construction_id == construction_id
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_for_edit(self, construction_id: uuid.UUID) -> RowMapping | None:
        stmt = self._base_select(None).where(
            Construction.id == construction_id,
            Construction.type_category == TypeCategory.MILL.value,
        )
        return (await self._session.execute(stmt)).mappings().first()

    async def add(self, construction_id: uuid.UUID, attributes: dict[str, Any]) -> None:
        await self._session.execute(
            insert(MillData).values(construction_id=construction_id, **attributes)
        )

    async def update(self, construction_id: uuid.UUID, attributes: dict[str, Any]) -> bool:
        result = await self._session.execute(
            update(MillData)
            .where(MillData.construction_id == construction_id)
            .values(**attributes)
        )
        return result.rowcount > 0
