# src/mill_atlas/infrastructure/persistence/repositories/_water_line_repo.py
"""Water line (levada) repository. Paths are read back as WKT via ST_AsText."""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any, Iterable, Optional

from sqlalchemy import exists, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.engine import RowMapping

from mill_atlas.domain.taxonomy import ConstructionStatus
from mill_atlas.domain.types import WaterLineTranslationText
from mill_atlas.infrastructure.db._schema import (
    Construction,
    WaterLine,
    WaterLineTranslation,
)

from ._base_repo import BaseRepository

_COLUMNS = (
    WaterLine.id,
    WaterLine.construction_id,
    WaterLine.slug,
    WaterLine.color,
    WaterLine.path.label("path_wkt"),
)


class SqlAlchemyWaterLineRepository(BaseRepository):
    """Water line repository."""

    async def list_published(self) -> list[RowMapping]:
        """Lines whose parent construction is published; legacy orphans never appear."""
        stmt = (
            select(*_COLUMNS)
            .join(Construction, Construction.id == WaterLine.construction_id)
            .where(Construction.status == ConstructionStatus.PUBLISHED)
            .order_by(WaterLine.slug)
        )
        return list((await self._session.execute(stmt)).mappings().all())

    async def get_published_by_slug(self, slug: str) -> RowMapping | None:
        stmt = (
            select(*_COLUMNS)
            .join(Construction, Construction.id == WaterLine.construction_id)
            .where(
                WaterLine.slug == slug,
                Construction.status == ConstructionStatus.PUBLISHED,
            )
        )
        return (await self._session.execute(stmt)).mappings().first()

    async def get(self, water_line_id: uuid.UUID) -> RowMapping | None:
        stmt = select(*_COLUMNS).where(WaterLine.id == water_line_id)
        return (await self._session.execute(stmt)).mappings().first()

    async def get_by_construction(self, construction_id: uuid.UUID) -> RowMapping | None:
        stmt = select(*_COLUMNS).where(WaterLine.construction_id == construction_id)
        return (await self._session.execute(stmt)).mappings().first()

    async def exists(self, water_line_id: uuid.UUID) -> bool:
        stmt = select(exists().where(WaterLine.id == water_line_id))
        return bool((await self._session.execute(stmt)).scalar())

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(exists().where(WaterLine.slug == slug))
        return bool((await self._session.execute(stmt)).scalar())

    async def add(
        self,
        *,
        slug: str,
        path_wkt: str,
        color: str,
        construction_id: Optional[uuid.UUID],
    ) -> uuid.UUID:
        line = WaterLine(
            slug=slug, path=path_wkt, color=color, construction_id=construction_id
        )
        self._session.add(line)
        await self._session.flush()
        return line.id

    async def update_fields(self, water_line_id: uuid.UUID, **values: Any) -> bool:
        if "path_wkt" in values:
            values["path"] = values.pop("path_wkt")
        result = await self._session.execute(
            update(WaterLine)
            .where(WaterLine.id == water_line_id)
            .values(**values, updated_at=func.now())
        )
        return result.rowcount > 0

    # --- legacy orphans ---

    async def list_orphans(self) -> list[RowMapping]:
        stmt = (
            select(*_COLUMNS, WaterLine.created_at, WaterLine.updated_at)
            .where(WaterLine.construction_id.is_(None))
            .order_by(WaterLine.slug)
        )
        return list((await self._session.execute(stmt)).mappings().all())

    async def set_parent(self, water_line_id: uuid.UUID, construction_id: uuid.UUID) -> bool:
        return await self.update_fields(water_line_id, construction_id=construction_id)

    # --- translations ---

    async def upsert_translation(
        self,
        water_line_id: uuid.UUID,
        locale: str,
        name: str,
        description: Optional[str] = None,
    ) -> None:
        stmt = insert(WaterLineTranslation).values(
            water_line_id=water_line_id, locale=locale, name=name, description=description
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[WaterLineTranslation.water_line_id, WaterLineTranslation.locale],
            set_={"name": stmt.excluded.name, "description": stmt.excluded.description},
        )
        await self._session.execute(stmt)

    async def get_translations(
        self, water_line_ids: Iterable[uuid.UUID]
    ) -> dict[uuid.UUID, list[WaterLineTranslationText]]:
        ids = list(water_line_ids)
        grouped: dict[uuid.UUID, list[WaterLineTranslationText]] = defaultdict(list)
        if not ids:
            return grouped
        stmt = (
            select(WaterLineTranslation)
            .where(WaterLineTranslation.water_line_id.in_(ids))
            .order_by(WaterLineTranslation.locale)
        )
        for t in (await self._session.execute(stmt)).scalars():
            grouped[t.water_line_id].append(
                WaterLineTranslationText(
                    lang_code=t.locale, name=t.name, description=t.description
                )
            )
        return grouped
