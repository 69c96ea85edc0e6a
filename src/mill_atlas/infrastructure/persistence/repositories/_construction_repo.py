# src/mill_atlas/infrastructure/persistence/repositories/_construction_repo.py
"""Repository of the shared `constructions` parent table and its translations."""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any, Iterable

from sqlalchemy import and_, cast, delete, exists, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert

from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory
from mill_atlas.domain.types import (
    ConstructionHeader,
    InventoryItem,
    NearbyConstruction,
    ReviewQueueItem,
    TranslationText,
)
from mill_atlas.infrastructure.db._schema import Construction, ConstructionTranslation
from mill_atlas.infrastructure.db._types import Geography

from ._base_repo import BaseRepository

TRANSLATION_FIELDS = (
    "title",
    "description",
    "observations_structure",
    "observations_roof",
    "observations_hydraulic",
    "observations_mechanism",
    "observations_general",
)


def _locale_translation(locale: str):
    """LEFT JOIN condition for the translation in `locale`."""
    return and_(
        ConstructionTranslation.construction_id == Construction.id,
        ConstructionTranslation.lang_code == locale,
    )


class SqlAlchemyConstructionRepository(BaseRepository):
    """Construction repository."""

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(exists().where(Construction.slug == slug))
        return bool((await self._session.execute(stmt)).scalar())

    async def add(self, **data: Any) -> uuid.UUID:
        construction = Construction(**data)
        self._session.add(construction)
        await self._session.flush()
        return construction.id

    async def get_header(self, construction_id: uuid.UUID) -> ConstructionHeader | None:
        stmt = select(
            Construction.id,
            Construction.slug,
            Construction.status,
            Construction.type_category,
            Construction.created_by,
        ).where(Construction.id == construction_id)
        row = (await self._session.execute(stmt)).mappings().first()
        return ConstructionHeader.model_validate(dict(row)) if row else None

    async def get_id_by_slug(self, slug: str) -> uuid.UUID | None:
        stmt = select(Construction.id).where(Construction.slug == slug)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def update_fields(self, construction_id: uuid.UUID, **values: Any) -> bool:
        stmt = (
            update(Construction)
            .where(Construction.id == construction_id)
            .values(**values, updated_at=func.now())
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def set_status(
        self, construction_id: uuid.UUID, status: ConstructionStatus
    ) -> bool:
        return await self.update_fields(construction_id, status=status)

    async def delete(self, construction_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(Construction).where(Construction.id == construction_id)
        )
        return result.rowcount > 0

    # --- translations ---

    async def upsert_translation(
        self, construction_id: uuid.UUID, lang_code: str, **fields: Any
    ) -> None:
        values = {k: fields.get(k) for k in TRANSLATION_FIELDS}
        stmt = insert(ConstructionTranslation).values(
            construction_id=construction_id, lang_code=lang_code, **values
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                ConstructionTranslation.construction_id,
                ConstructionTranslation.lang_code,
            ],
            set_={k: stmt.excluded[k] for k in TRANSLATION_FIELDS},
        )
        await self._session.execute(stmt)

    async def get_translations(
        self, construction_ids: Iterable[uuid.UUID]
    ) -> dict[uuid.UUID, list[TranslationText]]:
        ids = list(construction_ids)
        grouped: dict[uuid.UUID, list[TranslationText]] = defaultdict(list)
        if not ids:
            return grouped
        stmt = (
            select(ConstructionTranslation)
            .where(ConstructionTranslation.construction_id.in_(ids))
            .order_by(ConstructionTranslation.lang_code)
        )
        for t in (await self._session.execute(stmt)).scalars():
            grouped[t.construction_id].append(TranslationText.from_orm_model(t))
        return grouped

    # --- dashboard listings ---

    async def list_review_queue(self, locale: str) -> list[ReviewQueueItem]:
        stmt = (
            select(
                Construction.id,
                Construction.slug,
                Construction.status,
                Construction.type_category,
                Construction.created_at,
                ConstructionTranslation.title,
            )
            .outerjoin(ConstructionTranslation, _locale_translation(locale))
            .where(
                Construction.status.in_(
                    [ConstructionStatus.DRAFT, ConstructionStatus.REVIEW]
                )
            )
            .order_by(Construction.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).mappings().all()
        return [ReviewQueueItem.model_validate(dict(r)) for r in rows]

    async def list_inventory(
        self,
        locale: str,
        *,
        category: TypeCategory | None = None,
        status: ConstructionStatus | None = None,
        search: str | None = None,
    ) -> list[InventoryItem]:
        stmt = select(
            Construction.id,
            Construction.slug,
            Construction.type_category,
            Construction.status,
            Construction.district,
            Construction.municipality,
            Construction.created_at,
            Construction.updated_at,
            ConstructionTranslation.title,
        ).outerjoin(ConstructionTranslation, _locale_translation(locale))
        if category is not None:
            stmt = stmt.where(Construction.type_category == category.value)
        if status is not None:
            stmt = stmt.where(Construction.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    ConstructionTranslation.title.ilike(pattern),
                    Construction.slug.ilike(pattern),
                )
            )
        stmt = stmt.order_by(Construction.updated_at.desc())
        rows = (await self._session.execute(stmt)).mappings().all()
        return [InventoryItem.model_validate(dict(r)) for r in rows]

    async def find_nearest(
        self, lat: float, lng: float, locale: str, limit: int = 5
    ) -> list[NearbyConstruction]:
        """Published constructions ordered by geodesic distance (ST_Distance on geography)."""
        origin = cast(func.ST_SetSRID(func.ST_MakePoint(lng, lat), 4326), Geography())
        distance = func.ST_Distance(Construction.geom, origin).label("distance_m")
        stmt = (
            select(
                Construction.id,
                Construction.slug,
                Construction.type_category,
                ConstructionTranslation.title,
                distance,
            )
            .outerjoin(ConstructionTranslation, _locale_translation(locale))
            .where(
                Construction.status == ConstructionStatus.PUBLISHED,
                Construction.geom.is_not(None),
            )
            .order_by(distance)
            .limit(limit)
        )
        rows = (await self._session.execute(stmt)).mappings().all()
        return [NearbyConstruction.model_validate(dict(r)) for r in rows]
