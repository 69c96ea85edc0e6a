# src/mill_atlas/application/services/_review.py
"""Admin-only lifecycle: status changes, review queue, inventory and deletion."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional, Union

import structlog

from mill_atlas.domain.i18n import ensure_locale
from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory
from mill_atlas.domain.types import (
    TYPE_FILTER_TO_CATEGORY,
    ConstructionForEdit,
    CurrentUser,
    InventoryItem,
    MillDetail,
    PocaForEdit,
    ReviewQueueItem,
    StatusChange,
    WaterLineForEdit,
)
from mill_atlas.exceptions import NotFoundError, ValidationError

from ._access import require_admin
from ._edit_loaders import load_poca_for_edit, load_water_line_for_edit

if TYPE_CHECKING:
    from mill_atlas.config import MillAtlasConfig
    from mill_atlas.interfaces import CacheHandler, UowFactory

    from ._public_query import PublicQueryService

logger = structlog.get_logger(__name__)

ReviewDetail = Union[MillDetail, PocaForEdit, WaterLineForEdit, ConstructionForEdit]


def parse_status(value: Union[str, ConstructionStatus]) -> ConstructionStatus:
    try:
        return ConstructionStatus(value)
    except ValueError as e:
        raise ValidationError("Invalid status value") from e


class ReviewService:
    def __init__(
        self,
        uow_factory: UowFactory,
        config: MillAtlasConfig,
        public_query: PublicQueryService,
        cache: CacheHandler | None = None,
    ):
        self._uow_factory = uow_factory
        self._config = config
        self._public_query = public_query
        self._cache = cache

    def _locale(self, locale: Optional[str]) -> str:
        return ensure_locale(
            locale or self._config.i18n.default_locale, self._config.i18n.locales
        )

    async def update_construction_status(
        self,
        user: Optional[CurrentUser],
        construction_id: uuid.UUID,
        status: Union[str, ConstructionStatus],
    ) -> StatusChange:
        require_admin(user)
        new_status = parse_status(status)
        async with self._uow_factory() as uow:
            if not await uow.constructions.set_status(construction_id, new_status):
                raise NotFoundError("Construction not found")
        if self._cache is not None:
            await self._cache.clear()
        logger.info(
            "Construction status updated",
            construction_id=str(construction_id),
            status=new_status.value,
            by=str(user.id),
        )
        return StatusChange(id=construction_id, status=new_status)

    async def get_review_queue(
        self, user: Optional[CurrentUser], locale: Optional[str] = None
    ) -> list[ReviewQueueItem]:
        require_admin(user)
        loc = self._locale(locale)
        async with self._uow_factory() as uow:
            return await uow.constructions.list_review_queue(loc)

    async def get_construction_for_review(
        self, user: Optional[CurrentUser], slug: str, locale: Optional[str] = None
    ) -> ReviewDetail:
        require_admin(user)
        loc = self._locale(locale)
        async with self._uow_factory() as uow:
            construction_id = await uow.constructions.get_id_by_slug(slug)
            if construction_id is None:
                raise NotFoundError("Construction not found")
            header = await uow.constructions.get_header(construction_id)
            if header.type_category == TypeCategory.POCA.value:
                detail = await load_poca_for_edit(uow, construction_id)
            elif header.type_category == TypeCategory.WATER_LINE.value:
                detail = await load_water_line_for_edit(uow, construction_id)
            else:
                detail = None
        if header.type_category == TypeCategory.MILL.value:
            detail = await self._public_query.get_mill_for_review(slug, loc)
        if detail is None:
            raise NotFoundError("Construction not found")
        return detail

    async def delete_construction(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID
    ) -> None:
        require_admin(user)
        async with self._uow_factory() as uow:
            if not await uow.constructions.delete(construction_id):
                raise NotFoundError("Construction not found")
        if self._cache is not None:
            await self._cache.clear()
        logger.info(
            "Construction deleted", construction_id=str(construction_id), by=str(user.id)
        )

    async def get_inventory_items(
        self,
        user: Optional[CurrentUser],
        locale: Optional[str] = None,
        *,
        type_filter: str = "ALL",
        status: str = "ALL",
        search: Optional[str] = None,
    ) -> list[InventoryItem]:
        require_admin(user)
        loc = self._locale(locale)
        category = None
        if type_filter != "ALL":
            if type_filter not in TYPE_FILTER_TO_CATEGORY:
                raise ValidationError(f"Invalid type filter: {type_filter}")
            category = TYPE_FILTER_TO_CATEGORY[type_filter]
        status_value = None if status == "ALL" else parse_status(status)
        async with self._uow_factory() as uow:
            return await uow.constructions.list_inventory(
                loc, category=category, status=status_value, search=search or None
            )

    async def get_item_type_by_id(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID
    ) -> TypeCategory:
        require_admin(user)
        async with self._uow_factory() as uow:
            header = await uow.constructions.get_header(construction_id)
        if header is None:
            raise NotFoundError("Construction not found")
        return TypeCategory(header.type_category)
