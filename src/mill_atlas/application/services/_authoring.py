# src/mill_atlas/application/services/_authoring.py
"""
Researcher drafting: create and edit mills, poças and water lines.

Each create runs in one unit of work (construction row, type-specific row
and the translation for the form's locale). Non-admins can never publish:
a `published` request from them is saved as `draft`.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional, Union

import structlog

from mill_atlas.domain.geo import to_linestring_wkt, to_point_wkt
from mill_atlas.domain.i18n import ensure_locale
from mill_atlas.domain.slug import generate_slug, generate_unique_slug
from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory
from mill_atlas.domain.types import (
    MILL_ATTRIBUTE_FIELDS,
    ConstructionForEdit,
    ConstructionHeader,
    CurrentUser,
    MillInput,
    PocaForEdit,
    PocaInput,
    WaterLineForEdit,
    WaterLineInput,
)
from mill_atlas.exceptions import NotFoundError, ValidationError

from ._access import require_researcher_or_admin
from ._edit_loaders import load_mill_for_edit, load_poca_for_edit, load_water_line_for_edit

if TYPE_CHECKING:
    from mill_atlas.config import MillAtlasConfig
    from mill_atlas.interfaces import CacheHandler, IUnitOfWork, UowFactory

logger = structlog.get_logger(__name__)

_LOCATION_FIELDS = ("district", "municipality", "parish", "place", "address", "drainage_basin")
_OBSERVATION_FIELDS = (
    "observations_structure",
    "observations_roof",
    "observations_hydraulic",
    "observations_mechanism",
    "observations_general",
)
_FALLBACK_SLUG = "construction"


def effective_status(user: CurrentUser, requested: ConstructionStatus) -> ConstructionStatus:
    """Admins keep what they asked for; a non-admin asking for `published` gets `draft`."""
    if user.is_admin or requested != ConstructionStatus.PUBLISHED:
        return requested
    logger.info("Publish requested by non-admin, saving as draft", user_id=str(user.id))
    return ConstructionStatus.DRAFT


async def _unique_slug(uow: IUnitOfWork, text: str, *, check_water_lines: bool = False) -> str:
    async def taken(slug: str) -> bool:
        if await uow.constructions.slug_exists(slug):
            return True
        return check_water_lines and await uow.water_lines.slug_exists(slug)

    return await generate_unique_slug(generate_slug(text) or _FALLBACK_SLUG, taken)


class AuthoringService:
    def __init__(
        self,
        uow_factory: UowFactory,
        config: MillAtlasConfig,
        cache: CacheHandler | None = None,
    ):
        self._uow_factory = uow_factory
        self._config = config
        self._cache = cache

    def _locale(self, locale: Optional[str]) -> str:
        return ensure_locale(
            locale or self._config.i18n.default_locale, self._config.i18n.locales
        )

    async def _invalidate(self) -> None:
        if self._cache is not None:
            await self._cache.clear()

    # --- mills ---

    def _mill_construction_values(self, data: MillInput, user: CurrentUser) -> dict:
        values = {f: getattr(data, f) for f in _LOCATION_FIELDS}
        values.update(
            geom=to_point_wkt(data.latitude, data.longitude),
            legacy_id=data.legacy_id,
            main_image=data.main_image,
            gallery_images=data.gallery_images or None,
            custom_icon_url=data.custom_icon_url,
            status=effective_status(user, data.status),
        )
        return values

    @staticmethod
    def _translation_values(data: MillInput) -> dict:
        values = {f: getattr(data, f) for f in _OBSERVATION_FIELDS}
        values.update(title=data.title, description=data.description)
        return values

    async def create_mill(
        self, user: Optional[CurrentUser], data: MillInput
    ) -> ConstructionHeader:
        user = require_researcher_or_admin(user)
        locale = self._locale(data.locale)
        attributes = {f: getattr(data, f) for f in MILL_ATTRIBUTE_FIELDS}
        async with self._uow_factory() as uow:
            if data.water_line_id and not await uow.water_lines.exists(data.water_line_id):
                raise ValidationError("Water line not found")
            slug = await _unique_slug(uow, data.title)
            construction_id = await uow.constructions.add(
                slug=slug,
                type_category=TypeCategory.MILL.value,
                created_by=user.id,
                **self._mill_construction_values(data, user),
            )
            await uow.mills.add(construction_id, attributes)
            await uow.constructions.upsert_translation(
                construction_id, locale, **self._translation_values(data)
            )
            header = await uow.constructions.get_header(construction_id)
        await self._invalidate()
        logger.info(
            "Mill created",
            construction_id=str(construction_id),
            slug=slug,
            status=header.status.value,
            by=str(user.id),
        )
        return header

    async def update_mill(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID, data: MillInput
    ) -> ConstructionHeader:
        user = require_researcher_or_admin(user)
        locale = self._locale(data.locale)
        attributes = {f: getattr(data, f) for f in MILL_ATTRIBUTE_FIELDS}
        async with self._uow_factory() as uow:
            header = await uow.constructions.get_header(construction_id)
            if header is None or header.type_category != TypeCategory.MILL.value:
                raise NotFoundError("Mill not found")
            if data.water_line_id and not await uow.water_lines.exists(data.water_line_id):
                raise ValidationError("Water line not found")
            await uow.constructions.update_fields(
                construction_id, **self._mill_construction_values(data, user)
            )
            await uow.mills.update(construction_id, attributes)
            await uow.constructions.upsert_translation(
                construction_id, locale, **self._translation_values(data)
            )
            header = await uow.constructions.get_header(construction_id)
        await self._invalidate()
        logger.info("Mill updated", construction_id=str(construction_id), by=str(user.id))
        return header

    async def get_construction_for_edit(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID
    ) -> ConstructionForEdit:
        require_researcher_or_admin(user)
        async with self._uow_factory() as uow:
            item = await load_mill_for_edit(uow, construction_id)
        if item is None:
            raise NotFoundError("Construction not found")
        return item

    # --- poças ---

    async def create_poca(
        self, user: Optional[CurrentUser], data: PocaInput
    ) -> ConstructionHeader:
        user = require_researcher_or_admin(user)
        locale = self._locale(data.locale)
        async with self._uow_factory() as uow:
            if not await uow.water_lines.exists(data.water_line_id):
                raise ValidationError("Water line not found")
            slug = await _unique_slug(uow, data.title)
            construction_id = await uow.constructions.add(
                slug=slug,
                type_category=TypeCategory.POCA.value,
                geom=to_point_wkt(data.latitude, data.longitude),
                status=effective_status(user, data.status),
                created_by=user.id,
            )
            await uow.pocas.add(construction_id, data.water_line_id)
            await uow.constructions.upsert_translation(
                construction_id, locale, title=data.title.strip(), description=data.description
            )
            header = await uow.constructions.get_header(construction_id)
        await self._invalidate()
        logger.info("Poca created", construction_id=str(construction_id), slug=slug)
        return header

    async def update_poca(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID, data: PocaInput
    ) -> ConstructionHeader:
        user = require_researcher_or_admin(user)
        locale = self._locale(data.locale)
        async with self._uow_factory() as uow:
            header = await uow.constructions.get_header(construction_id)
            if header is None or header.type_category != TypeCategory.POCA.value:
                raise NotFoundError("Poca not found")
            if not await uow.water_lines.exists(data.water_line_id):
                raise ValidationError("Water line not found")
            await uow.constructions.update_fields(
                construction_id,
                geom=to_point_wkt(data.latitude, data.longitude),
                status=effective_status(user, data.status),
            )
            await uow.pocas.update(construction_id, data.water_line_id)
            await uow.constructions.upsert_translation(
                construction_id, locale, title=data.title.strip(), description=data.description
            )
            header = await uow.constructions.get_header(construction_id)
        await self._invalidate()
        logger.info("Poca updated", construction_id=str(construction_id))
        return header

    async def get_poca_for_edit(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID
    ) -> PocaForEdit:
        require_researcher_or_admin(user)
        async with self._uow_factory() as uow:
            item = await load_poca_for_edit(uow, construction_id)
        if item is None:
            raise NotFoundError("Poca not found")
        return item

    # --- water lines ---

    async def create_water_line(
        self, user: Optional[CurrentUser], data: WaterLineInput
    ) -> ConstructionHeader:
        user = require_researcher_or_admin(user)
        locale = self._locale(data.locale)
        first_lat, first_lng = data.path[0]
        async with self._uow_factory() as uow:
            slug = await _unique_slug(uow, data.name, check_water_lines=True)
            construction_id = await uow.constructions.add(
                slug=slug,
                type_category=TypeCategory.WATER_LINE.value,
                geom=to_point_wkt(first_lat, first_lng),
                status=effective_status(user, data.status),
                created_by=user.id,
            )
            water_line_id = await uow.water_lines.add(
                slug=slug,
                path_wkt=to_linestring_wkt(data.path),
                color=data.color,
                construction_id=construction_id,
            )
            await uow.water_lines.upsert_translation(
                water_line_id, locale, name=data.name.strip(), description=data.description
            )
            header = await uow.constructions.get_header(construction_id)
        await self._invalidate()
        logger.info(
            "Water line created",
            construction_id=str(construction_id),
            water_line_id=str(water_line_id),
            points=len(data.path),
        )
        return header

    async def update_water_line(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID, data: WaterLineInput
    ) -> ConstructionHeader:
        user = require_researcher_or_admin(user)
        locale = self._locale(data.locale)
        first_lat, first_lng = data.path[0]
        async with self._uow_factory() as uow:
            line = await uow.water_lines.get_by_construction(construction_id)
            if line is None:
                raise NotFoundError("Water line not found")
            await uow.constructions.update_fields(
                construction_id,
                geom=to_point_wkt(first_lat, first_lng),
                status=effective_status(user, data.status),
            )
            await uow.water_lines.update_fields(
                line["id"], path_wkt=to_linestring_wkt(data.path), color=data.color
            )
            await uow.water_lines.upsert_translation(
                line["id"], locale, name=data.name.strip(), description=data.description
            )
            header = await uow.constructions.get_header(construction_id)
        await self._invalidate()
        logger.info("Water line updated", construction_id=str(construction_id))
        return header

    async def get_water_line_for_edit(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID
    ) -> WaterLineForEdit:
        require_researcher_or_admin(user)
        async with self._uow_factory() as uow:
            item = await load_water_line_for_edit(uow, construction_id)
        if item is None:
            raise NotFoundError("Water line not found")
        return item

    async def get_item_for_edit(
        self, user: Optional[CurrentUser], construction_id: uuid.UUID
    ) -> Union[ConstructionForEdit, PocaForEdit, WaterLineForEdit]:
        """Edit form for any construction, picked by its type category."""
        require_researcher_or_admin(user)
        async with self._uow_factory() as uow:
            header = await uow.constructions.get_header(construction_id)
            if header is None:
                raise NotFoundError("Construction not found")
            if header.type_category == TypeCategory.POCA.value:
                item = await load_poca_for_edit(uow, construction_id)
            elif header.type_category == TypeCategory.WATER_LINE.value:
                item = await load_water_line_for_edit(uow, construction_id)
            else:
                item = await load_mill_for_edit(uow, construction_id)
        if item is None:
            raise NotFoundError("Construction not found")
        return item
