# src/mill_atlas/application/services/_edit_loaders.py
"""Form-shaped loaders shared by the authoring and review services."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from mill_atlas.domain.geo import parse_linestring_wkt
from mill_atlas.domain.types import ConstructionForEdit, PocaForEdit, WaterLineForEdit

if TYPE_CHECKING:
    from mill_atlas.interfaces import IUnitOfWork


async def load_mill_for_edit(
    uow: IUnitOfWork, construction_id: uuid.UUID
) -> Optional[ConstructionForEdit]:
    row = await uow.mills.get_for_edit(construction_id)
    if row is None:
        return None
    translations = await uow.constructions.get_translations([construction_id])
    data = dict(row)
    data.update(
        latitude=row["lat"],
        longitude=row["lng"],
        gallery_images=row["gallery_images"] or [],
        translations=translations[construction_id],
    )
    return ConstructionForEdit.model_validate(data)


async def load_poca_for_edit(
    uow: IUnitOfWork, construction_id: uuid.UUID
) -> Optional[PocaForEdit]:
    row = await uow.pocas.get_for_edit(construction_id)
    if row is None:
        return None
    translations = await uow.constructions.get_translations([construction_id])
    return PocaForEdit(
        id=row["id"],
        slug=row["slug"],
        status=row["status"],
        latitude=row["lat"],
        longitude=row["lng"],
        water_line_id=row["water_line_id"],
        translations=translations[construction_id],
    )


async def load_water_line_for_edit(
    uow: IUnitOfWork, construction_id: uuid.UUID
) -> Optional[WaterLineForEdit]:
    """Keyed by the parent construction id, as listed in the inventory."""
    header = await uow.constructions.get_header(construction_id)
    if header is None:
        return None
    row = await uow.water_lines.get_by_construction(construction_id)
    if row is None:
        return None
    translations = await uow.water_lines.get_translations([row["id"]])
    return WaterLineForEdit(
        id=row["id"],
        construction_id=construction_id,
        slug=row["slug"],
        status=header.status,
        color=row["color"],
        path=parse_linestring_wkt(row["path_wkt"]),
        translations=translations[row["id"]],
    )
