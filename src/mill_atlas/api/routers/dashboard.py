# src/mill_atlas/api/routers/dashboard.py
"""
Researcher and admin endpoints. Every route forwards the caller to the
service, which enforces the role; anonymous requests end up as 401.
"""

from __future__ import annotations

import uuid
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel

from mill_atlas.application.services import (
    AuthoringService,
    BibliographyService,
    MediaService,
    ReviewService,
    require_researcher_or_admin,
)
from mill_atlas.domain.types import (
    BibliographyInput,
    CurrentUser,
    MillInput,
    PocaInput,
    WaterLineInput,
)

from ..deps import (
    get_authoring,
    get_bibliography,
    get_current_user,
    get_media,
    get_review,
    ok,
)

router = APIRouter(tags=["dashboard"])

User = Annotated[Optional[CurrentUser], Depends(get_current_user)]
Authoring = Annotated[AuthoringService, Depends(get_authoring)]
Review = Annotated[ReviewService, Depends(get_review)]
Locale = Annotated[Optional[str], Query()]


class StatusUpdate(BaseModel):
    status: str


# --- authoring ---


@router.post("/mills", status_code=201)
async def create_mill(data: MillInput, user: User, authoring: Authoring):
    return ok(await authoring.create_mill(user, data))


@router.put("/mills/{construction_id}")
async def update_mill(
    construction_id: uuid.UUID, data: MillInput, user: User, authoring: Authoring
):
    return ok(await authoring.update_mill(user, construction_id, data))


@router.get("/constructions/{construction_id}/edit")
async def construction_for_edit(construction_id: uuid.UUID, user: User, authoring: Authoring):
    return ok(await authoring.get_item_for_edit(user, construction_id))


@router.post("/pocas", status_code=201)
async def create_poca(data: PocaInput, user: User, authoring: Authoring):
    return ok(await authoring.create_poca(user, data))


@router.put("/pocas/{construction_id}")
async def update_poca(
    construction_id: uuid.UUID, data: PocaInput, user: User, authoring: Authoring
):
    return ok(await authoring.update_poca(user, construction_id, data))


@router.post("/water-lines", status_code=201)
async def create_water_line(data: WaterLineInput, user: User, authoring: Authoring):
    return ok(await authoring.create_water_line(user, data))


@router.put("/water-lines/{construction_id}")
async def update_water_line(
    construction_id: uuid.UUID, data: WaterLineInput, user: User, authoring: Authoring
):
    return ok(await authoring.update_water_line(user, construction_id, data))


# --- review and inventory ---


@router.get("/review")
async def review_queue(user: User, review: Review, locale: Locale = None):
    return ok(await review.get_review_queue(user, locale))


@router.get("/review/{slug}")
async def review_detail(slug: str, user: User, review: Review, locale: Locale = None):
    return ok(await review.get_construction_for_review(user, slug, locale))


@router.patch("/constructions/{construction_id}/status")
async def update_status(
    construction_id: uuid.UUID, body: StatusUpdate, user: User, review: Review
):
    return ok(await review.update_construction_status(user, construction_id, body.status))


@router.delete("/constructions/{construction_id}")
async def delete_construction(construction_id: uuid.UUID, user: User, review: Review):
    await review.delete_construction(user, construction_id)
    return ok()


@router.get("/inventory")
async def inventory(
    user: User,
    review: Review,
    locale: Locale = None,
    type: Literal["ALL", "MILL", "LEVADA", "POCA"] = "ALL",
    status: str = "ALL",
    search: Optional[str] = None,
):
    return ok(
        await review.get_inventory_items(
            user, locale, type_filter=type, status=status, search=search
        )
    )


@router.get("/constructions/{construction_id}/type")
async def construction_type(construction_id: uuid.UUID, user: User, review: Review):
    return ok(await review.get_item_type_by_id(user, construction_id))


# --- bibliography ---


@router.post("/bibliography", status_code=201)
async def create_bibliography_entry(
    data: BibliographyInput,
    user: User,
    service: Annotated[BibliographyService, Depends(get_bibliography)],
):
    return ok(await service.create_entry(user, data))


@router.delete("/bibliography/{entry_id}")
async def delete_bibliography_entry(
    entry_id: uuid.UUID,
    user: User,
    service: Annotated[BibliographyService, Depends(get_bibliography)],
):
    await service.delete_entry(user, entry_id)
    return ok()


# --- media ---


@router.post("/media/images", status_code=201)
async def upload_image(
    user: User,
    media: Annotated[MediaService, Depends(get_media)],
    file: UploadFile = File(...),
    slug: Optional[str] = Form(None),
    prefix: Optional[str] = Form(None),
):
    require_researcher_or_admin(user)
    # one byte past the limit is enough for the size check to reject it
    data = await file.read(media.file_size_limit + 1)
    path = await media.upload_construction_file(
        user,
        filename=file.filename or "upload",
        content_type=file.content_type,
        data=data,
        slug=slug,
        prefix=prefix,
    )
    return ok({"path": path, "url": media.get_public_url(path)})


@router.post("/media/icons", status_code=201)
async def upload_icon(
    user: User,
    media: Annotated[MediaService, Depends(get_media)],
    file: UploadFile = File(...),
    slug: Optional[str] = Form(None),
):
    require_researcher_or_admin(user)
    data = await file.read(media.svg_size_limit + 1)
    url = await media.upload_map_icon(
        user,
        filename=file.filename or "icon.svg",
        content_type=file.content_type,
        data=data,
        slug=slug,
    )
    return ok({"url": url})
