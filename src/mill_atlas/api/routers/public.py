# src/mill_atlas/api/routers/public.py
"""Anonymous read endpoints. Everything returned here is `published`."""

from __future__ import annotations

import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from mill_atlas.application.services import BibliographyService, PublicQueryService
from mill_atlas.domain.search import DEFAULT_LIMIT
from mill_atlas.domain.types import MillFilters
from mill_atlas.exceptions import NotFoundError

from ..deps import get_bibliography, get_mill_filters, get_public_query, ok

router = APIRouter(tags=["public"])

Locale = Annotated[Optional[str], Query(description="UI locale, e.g. 'pt' or 'en'")]
Filters = Annotated[MillFilters, Depends(get_mill_filters)]
PublicQuery = Annotated[PublicQueryService, Depends(get_public_query)]


@router.get("/mills")
async def list_mills(query: PublicQuery, filters: Filters, locale: Locale = None):
    return ok(await query.get_published_mills(locale, filters))


@router.get("/mills/{slug}")
async def get_mill(slug: str, query: PublicQuery, locale: Locale = None):
    mill = await query.get_mill_by_slug(slug, locale)
    if mill is None:
        raise NotFoundError("Mill not found")
    return ok(mill)


@router.get("/mills/{mill_id}/connected")
async def connected_mills(mill_id: uuid.UUID, query: PublicQuery, locale: Locale = None):
    return ok(await query.get_connected_mills(mill_id, locale))


@router.get("/districts")
async def districts(query: PublicQuery):
    return ok(await query.get_unique_districts())


@router.get("/map")
async def map_data(query: PublicQuery, filters: Filters, locale: Locale = None):
    return ok(await query.get_map_data(locale, filters))


@router.get("/water-lines")
async def water_lines(query: PublicQuery, locale: Locale = None):
    return ok(await query.get_water_lines_list(locale))


@router.get("/water-lines/{slug}")
async def water_line(slug: str, query: PublicQuery, locale: Locale = None):
    line = await query.get_water_line_by_slug(slug, locale)
    if line is None:
        raise NotFoundError("Water line not found")
    return ok(line)


@router.get("/search")
async def search(
    query: PublicQuery,
    q: str = "",
    locale: Locale = None,
    limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_LIMIT,
):
    return ok(await query.search(q, locale, limit))


@router.get("/bibliography")
async def bibliography(service: Annotated[BibliographyService, Depends(get_bibliography)]):
    return ok(await service.list_entries())
