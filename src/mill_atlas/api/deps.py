# src/mill_atlas/api/deps.py
"""
FastAPI dependencies: services come from the DI container stored on
`app.state.container`; tests swap them with `app.dependency_overrides`.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from fastapi import Depends, Header, Query, Request

from mill_atlas.application.services import (
    AccessService,
    AuthoringService,
    BibliographyService,
    MediaService,
    PublicQueryService,
    ReviewService,
    extract_bearer,
)
from mill_atlas.domain.taxonomy import (
    Access,
    ConstructionTechnique,
    CurrentUse,
    Epoch,
    ExteriorFinish,
    LegalProtection,
    MotiveApparatus,
    PlanShape,
    PropertyStatus,
    RoofMaterial,
    RoofShape,
    Setting,
    Typology,
    Volumetry,
)
from mill_atlas.domain.types import CurrentUser, MillFilters


def ok(data: Any = None) -> dict[str, Any]:
    return {"success": True, "data": data}


def _services(request: Request):
    return request.app.state.container.services


def get_public_query(request: Request) -> PublicQueryService:
    return _services(request).public_query()


def get_review(request: Request) -> ReviewService:
    return _services(request).review()


def get_authoring(request: Request) -> AuthoringService:
    return _services(request).authoring()


def get_bibliography(request: Request) -> BibliographyService:
    return _services(request).bibliography()


def get_media(request: Request) -> MediaService:
    return _services(request).media()


def get_access(request: Request) -> AccessService:
    return _services(request).access()


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    access: AccessService = Depends(get_access),
) -> Optional[CurrentUser]:
    """None for anonymous callers; a malformed or expired token is rejected."""
    if authorization is None:
        return None
    return await access.authenticate(extract_bearer(authorization))


def get_mill_filters(
    typology: Annotated[list[Typology], Query()] = [],
    roof_material: Annotated[list[RoofMaterial], Query()] = [],
    roof_shape: Annotated[list[RoofShape], Query()] = [],
    access: Annotated[list[Access], Query()] = [],
    motive_apparatus: Annotated[list[MotiveApparatus], Query()] = [],
    epoch: Annotated[list[Epoch], Query()] = [],
    current_use: Annotated[list[CurrentUse], Query()] = [],
    setting: Annotated[list[Setting], Query()] = [],
    legal_protection: Annotated[list[LegalProtection], Query()] = [],
    property_status: Annotated[list[PropertyStatus], Query()] = [],
    construction_technique: Annotated[list[ConstructionTechnique], Query()] = [],
    plan_shape: Annotated[list[PlanShape], Query()] = [],
    volumetry: Annotated[list[Volumetry], Query()] = [],
    exterior_finish: Annotated[list[ExteriorFinish], Query()] = [],
    district: Optional[str] = None,
) -> MillFilters:
    """Repeated query keys (`?typology=azenha&typology=rodizio`) become one filter list."""
    return MillFilters(
        typology=typology,
        roof_material=roof_material,
        roof_shape=roof_shape,
        access=access,
        motive_apparatus=motive_apparatus,
        epoch=epoch,
        current_use=current_use,
        setting=setting,
        legal_protection=legal_protection,
        property_status=property_status,
        construction_technique=construction_technique,
        plan_shape=plan_shape,
        volumetry=volumetry,
        exterior_finish=exterior_finish,
        district=district or None,
    )
