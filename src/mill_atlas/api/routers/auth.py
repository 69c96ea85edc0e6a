# src/mill_atlas/api/routers/auth.py
from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mill_atlas.application.services import AccessService
from mill_atlas.domain.types import CurrentUser
from mill_atlas.exceptions import AuthenticationError

from ..deps import get_access, get_current_user, ok

router = APIRouter(tags=["auth"])


class MagicLinkRequest(BaseModel):
    email: str
    locale: Optional[str] = None


@router.post("/magic-link")
async def magic_link(
    body: MagicLinkRequest,
    access: Annotated[AccessService, Depends(get_access)],
):
    await access.sign_in_with_magic_link(body.email, body.locale)
    return ok()


@router.get("/me")
async def me(user: Annotated[Optional[CurrentUser], Depends(get_current_user)]):
    if user is None:
        raise AuthenticationError("Authentication required")
    return ok(user)
