# src/mill_atlas/application/services/_access.py
"""
Identity and role checks.

Callers authenticate with an HS256 bearer JWT issued by the auth provider;
`sub` is the user id. Roles are not trusted from the token: they are read
from `profiles`, and a user without a profile row is `public`.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Optional

import jwt
import structlog

from mill_atlas.domain.i18n import ensure_locale
from mill_atlas.domain.taxonomy import UserRole
from mill_atlas.domain.types import CurrentUser
from mill_atlas.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ValidationError,
)

if TYPE_CHECKING:
    from mill_atlas.config import MillAtlasConfig
    from mill_atlas.interfaces import AuthGateway, UowFactory

logger = structlog.get_logger(__name__)


def is_admin(user: Optional[CurrentUser]) -> bool:
    return user is not None and user.is_admin


def is_researcher_or_admin(user: Optional[CurrentUser]) -> bool:
    return user is not None and user.is_researcher_or_admin


def require_admin(user: Optional[CurrentUser]) -> CurrentUser:
    if user is None:
        raise AuthenticationError("Authentication required")
    if not user.is_admin:
        logger.warning("Admin access denied", user_id=str(user.id), role=user.role.value)
        raise AuthorizationError("Unauthorized: Admin access required")
    return user


def require_researcher_or_admin(user: Optional[CurrentUser]) -> CurrentUser:
    if user is None:
        raise AuthenticationError("Authentication required")
    if not user.is_researcher_or_admin:
        logger.warning(
            "Researcher access denied", user_id=str(user.id), role=user.role.value
        )
        raise AuthorizationError("Unauthorized: Researcher or admin access required")
    return user


def extract_bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Authentication required")
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header")
    token = authorization[len("Bearer ") :].strip()
    if not token:
        raise AuthenticationError("Invalid authorization header")
    return token


class AccessService:
    def __init__(
        self,
        uow_factory: UowFactory,
        config: MillAtlasConfig,
        auth_gateway: AuthGateway | None = None,
    ):
        self._uow_factory = uow_factory
        self._config = config
        self._auth_gateway = auth_gateway

    def decode_token(self, token: str) -> dict[str, Any]:
        secret = self._config.auth.jwt_secret
        if not secret:
            raise ConfigurationError("auth.jwt_secret is not configured")
        audience = self._config.auth.jwt_audience
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                audience=audience,
                leeway=self._config.auth.jwt_leeway,
                options={"verify_aud": audience is not None, "require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token expired") from e
        except jwt.PyJWTError as e:
            logger.debug("Rejected bearer token", error=str(e))
            raise AuthenticationError("Invalid bearer token") from e

    async def get_current_user_role(self, user_id: uuid.UUID) -> UserRole:
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
        return profile.role if profile is not None else UserRole.PUBLIC

    async def authenticate(self, token: str) -> CurrentUser:
        claims = self.decode_token(token)
        try:
            user_id = uuid.UUID(str(claims["sub"]))
        except ValueError as e:
            raise AuthenticationError("Invalid token subject") from e
        role = await self.get_current_user_role(user_id)
        return CurrentUser(id=user_id, email=claims.get("email"), role=role)

    async def sign_in_with_magic_link(self, email: str, locale: Optional[str] = None) -> None:
        email = (email or "").strip()
        if not email or "@" not in email:
            raise ValidationError("Invalid email address")
        loc = ensure_locale(
            locale or self._config.i18n.default_locale, self._config.i18n.locales
        )
        if self._auth_gateway is None:
            raise ConfigurationError("No auth provider configured for magic links")
        redirect = f"{self._config.auth.magic_link_redirect.rstrip('/')}/{loc}/auth/callback"
        await self._auth_gateway.send_magic_link(email, redirect_to=redirect)
        logger.info("Magic link sent", locale=loc)
