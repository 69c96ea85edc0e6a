# tests/unit/application/test_access.py
"""Bearer-token authentication, role lookup and role guards."""

from __future__ import annotations

import time
import uuid

import jwt
import pytest

from mill_atlas.application.services import (
    AccessService,
    extract_bearer,
    require_admin,
    require_researcher_or_admin,
)
from mill_atlas.domain.taxonomy import UserRole
from mill_atlas.domain.types import Profile
from mill_atlas.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    InvalidLocaleError,
    ValidationError,
)

from tests.helpers.fakes import (
    TEST_JWT_SECRET,
    FakeAuthGateway,
    FakeProfileRepository,
    FakeUnitOfWork,
)


def _token(sub: str, *, secret: str = TEST_JWT_SECRET, exp_offset: int = 3600, **claims) -> str:
    payload = {"sub": sub, "exp": int(time.time()) + exp_offset, "aud": "authenticated"}
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def admin_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def uow(admin_id) -> FakeUnitOfWork:
    profiles = FakeProfileRepository({admin_id: Profile(id=admin_id, role=UserRole.ADMIN)})
    return FakeUnitOfWork(profiles=profiles)


@pytest.fixture
def gateway() -> FakeAuthGateway:
    return FakeAuthGateway()


@pytest.fixture
def access(uow, test_config, gateway) -> AccessService:
    return AccessService(uow.factory(), test_config, auth_gateway=gateway)


class TestExtractBearer:
    def test_ok(self):
        assert extract_bearer("Bearer abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic xyz", "Bearer ", "bearer abc"])
    def test_rejected(self, header):
        with pytest.raises(AuthenticationError):
            extract_bearer(header)


class TestGuards:
    def test_anonymous_is_unauthenticated(self):
        with pytest.raises(AuthenticationError):
            require_admin(None)
        with pytest.raises(AuthenticationError):
            require_researcher_or_admin(None)

    def test_researcher_is_not_admin(self, make_user):
        with pytest.raises(AuthorizationError, match="Admin access required"):
            require_admin(make_user(UserRole.RESEARCHER))

    def test_public_is_not_researcher(self, make_user):
        with pytest.raises(AuthorizationError):
            require_researcher_or_admin(make_user(UserRole.PUBLIC))

    def test_allowed(self, make_user):
        admin = make_user(UserRole.ADMIN)
        assert require_admin(admin) is admin
        assert require_researcher_or_admin(admin) is admin


class TestAuthenticate:
    async def test_role_comes_from_profile(self, access, admin_id):
        user = await access.authenticate(_token(str(admin_id), email="a@b.pt", role="public"))
        assert user.id == admin_id
        assert user.role is UserRole.ADMIN
        assert user.email == "a@b.pt"

    async def test_missing_profile_is_public(self, access):
        user = await access.authenticate(_token(str(uuid.uuid4())))
        assert user.role is UserRole.PUBLIC

    async def test_expired(self, access, admin_id):
        with pytest.raises(AuthenticationError, match="expired"):
            await access.authenticate(_token(str(admin_id), exp_offset=-3600))

    async def test_wrong_secret(self, access, admin_id):
        with pytest.raises(AuthenticationError):
            await access.authenticate(_token(str(admin_id), secret="another-secret-of-enough-length"))

    async def test_wrong_audience(self, access, admin_id):
        with pytest.raises(AuthenticationError):
            await access.authenticate(_token(str(admin_id), aud="someone-else"))

    async def test_subject_must_be_uuid(self, access):
        with pytest.raises(AuthenticationError, match="subject"):
            await access.authenticate(_token("not-a-uuid"))

    async def test_no_secret_configured(self, uow, test_config):
        config = test_config.model_copy(
            update={"auth": test_config.auth.model_copy(update={"jwt_secret": None})}
        )
        service = AccessService(uow.factory(), config)
        with pytest.raises(ConfigurationError):
            service.decode_token("whatever")


class TestMagicLink:
    async def test_redirect_includes_locale(self, access, gateway):
        await access.sign_in_with_magic_link(" user@example.pt ", "en")
        assert gateway.sent == [("user@example.pt", "https://atlas.test/en/auth/callback")]

    async def test_default_locale(self, access, gateway):
        await access.sign_in_with_magic_link("user@example.pt")
        assert gateway.sent[0][1] == "https://atlas.test/pt/auth/callback"

    async def test_invalid_email(self, access, gateway):
        with pytest.raises(ValidationError, match="Invalid email address"):
            await access.sign_in_with_magic_link("not-an-email")
        assert gateway.sent == []

    async def test_invalid_locale(self, access):
        with pytest.raises(InvalidLocaleError):
            await access.sign_in_with_magic_link("user@example.pt", "fr")

    async def test_no_gateway(self, uow, test_config):
        service = AccessService(uow.factory(), test_config)
        with pytest.raises(ConfigurationError):
            await service.sign_in_with_magic_link("user@example.pt")
