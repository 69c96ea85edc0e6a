# tests/unit/application/test_authoring.py
"""Drafting rules: who may write, what status is stored, slug allocation."""

from __future__ import annotations

import uuid
from typing import Any, Optional

import pytest

from mill_atlas.application.services import AuthoringService, effective_status
from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory, UserRole
from mill_atlas.domain.types import ConstructionHeader, MillInput, PocaInput, WaterLineInput
from mill_atlas.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from mill_atlas.infrastructure.cache import MemoryCacheHandler

from tests.helpers.fakes import FakeUnitOfWork


class InMemoryConstructions:
    def __init__(self):
        self.rows: dict[uuid.UUID, dict[str, Any]] = {}
        self.translations: dict[tuple[uuid.UUID, str], dict[str, Any]] = {}

    async def slug_exists(self, slug: str) -> bool:
        return any(r["slug"] == slug for r in self.rows.values())

    async def add(self, *, slug: str, type_category: str, **values: Any) -> uuid.UUID:
        cid = uuid.uuid4()
        self.rows[cid] = {"id": cid, "slug": slug, "type_category": type_category, **values}
        return cid

    async def update_fields(self, construction_id: uuid.UUID, **values: Any) -> None:
        self.rows[construction_id].update(values)

    async def upsert_translation(self, construction_id, locale, **values) -> None:
        self.translations[(construction_id, locale)] = values

    async def get_header(self, construction_id) -> Optional[ConstructionHeader]:
        row = self.rows.get(construction_id)
        if row is None:
            return None
        return ConstructionHeader(
            id=row["id"],
            slug=row["slug"],
            status=row["status"],
            type_category=row["type_category"],
            created_by=row.get("created_by"),
        )


class InMemoryMills:
    def __init__(self):
        self.rows: dict[uuid.UUID, dict[str, Any]] = {}

    async def add(self, construction_id, attributes) -> None:
        self.rows[construction_id] = dict(attributes)

    async def update(self, construction_id, attributes) -> None:
        self.rows[construction_id] = dict(attributes)


class InMemoryWaterLines:
    def __init__(self, existing: set[uuid.UUID] = frozenset(), slugs: set[str] = frozenset()):
        self.ids = set(existing)
        self.slugs = set(slugs)
        self.added: list[dict[str, Any]] = []
        self.translations: dict[tuple[uuid.UUID, str], dict[str, Any]] = {}

    async def exists(self, water_line_id) -> bool:
        return water_line_id in self.ids

    async def slug_exists(self, slug: str) -> bool:
        return slug in self.slugs

    async def add(self, *, slug, path_wkt, color, construction_id) -> uuid.UUID:
        wl_id = uuid.uuid4()
        self.ids.add(wl_id)
        self.slugs.add(slug)
        self.added.append(
            {"id": wl_id, "slug": slug, "path_wkt": path_wkt, "color": color,
             "construction_id": construction_id}
        )
        return wl_id

    async def upsert_translation(self, water_line_id, locale, name, description=None) -> None:
        self.translations[(water_line_id, locale)] = {"name": name, "description": description}


class InMemoryPocas:
    def __init__(self):
        self.rows: dict[uuid.UUID, uuid.UUID] = {}

    async def add(self, construction_id, water_line_id) -> None:
        self.rows[construction_id] = water_line_id


@pytest.fixture
def water_line_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def uow(water_line_id) -> FakeUnitOfWork:
    return FakeUnitOfWork(
        constructions=InMemoryConstructions(),
        mills=InMemoryMills(),
        water_lines=InMemoryWaterLines({water_line_id}, {"levada-existente"}),
        pocas=InMemoryPocas(),
    )


@pytest.fixture
def cache() -> MemoryCacheHandler:
    return MemoryCacheHandler()


@pytest.fixture
def service(uow, test_config, cache) -> AuthoringService:
    return AuthoringService(uow.factory(), test_config, cache)


def _mill_input(**overrides) -> MillInput:
    data = {"title": "Moinho da Ponte", "latitude": 41.2, "longitude": -8.5, "typology": "rodizio"}
    data.update(overrides)
    return MillInput.model_validate(data)


class TestEffectiveStatus:
    def test_admin_can_publish(self, make_user):
        admin = make_user(UserRole.ADMIN)
        assert effective_status(admin, ConstructionStatus.PUBLISHED) is ConstructionStatus.PUBLISHED

    def test_researcher_publish_is_lowered_to_draft(self, make_user):
        researcher = make_user(UserRole.RESEARCHER)
        assert effective_status(researcher, ConstructionStatus.PUBLISHED) is ConstructionStatus.DRAFT

    @pytest.mark.parametrize("status", [ConstructionStatus.DRAFT, ConstructionStatus.REVIEW])
    def test_researcher_other_statuses_kept(self, make_user, status):
        assert effective_status(make_user(UserRole.RESEARCHER), status) is status


class TestCreateMill:
    async def test_anonymous_rejected(self, service):
        with pytest.raises(AuthenticationError):
            await service.create_mill(None, _mill_input())

    async def test_public_user_rejected(self, service, make_user):
        with pytest.raises(AuthorizationError):
            await service.create_mill(make_user(UserRole.PUBLIC), _mill_input())

    async def test_researcher_creates_draft(self, service, uow, make_user):
        user = make_user(UserRole.RESEARCHER)
        header = await service.create_mill(user, _mill_input(status="published"))
        assert header.slug == "moinho-da-ponte"
        assert header.status is ConstructionStatus.DRAFT
        assert header.type_category == TypeCategory.MILL.value
        row = uow.constructions.rows[header.id]
        assert row["geom"] == "POINT(-8.5 41.2)"
        assert row["created_by"] == user.id
        assert uow.mills.rows[header.id]["typology"] == "rodizio"
        assert uow.constructions.translations[(header.id, "pt")]["title"] == "Moinho da Ponte"

    async def test_admin_publishes(self, service, make_user):
        header = await service.create_mill(make_user(UserRole.ADMIN), _mill_input(status="published"))
        assert header.status is ConstructionStatus.PUBLISHED

    async def test_slug_gets_suffix(self, service, make_user):
        user = make_user(UserRole.RESEARCHER)
        first = await service.create_mill(user, _mill_input())
        second = await service.create_mill(user, _mill_input())
        assert (first.slug, second.slug) == ("moinho-da-ponte", "moinho-da-ponte-1")

    async def test_unknown_water_line(self, service, make_user):
        with pytest.raises(ValidationError, match="Water line not found"):
            await service.create_mill(
                make_user(UserRole.RESEARCHER), _mill_input(water_line_id=str(uuid.uuid4()))
            )

    async def test_invalid_locale(self, service, make_user):
        with pytest.raises(ValueError):
            await service.create_mill(make_user(UserRole.RESEARCHER), _mill_input(locale="fr"))

    async def test_clears_public_cache(self, service, cache, make_user):
        await cache.set("map:pt:{}", "stale")
        await service.create_mill(make_user(UserRole.RESEARCHER), _mill_input())
        assert await cache.get("map:pt:{}") is None


class TestUpdateMill:
    async def test_missing(self, service, make_user):
        with pytest.raises(NotFoundError):
            await service.update_mill(make_user(UserRole.ADMIN), uuid.uuid4(), _mill_input())

    async def test_researcher_cannot_publish_on_edit(self, service, uow, make_user):
        user = make_user(UserRole.RESEARCHER)
        header = await service.create_mill(user, _mill_input())
        updated = await service.update_mill(
            user, header.id, _mill_input(title="Moinho Novo", status="published", locale="en")
        )
        assert updated.status is ConstructionStatus.DRAFT
        # slug is stable across edits
        assert updated.slug == "moinho-da-ponte"
        assert uow.constructions.translations[(header.id, "en")]["title"] == "Moinho Novo"


class TestWaterLinesAndPocas:
    async def test_create_water_line(self, service, uow, make_user):
        data = WaterLineInput(name="Levada Nova", path=[[41.0, -8.0], [41.1, -8.1]])
        header = await service.create_water_line(make_user(UserRole.RESEARCHER), data)
        assert header.type_category == TypeCategory.WATER_LINE.value
        added = uow.water_lines.added[0]
        assert added["construction_id"] == header.id
        assert added["path_wkt"] == "LINESTRING(-8.0 41.0, -8.1 41.1)"
        assert uow.constructions.rows[header.id]["geom"] == "POINT(-8.0 41.0)"

    async def test_water_line_slug_avoids_existing_lines(self, service, make_user):
        data = WaterLineInput(name="Levada Existente", path=[[41.0, -8.0], [41.1, -8.1]])
        header = await service.create_water_line(make_user(UserRole.RESEARCHER), data)
        assert header.slug == "levada-existente-1"

    async def test_create_poca(self, service, uow, water_line_id, make_user):
        data = PocaInput(title="Poça Nova", latitude=41, longitude=-8, water_line_id=water_line_id)
        header = await service.create_poca(make_user(UserRole.RESEARCHER), data)
        assert header.type_category == TypeCategory.POCA.value
        assert uow.pocas.rows[header.id] == water_line_id

    async def test_poca_needs_existing_water_line(self, service, make_user):
        data = PocaInput(title="Poça", latitude=41, longitude=-8, water_line_id=uuid.uuid4())
        with pytest.raises(ValidationError, match="Water line not found"):
            await service.create_poca(make_user(UserRole.RESEARCHER), data)

    async def test_blank_title_falls_back(self, service, make_user):
        data = WaterLineInput(name="!!!", path=[[41.0, -8.0], [41.1, -8.1]])
        header = await service.create_water_line(make_user(UserRole.RESEARCHER), data)
        assert header.slug == "construction"
