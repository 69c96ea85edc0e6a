# tests/unit/application/test_review.py
from __future__ import annotations

import uuid

import pytest

from mill_atlas.application.services import PublicQueryService, ReviewService
from mill_atlas.application.services._review import parse_status
from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory, UserRole
from mill_atlas.domain.types import ConstructionHeader
from mill_atlas.exceptions import AuthorizationError, NotFoundError, ValidationError
from mill_atlas.infrastructure.cache import MemoryCacheHandler

from tests.helpers.fakes import FakeUnitOfWork


class FakeConstructions:
    def __init__(self):
        self.statuses: dict[uuid.UUID, ConstructionStatus] = {}
        self.inventory_calls: list[dict] = []

    async def set_status(self, construction_id, status) -> bool:
        if construction_id not in self.statuses:
            return False
        self.statuses[construction_id] = status
        return True

    async def delete(self, construction_id) -> bool:
        return self.statuses.pop(construction_id, None) is not None

    async def get_header(self, construction_id):
        if construction_id not in self.statuses:
            return None
        return ConstructionHeader(
            id=construction_id,
            slug="x",
            status=self.statuses[construction_id],
            type_category=TypeCategory.POCA.value,
        )

    async def list_inventory(self, locale, *, category, status, search):
        self.inventory_calls.append(
            {"locale": locale, "category": category, "status": status, "search": search}
        )
        return []


@pytest.fixture
def existing_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def uow(existing_id) -> FakeUnitOfWork:
    uow = FakeUnitOfWork(constructions=FakeConstructions())
    uow.constructions.statuses[existing_id] = ConstructionStatus.REVIEW
    return uow


@pytest.fixture
def cache() -> MemoryCacheHandler:
    return MemoryCacheHandler()


@pytest.fixture
def service(uow, test_config, cache) -> ReviewService:
    public = PublicQueryService(uow.factory(), test_config, cache)
    return ReviewService(uow.factory(), test_config, public, cache)


class TestParseStatus:
    def test_valid(self):
        assert parse_status("published") is ConstructionStatus.PUBLISHED

    def test_invalid(self):
        with pytest.raises(ValidationError, match="Invalid status value"):
            parse_status("archived")


class TestStatusChange:
    async def test_admin_publishes(self, service, uow, existing_id, cache, make_user):
        await cache.set("map:pt:{}", "stale")
        change = await service.update_construction_status(
            make_user(UserRole.ADMIN), existing_id, "published"
        )
        assert change.status is ConstructionStatus.PUBLISHED
        assert uow.constructions.statuses[existing_id] is ConstructionStatus.PUBLISHED
        assert len(cache) == 0

    async def test_researcher_forbidden(self, service, existing_id, make_user):
        with pytest.raises(AuthorizationError):
            await service.update_construction_status(
                make_user(UserRole.RESEARCHER), existing_id, "published"
            )

    async def test_invalid_value_checked_after_role(self, service, existing_id, make_user):
        with pytest.raises(ValidationError):
            await service.update_construction_status(make_user(UserRole.ADMIN), existing_id, "x")

    async def test_missing(self, service, make_user):
        with pytest.raises(NotFoundError, match="Construction not found"):
            await service.update_construction_status(
                make_user(UserRole.ADMIN), uuid.uuid4(), "draft"
            )


class TestInventory:
    async def test_filters_are_translated(self, service, uow, make_user):
        await service.get_inventory_items(
            make_user(UserRole.ADMIN), "en", type_filter="LEVADA", status="review", search=""
        )
        call = uow.constructions.inventory_calls[0]
        assert call == {
            "locale": "en",
            "category": TypeCategory.WATER_LINE,
            "status": ConstructionStatus.REVIEW,
            "search": None,
        }

    async def test_all_means_no_filter(self, service, uow, make_user):
        await service.get_inventory_items(make_user(UserRole.ADMIN))
        call = uow.constructions.inventory_calls[0]
        assert call["category"] is None and call["status"] is None

    async def test_bad_type_filter(self, service, make_user):
        with pytest.raises(ValidationError):
            await service.get_inventory_items(make_user(UserRole.ADMIN), type_filter="CASTLE")


class TestDeleteAndType:
    async def test_delete(self, service, uow, existing_id, make_user):
        await service.delete_construction(make_user(UserRole.ADMIN), existing_id)
        assert existing_id not in uow.constructions.statuses
        with pytest.raises(NotFoundError):
            await service.delete_construction(make_user(UserRole.ADMIN), existing_id)

    async def test_item_type(self, service, existing_id, make_user):
        assert await service.get_item_type_by_id(make_user(UserRole.ADMIN), existing_id) is TypeCategory.POCA
