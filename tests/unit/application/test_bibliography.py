# tests/unit/application/test_bibliography.py
from __future__ import annotations

import uuid

import pytest

from mill_atlas.application.services import BibliographyService
from mill_atlas.domain.taxonomy import UserRole
from mill_atlas.domain.types import BibliographyInput
from mill_atlas.exceptions import AuthorizationError, NotFoundError

from tests.helpers.fakes import FakeUnitOfWork


@pytest.fixture
def service() -> BibliographyService:
    return BibliographyService(FakeUnitOfWork().factory())


async def test_create_list_delete(service, make_user):
    user = make_user(UserRole.RESEARCHER)
    older = await service.create_entry(user, BibliographyInput(title="Azenhas", author="Silva", year=1990))
    newer = await service.create_entry(user, BibliographyInput(title="Levadas", author="Costa", year=2010))
    undated = await service.create_entry(user, BibliographyInput(title="Notas", author="Anon"))

    entries = await service.list_entries()
    assert [e.id for e in entries] == [newer.id, older.id, undated.id]

    await service.delete_entry(user, older.id)
    assert older.id not in {e.id for e in await service.list_entries()}


async def test_public_user_cannot_create(service, make_user):
    with pytest.raises(AuthorizationError):
        await service.create_entry(make_user(UserRole.PUBLIC), BibliographyInput(title="T", author="A"))


async def test_delete_missing(service, make_user):
    with pytest.raises(NotFoundError, match="Bibliography entry not found"):
        await service.delete_entry(make_user(UserRole.ADMIN), uuid.uuid4())
