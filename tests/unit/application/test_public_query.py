# tests/unit/application/test_public_query.py
"""Public read layer over fake repositories: filtering of bad rows, caching, search."""

from __future__ import annotations

import asyncio
import uuid
from collections import defaultdict
from typing import Any

import pytest

from mill_atlas.application.services import PublicQueryService
from mill_atlas.domain.types import MillFilters, TranslationText, WaterLineTranslationText
from mill_atlas.exceptions import InvalidLocaleError
from mill_atlas.infrastructure.cache import MemoryCacheHandler

from tests.helpers.fakes import FakeUnitOfWork

WL_ID = uuid.uuid4()
MILL_ID = uuid.uuid4()
OTHER_MILL_ID = uuid.uuid4()


def _mill_row(mill_id: uuid.UUID, slug: str, lat: Any = 41.15, lng: Any = -8.61, **extra) -> dict:
    row = {
        "id": mill_id,
        "slug": slug,
        "lat": lat,
        "lng": lng,
        "typology": "rodizio",
        "district": "Porto",
        "gallery_images": None,
        "water_line_id": WL_ID,
        "title": slug.replace("-", " ").title(),
    }
    row.update(extra)
    return row


class FakeMills:
    def __init__(self):
        self.calls = 0
        self.rows = [
            _mill_row(MILL_ID, "moinho-a"),
            _mill_row(OTHER_MILL_ID, "moinho-b"),
            _mill_row(uuid.uuid4(), "moinho-partido", lat=None, lng=None),
        ]

    async def list_published(self, locale, filters):
        self.calls += 1
        return self.rows

    async def list_published_districts(self):
        return ["Porto", "Braga", None, "", "   ", "Porto", "Viana do Castelo "]

    async def get_water_line_id(self, mill_id):
        return WL_ID if mill_id in (MILL_ID, OTHER_MILL_ID) else None

    async def list_published_on_water_line(self, water_line_id, locale, exclude_id=None):
        return [r for r in self.rows if r["id"] != exclude_id]

    async def get_detail(self, locale, *, published_only=True, slug=None, construction_id=None):
        for r in self.rows:
            if r["slug"] == slug or r["id"] == construction_id:
                return {**r, "status": "published", "water_line_slug": "levada-x"}
        return None

    async def list_searchable(self):
        return [{k: v for k, v in r.items() if k != "title"} for r in self.rows[:1]]


class GatedMills(FakeMills):
    """Holds list_published open until the test releases it."""

    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def list_published(self, locale, filters):
        self.calls += 1
        rows = list(self.rows)
        self.started.set()
        await self.release.wait()
        return rows


class FakeWaterLines:
    def __init__(self):
        self.rows = [
            {"id": WL_ID, "slug": "levada-x", "color": "#3b82f6",
             "path_wkt": "LINESTRING(-8.61 41.15, -8.62 41.16)"},
            {"id": uuid.uuid4(), "slug": "levada-curta", "color": "#000000",
             "path_wkt": "LINESTRING(-8.61 41.15)"},
        ]

    async def list_published(self):
        return self.rows

    async def get_published_by_slug(self, slug):
        return next((r for r in self.rows if r["slug"] == slug), None)

    async def get_translations(self, ids):
        result = defaultdict(list)
        result[WL_ID] = [
            WaterLineTranslationText(lang_code="pt", name="Levada do Xisto"),
            WaterLineTranslationText(lang_code="en", name="Schist Levada"),
        ]
        return result


class FakePocas:
    async def list_published(self, locale=None):
        return [
            {"id": uuid.uuid4(), "slug": "poca-1", "lat": 41.1, "lng": -8.6, "title": "Poça 1",
             "water_line_id": WL_ID, "water_line_slug": "levada-x", "status": "published"},
            {"id": uuid.uuid4(), "slug": "poca-fora", "lat": 200, "lng": -8.6, "title": "Fora",
             "water_line_id": WL_ID, "water_line_slug": "levada-x", "status": "published"},
        ]


class FakeConstructions:
    async def get_translations(self, ids):
        result = defaultdict(list)
        result[MILL_ID] = [TranslationText(lang_code="pt", title="Moinho A")]
        return result


@pytest.fixture
def uow() -> FakeUnitOfWork:
    return FakeUnitOfWork(
        mills=FakeMills(),
        water_lines=FakeWaterLines(),
        pocas=FakePocas(),
        constructions=FakeConstructions(),
    )


@pytest.fixture
def cache() -> MemoryCacheHandler:
    return MemoryCacheHandler()


@pytest.fixture
def service(uow, test_config, cache) -> PublicQueryService:
    return PublicQueryService(uow.factory(), test_config, cache)


class TestMills:
    async def test_invalid_coordinates_are_skipped(self, service):
        mills = await service.get_published_mills("pt")
        assert [m.slug for m in mills] == ["moinho-a", "moinho-b"]
        assert mills[0].gallery_images == []

    async def test_invalid_locale(self, service):
        with pytest.raises(InvalidLocaleError):
            await service.get_published_mills("de")

    async def test_detail_resolves_water_line_name(self, service):
        mill = await service.get_mill_by_slug("moinho-a", "en")
        assert mill is not None
        assert mill.water_line_name == "Schist Levada"
        assert mill.water_line_slug == "levada-x"

    async def test_detail_missing(self, service):
        assert await service.get_mill_by_slug("nope") is None

    async def test_broken_detail_is_hidden(self, service):
        assert await service.get_mill_by_slug("moinho-partido") is None

    async def test_connected_excludes_self(self, service):
        mills = await service.get_connected_mills(MILL_ID)
        assert [m.slug for m in mills] == ["moinho-b"]

    async def test_connected_without_water_line(self, service):
        assert await service.get_connected_mills(uuid.uuid4()) == []

    async def test_districts_sorted_unique(self, service):
        # stored values come back as stored so they still match the filter column
        assert await service.get_unique_districts() == ["Braga", "Porto", "Viana do Castelo "]


class TestMapData:
    async def test_skips_bad_records(self, service):
        data = await service.get_map_data("pt")
        assert [m.slug for m in data.mills] == ["moinho-a", "moinho-b"]
        assert [p.slug for p in data.pocas] == ["poca-1"]
        assert [w.slug for w in data.water_lines] == ["levada-x"]
        assert data.water_lines[0].name == "Levada do Xisto"
        assert data.water_lines[0].path == [[41.15, -8.61], [41.16, -8.62]]

    async def test_cached_per_locale_and_filters(self, service, uow, cache):
        await service.get_map_data("pt")
        await service.get_map_data("pt")
        assert uow.mills.calls == 1
        await service.get_map_data("en")
        await service.get_map_data("pt", MillFilters(district="Porto"))
        assert uow.mills.calls == 3
        await cache.clear()
        await service.get_map_data("pt")
        assert uow.mills.calls == 4


    async def test_clear_during_load_does_not_cache_stale_data(self, uow, test_config, cache):
        mills = GatedMills()
        uow.mills = mills
        service = PublicQueryService(uow.factory(), test_config, cache)

        pending = asyncio.create_task(service.get_map_data("pt"))
        await mills.started.wait()
        # a dashboard write lands while the first load is still reading
        mills.rows = [r for r in mills.rows if r["slug"] != "moinho-b"]
        await cache.clear()
        mills.release.set()
        await pending

        data = await service.get_map_data("pt")
        assert [m.slug for m in data.mills] == ["moinho-a"]
        assert mills.calls == 2


class TestWaterLines:
    async def test_detail(self, service):
        line = await service.get_water_line_by_slug("levada-x", "en")
        assert line.name == "Schist Levada"
        assert len(line.connected_mills) == 2

    async def test_detail_with_short_path(self, service):
        assert await service.get_water_line_by_slug("levada-curta") is None

    async def test_list_sorted_by_name(self, service):
        options = await service.get_water_lines_list("pt")
        # untranslated lines fall back to their slug
        assert [o.name for o in options] == ["Levada do Xisto", "levada-curta"]


class TestSearch:
    async def test_blank(self, service):
        assert await service.search("  ") == []

    async def test_finds_water_line_and_its_pocas(self, service):
        results = await service.search("xisto", "pt")
        assert [r.type for r in results] == ["waterLine", "poca"]
        assert results[1].subtitle == "Levada do Xisto"

    async def test_finds_mill_by_title(self, service):
        results = await service.search("moinho a")
        assert [(r.type, r.title) for r in results] == [("mill", "Moinho A")]

    async def test_searchable_records_need_valid_coordinates(self, service, uow):
        uow.mills.rows[0]["lat"] = 95.0
        assert await service.get_searchable_mills() == []
        pocas = await service.get_searchable_pocas()
        assert [p.slug for p in pocas] == ["poca-1"]
        assert pocas[0].water_line_name == "Levada do Xisto"
