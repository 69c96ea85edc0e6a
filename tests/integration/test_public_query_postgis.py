# tests/integration/test_public_query_postgis.py
"""Public read model against a migrated PostGIS database, starting from the seed data."""

from __future__ import annotations

import pytest
from sqlalchemy import text

from mill_atlas.application.services import MaintenanceService, PublicQueryService
from mill_atlas.application.services._maintenance import (
    SEED_MILL_SLUG,
    SEED_POCA_SLUG,
    SEED_WATER_LINE_SLUG,
)
from mill_atlas.domain.taxonomy import RoofMaterial, Typology
from mill_atlas.domain.types import MillFilters
from mill_atlas.exceptions import InvalidLocaleError
from mill_atlas.infrastructure.cache import MemoryCacheHandler


@pytest.fixture
async def seeded(uow_factory, db_config):
    result = await MaintenanceService(uow_factory, db_config).seed()
    assert result.created
    return result


@pytest.fixture
def public_query(uow_factory, db_config) -> PublicQueryService:
    return PublicQueryService(uow_factory, db_config)


async def test_seed_is_idempotent(uow_factory, db_config, seeded):
    again = await MaintenanceService(uow_factory, db_config).seed()
    assert not again.created


async def test_published_mills_extract_coordinates(public_query, seeded):
    mills = await public_query.get_published_mills("pt")

    assert len(mills) == 1
    mill = mills[0]
    assert mill.slug == SEED_MILL_SLUG
    assert mill.title == "Moinho do Rio Douro"
    assert mill.lat == pytest.approx(41.1579)
    assert mill.lng == pytest.approx(-8.6125)
    assert mill.typology == Typology.RODIZIO


async def test_filters_narrow_the_result(public_query, seeded):
    assert await public_query.get_published_mills(
        "pt", MillFilters(typology=[Typology.AZENHA])
    ) == []
    assert await public_query.get_published_mills(
        "pt", MillFilters(roof_material=[RoofMaterial.TILE])
    ) == []
    porto = await public_query.get_published_mills("pt", MillFilters(district="Porto"))
    assert [m.slug for m in porto] == [SEED_MILL_SLUG]


async def test_missing_translation_leaves_title_empty(public_query, seeded, db_engine):
    async with db_engine.begin() as conn:
        await conn.execute(
            text("DELETE FROM construction_translations WHERE lang_code = 'en'")
        )
    mills = await public_query.get_published_mills("en")
    assert len(mills) == 1
    assert mills[0].title is None


async def test_unpublished_records_are_hidden(public_query, seeded, db_engine):
    async with db_engine.begin() as conn:
        await conn.execute(
            text("UPDATE constructions SET status = 'draft' WHERE slug = :slug"),
            {"slug": SEED_WATER_LINE_SLUG},
        )

    data = await public_query.get_map_data("pt")
    assert data.water_lines == []
    assert await public_query.get_water_line_by_slug(SEED_WATER_LINE_SLUG, "pt") is None
    assert await public_query.get_water_lines_list("pt") == []


async def test_map_data_parses_linestrings(public_query, seeded):
    data = await public_query.get_map_data("en")

    assert [m.slug for m in data.mills] == [SEED_MILL_SLUG]
    assert [p.slug for p in data.pocas] == [SEED_POCA_SLUG]
    assert len(data.water_lines) == 1
    line = data.water_lines[0]
    assert line.name == "Douro River Levada"
    assert line.path[0] == pytest.approx([41.1590, -8.6140])
    assert line.path[-1] == pytest.approx([41.1579, -8.6125])


async def test_water_line_detail_lists_connected_mills(public_query, seeded):
    line = await public_query.get_water_line_by_slug(SEED_WATER_LINE_SLUG, "pt")

    assert line is not None
    assert line.name == "Levada do Rio Douro"
    assert len(line.path) == 3
    assert [m.slug for m in line.connected_mills] == [SEED_MILL_SLUG]


async def test_mill_detail_and_connected_mills(public_query, seeded):
    mill = await public_query.get_mill_by_slug(SEED_MILL_SLUG, "en")
    assert mill is not None
    assert mill.water_line_slug == SEED_WATER_LINE_SLUG
    assert mill.water_line_name == "Douro River Levada"
    assert mill.observations_structure == "Well-preserved granite stone structure."

    by_id = await public_query.get_mill_by_id(mill.id, "en")
    assert by_id is not None and by_id.slug == SEED_MILL_SLUG

    # the only mill on the levada has no neighbours
    assert await public_query.get_connected_mills(mill.id, "pt") == []


async def test_unique_districts(public_query, seeded):
    assert await public_query.get_unique_districts() == ["Porto"]


async def test_search_spans_all_record_kinds(public_query, seeded):
    results = await public_query.search("douro", "en")

    assert [r.type for r in results] == ["mill", "waterLine", "poca"]
    assert await public_query.search("   ", "en") == []


async def test_search_matches_taxonomy_terms(public_query, seeded):
    results = await public_query.search("horizontal", "pt")
    assert [r.slug for r in results] == [SEED_MILL_SLUG]


async def test_cached_map_data_is_cleared_on_invalidate(uow_factory, db_config, seeded, db_engine):
    service = PublicQueryService(uow_factory, db_config, cache=MemoryCacheHandler())
    first = await service.get_map_data("pt")
    assert len(first.mills) == 1

    async with db_engine.begin() as conn:
        await conn.execute(text("UPDATE constructions SET status = 'review'"))

    assert len((await service.get_map_data("pt")).mills) == 1
    await service.invalidate()
    assert (await service.get_map_data("pt")).mills == []


async def test_unknown_locale_is_rejected(public_query):
    with pytest.raises(InvalidLocaleError):
        await public_query.get_published_mills("de")
