# tests/integration/test_dashboard_postgis.py
"""Authoring, review, maintenance and bibliography writes on PostGIS."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import text

from mill_atlas.application.services import (
    AuthoringService,
    BibliographyService,
    MaintenanceService,
    PublicQueryService,
    ReviewService,
)
from mill_atlas.domain.taxonomy import ConstructionStatus, TypeCategory, Typology, UserRole
from mill_atlas.domain.types import BibliographyInput, MillInput, PocaInput, WaterLineInput
from mill_atlas.exceptions import NotFoundError, ValidationError


@pytest.fixture
def services(uow_factory, db_config):
    public_query = PublicQueryService(uow_factory, db_config)
    return {
        "public": public_query,
        "authoring": AuthoringService(uow_factory, db_config),
        "review": ReviewService(uow_factory, db_config, public_query),
        "maintenance": MaintenanceService(uow_factory, db_config),
        "bibliography": BibliographyService(uow_factory),
    }


def _mill(title: str = "Moinho da Ponte", **overrides) -> MillInput:
    data = {
        "title": title,
        "locale": "pt",
        "latitude": 41.55,
        "longitude": -8.42,
        "typology": Typology.AZENHA,
        "district": "Braga",
        "status": ConstructionStatus.PUBLISHED,
    }
    data.update(overrides)
    return MillInput(**data)


async def test_researcher_publish_is_saved_as_draft(services, add_profile):
    researcher = await add_profile(UserRole.RESEARCHER)

    header = await services["authoring"].create_mill(researcher, _mill())

    assert header.slug == "moinho-da-ponte"
    assert header.status == ConstructionStatus.DRAFT
    assert header.created_by == researcher.id
    assert await services["public"].get_published_mills("pt") == []


async def test_admin_publishes_through_review(services, add_profile):
    researcher = await add_profile(UserRole.RESEARCHER)
    admin = await add_profile(UserRole.ADMIN)
    header = await services["authoring"].create_mill(
        researcher, _mill(status=ConstructionStatus.REVIEW)
    )

    queue = await services["review"].get_review_queue(admin, "pt")
    assert [item.slug for item in queue] == [header.slug]

    change = await services["review"].update_construction_status(
        admin, header.id, "published"
    )
    assert change.status == ConstructionStatus.PUBLISHED

    mills = await services["public"].get_published_mills("pt")
    assert [m.slug for m in mills] == ["moinho-da-ponte"]
    assert mills[0].lat == pytest.approx(41.55)
    assert await services["review"].get_review_queue(admin, "pt") == []


async def test_duplicate_titles_get_numbered_slugs(services, add_profile):
    researcher = await add_profile()
    first = await services["authoring"].create_mill(researcher, _mill())
    second = await services["authoring"].create_mill(researcher, _mill())
    third = await services["authoring"].create_mill(researcher, _mill())

    assert [first.slug, second.slug, third.slug] == [
        "moinho-da-ponte",
        "moinho-da-ponte-1",
        "moinho-da-ponte-2",
    ]


async def test_update_mill_upserts_translation_and_keeps_slug(services, add_profile):
    researcher = await add_profile()
    header = await services["authoring"].create_mill(researcher, _mill())

    await services["authoring"].update_mill(
        researcher,
        header.id,
        _mill("Ponte Mill", locale="en", description="A mill by the bridge."),
    )
    edit = await services["authoring"].get_construction_for_edit(researcher, header.id)

    assert edit.slug == "moinho-da-ponte"
    assert {t.lang_code: t.title for t in edit.translations} == {
        "en": "Ponte Mill",
        "pt": "Moinho da Ponte",
    }
    assert edit.latitude == pytest.approx(41.55)
    assert edit.longitude == pytest.approx(-8.42)


async def test_water_line_and_poca_lifecycle(services, add_profile):
    admin = await add_profile(UserRole.ADMIN)
    line_header = await services["authoring"].create_water_line(
        admin,
        WaterLineInput(
            name="Levada Nova",
            color="#112233",
            path=[[41.0, -8.0], [41.001, -8.001]],
            status=ConstructionStatus.PUBLISHED,
        ),
    )
    assert line_header.type_category == TypeCategory.WATER_LINE.value

    line = await services["authoring"].get_water_line_for_edit(admin, line_header.id)
    assert line.color == "#112233"
    assert [pt for point in line.path for pt in point] == pytest.approx(
        [41.0, -8.0, 41.001, -8.001]
    )

    poca = await services["authoring"].create_poca(
        admin,
        PocaInput(
            title="Poça Nova",
            latitude=41.0,
            longitude=-8.0,
            water_line_id=line.id,
            status=ConstructionStatus.PUBLISHED,
        ),
    )
    data = await services["public"].get_map_data("pt")
    assert [p.slug for p in data.pocas] == [poca.slug]
    assert [w.slug for w in data.water_lines] == ["levada-nova"]

    item_type = await services["review"].get_item_type_by_id(admin, poca.id)
    assert item_type == TypeCategory.POCA


async def test_poca_requires_existing_water_line(services, add_profile):
    researcher = await add_profile()
    with pytest.raises(ValidationError):
        await services["authoring"].create_poca(
            researcher,
            PocaInput(title="Órfã", latitude=41.0, longitude=-8.0, water_line_id=uuid.uuid4()),
        )


async def test_inventory_filters_and_delete_cascades(services, add_profile, db_engine):
    admin = await add_profile(UserRole.ADMIN)
    await services["maintenance"].seed()
    mill = await services["authoring"].create_mill(admin, _mill(status=ConstructionStatus.DRAFT))

    mills = await services["review"].get_inventory_items(admin, "pt", type_filter="MILL")
    assert {i.slug for i in mills} == {"moinho-do-rio-douro", mill.slug}

    drafts = await services["review"].get_inventory_items(admin, "pt", status="draft")
    assert [i.slug for i in drafts] == [mill.slug]

    found = await services["review"].get_inventory_items(admin, "pt", search="PONTE")
    assert [i.slug for i in found] == [mill.slug]

    await services["review"].delete_construction(admin, mill.id)
    async with db_engine.connect() as conn:
        remaining = await conn.execute(
            text("SELECT count(*) FROM mills_data WHERE construction_id = :id"),
            {"id": mill.id},
        )
        assert remaining.scalar() == 0
    with pytest.raises(NotFoundError):
        await services["review"].delete_construction(admin, mill.id)


async def test_reparent_gives_orphans_a_published_parent(services, uow_factory):
    async with uow_factory() as uow:
        await uow.water_lines.add(
            slug="levada-antiga",
            path_wkt="LINESTRING(-8.5 41.2, -8.51 41.21)",
            color="#3b82f6",
            construction_id=None,
        )
    assert await services["public"].get_water_lines_list("pt") == []

    report = await services["maintenance"].reparent_water_lines()

    assert report.failed == ()
    assert [(r.water_line_slug, r.construction_slug) for r in report.reparented] == [
        ("levada-antiga", "levada-antiga")
    ]
    options = await services["public"].get_water_lines_list("pt")
    assert [o.slug for o in options] == ["levada-antiga"]
    assert (await services["maintenance"].reparent_water_lines()).reparented == ()


async def test_nearest_orders_by_geodesic_distance(services, add_profile):
    admin = await add_profile(UserRole.ADMIN)
    await services["maintenance"].seed()
    await services["authoring"].create_mill(admin, _mill())

    nearby = await services["maintenance"].find_nearest(41.1579, -8.6125, "pt", limit=2)

    assert nearby[0].slug == "moinho-do-rio-douro"
    assert nearby[0].distance_m == pytest.approx(0, abs=1)
    assert nearby[1].distance_m > nearby[0].distance_m


async def test_bibliography_orders_by_year(services, add_profile):
    researcher = await add_profile()
    bib = services["bibliography"]
    await bib.create_entry(researcher, BibliographyInput(title="Sem data", author="A"))
    await bib.create_entry(researcher, BibliographyInput(title="Antigo", author="B", year=1950))
    await bib.create_entry(researcher, BibliographyInput(title="Recente", author="C", year="2010"))

    entries = await bib.list_entries()
    assert [e.title for e in entries] == ["Recente", "Antigo", "Sem data"]
