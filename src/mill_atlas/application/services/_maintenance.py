# src/mill_atlas/application/services/_maintenance.py
"""
Operator tasks run from the CLI: sample data, nearest-construction lookup and
re-parenting of legacy water lines that were imported without a construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

import structlog

from mill_atlas.domain.geo import (
    is_valid_coordinate,
    parse_linestring_wkt,
    to_linestring_wkt,
    to_point_wkt,
)
from mill_atlas.domain.i18n import ensure_locale
from mill_atlas.domain.slug import generate_unique_slug
from mill_atlas.domain.taxonomy import (
    Access,
    CaptationType,
    ConservationRating,
    ConstructionStatus,
    ConstructionTechnique,
    CurrentUse,
    Epoch,
    LegalProtection,
    PlanShape,
    PropertyStatus,
    RoofShape,
    TypeCategory,
    Typology,
)
from mill_atlas.domain.types import NearbyConstruction
from mill_atlas.exceptions import ValidationError

if TYPE_CHECKING:
    from mill_atlas.config import MillAtlasConfig
    from mill_atlas.interfaces import CacheHandler, UowFactory

logger = structlog.get_logger(__name__)

SEED_MILL_SLUG = "moinho-do-rio-douro"
SEED_WATER_LINE_SLUG = "levada-do-rio-douro"
SEED_POCA_SLUG = "poca-do-rio-douro"

# lat-first points
_SEED_LEVADA_PATH = [[41.1590, -8.6140], [41.1584, -8.6132], [41.1579, -8.6125]]


@dataclass(frozen=True)
class ReparentResult:
    water_line_slug: str
    construction_slug: str


@dataclass(frozen=True)
class ReparentReport:
    reparented: tuple[ReparentResult, ...] = ()
    # slugs of lines whose re-parenting raised
    failed: tuple[str, ...] = ()


@dataclass(frozen=True)
class SeedResult:
    created: bool
    slugs: tuple[str, ...] = ()


class MaintenanceService:
    def __init__(
        self,
        uow_factory: UowFactory,
        config: MillAtlasConfig,
        cache: CacheHandler | None = None,
    ):
        self._uow_factory = uow_factory
        self._config = config
        self._cache = cache

    async def _invalidate(self) -> None:
        if self._cache is not None:
            await self._cache.clear()

    async def find_nearest(
        self, lat: float, lng: float, locale: Optional[str] = None, limit: int = 5
    ) -> list[NearbyConstruction]:
        if not is_valid_coordinate(lat, lng):
            raise ValidationError("Invalid coordinates")
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        loc = ensure_locale(
            locale or self._config.i18n.default_locale, self._config.i18n.locales
        )
        async with self._uow_factory() as uow:
            return await uow.constructions.find_nearest(lat, lng, loc, limit=limit)

    async def reparent_water_lines(self) -> ReparentReport:
        """Give every orphan water line a published `water_line` construction.

        Each line is committed on its own; a failing line is logged and
        counted without undoing the ones already re-parented.
        """
        async with self._uow_factory() as uow:
            orphans = await uow.water_lines.list_orphans()
        logger.info("Orphan water lines found", count=len(orphans))

        results: list[ReparentResult] = []
        failed: list[str] = []
        for line in orphans:
            path = parse_linestring_wkt(line["path_wkt"])
            if not path:
                logger.warning("Skipping water line without a valid path", slug=line["slug"])
                continue
            try:
                slug = await self._reparent_one(line, path[0])
            except Exception as e:
                logger.error(
                    "Water line re-parenting failed", water_line=line["slug"], error=str(e)
                )
                failed.append(line["slug"])
                continue
            logger.info("Water line re-parented", water_line=line["slug"], construction=slug)
            results.append(ReparentResult(line["slug"], slug))

        if results:
            await self._invalidate()
        return ReparentReport(reparented=tuple(results), failed=tuple(failed))

    async def _reparent_one(self, line: Mapping[str, Any], start: list[float]) -> str:
        async with self._uow_factory() as uow:
            slug = await generate_unique_slug(line["slug"], uow.constructions.slug_exists)
            # the construction keeps the line's own history
            construction_id = await uow.constructions.add(
                slug=slug,
                type_category=TypeCategory.WATER_LINE.value,
                geom=to_point_wkt(*start),
                status=ConstructionStatus.PUBLISHED,
                created_at=line["created_at"],
                updated_at=line["updated_at"],
            )
            await uow.water_lines.set_parent(line["id"], construction_id)
        return slug

    async def seed(self) -> SeedResult:
        """Insert the sample mill, levada and poça unless they already exist."""
        async with self._uow_factory() as uow:
            if await uow.constructions.slug_exists(SEED_MILL_SLUG):
                logger.info("Sample data already present, nothing to do")
                return SeedResult(created=False)

            levada_cid = await uow.constructions.add(
                slug=SEED_WATER_LINE_SLUG,
                type_category=TypeCategory.WATER_LINE.value,
                geom=to_point_wkt(*_SEED_LEVADA_PATH[0]),
                status=ConstructionStatus.PUBLISHED,
            )
            levada_id = await uow.water_lines.add(
                slug=SEED_WATER_LINE_SLUG,
                path_wkt=to_linestring_wkt(_SEED_LEVADA_PATH),
                color="#3b82f6",
                construction_id=levada_cid,
            )
            await uow.water_lines.upsert_translation(
                levada_id, "pt", name="Levada do Rio Douro",
                description="Levada que alimenta o Moinho do Rio Douro.",
            )
            await uow.water_lines.upsert_translation(
                levada_id, "en", name="Douro River Levada",
                description="Water channel feeding the Douro River Mill.",
            )

            mill_id = await uow.constructions.add(
                slug=SEED_MILL_SLUG,
                type_category=TypeCategory.MILL.value,
                geom=to_point_wkt(41.1579, -8.6125),
                district="Porto",
                municipality="Porto",
                parish="Cedofeita",
                address="Rua do Moinho, 123",
                drainage_basin="Rio Douro",
                status=ConstructionStatus.PUBLISHED,
            )
            await uow.mills.add(
                mill_id,
                {
                    "typology": Typology.RODIZIO,
                    "access": Access.PEDESTRIAN,
                    "legal_protection": LegalProtection.CLASSIFIED,
                    "property_status": PropertyStatus.PRIVATE,
                    "plan_shape": PlanShape.CIRCULAR,
                    "construction_technique": ConstructionTechnique.MORTARED_STONE,
                    "roof_shape": RoofShape.CONICAL,
                    "captation_type": CaptationType.DIRECT,
                    "rodizio_qty": 2,
                    "millstone_quantity": 1,
                    "rating_overall": ConservationRating.GOOD,
                    "epoch": Epoch.C19,
                    "current_use": CurrentUse.TOURISM,
                    "water_line_id": levada_id,
                },
            )
            await uow.constructions.upsert_translation(
                mill_id, "pt",
                title="Moinho do Rio Douro",
                description=(
                    "Um moinho de rodízio histórico localizado nas margens do Rio Douro, "
                    "representativo da arquitetura tradicional do Norte de Portugal."
                ),
                observations_structure="Estrutura em pedra granítica bem preservada.",
            )
            await uow.constructions.upsert_translation(
                mill_id, "en",
                title="Douro River Mill",
                description=(
                    "A historic rodízio mill located on the banks of the Douro River, "
                    "representative of traditional Northern Portuguese architecture."
                ),
                observations_structure="Well-preserved granite stone structure.",
            )

            poca_id = await uow.constructions.add(
                slug=SEED_POCA_SLUG,
                type_category=TypeCategory.POCA.value,
                geom=to_point_wkt(41.1590, -8.6140),
                district="Porto",
                municipality="Porto",
                status=ConstructionStatus.PUBLISHED,
            )
            await uow.pocas.add(poca_id, levada_id)
            await uow.constructions.upsert_translation(
                poca_id, "pt", title="Poça do Rio Douro"
            )
            await uow.constructions.upsert_translation(
                poca_id, "en", title="Douro River Pool"
            )

        await self._invalidate()
        slugs = (SEED_MILL_SLUG, SEED_WATER_LINE_SLUG, SEED_POCA_SLUG)
        logger.info("Sample data inserted", slugs=list(slugs))
        return SeedResult(created=True, slugs=slugs)
