# src/mill_atlas/application/coordinator.py
"""
mill-atlas application facade.

Holds the initialized services and exposes the operations the CLI needs
as single calls; the HTTP layer talks to the services directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from mill_atlas.domain.types import MapData, MillDetail, NearbyConstruction, SearchResult

    from .services import (
        AccessService,
        AuthoringService,
        BibliographyService,
        MaintenanceService,
        MediaService,
        PublicQueryService,
        ReparentReport,
        ReviewService,
        SeedResult,
    )


class Coordinator:
    def __init__(
        self,
        public_query: PublicQueryService,
        review: ReviewService,
        authoring: AuthoringService,
        bibliography: BibliographyService,
        media: MediaService,
        access: AccessService,
        maintenance: MaintenanceService,
    ):
        self.public_query = public_query
        self.review = review
        self.authoring = authoring
        self.bibliography = bibliography
        self.media = media
        self.access = access
        self.maintenance = maintenance

    async def get_map_data(self, locale: Optional[str] = None) -> MapData:
        return await self.public_query.get_map_data(locale)

    async def get_mill(self, slug: str, locale: Optional[str] = None) -> MillDetail | None:
        return await self.public_query.get_mill_by_slug(slug, locale)

    async def search(self, query: str, locale: Optional[str] = None) -> list[SearchResult]:
        return await self.public_query.search(query, locale)

    async def nearest(
        self, lat: float, lng: float, locale: Optional[str] = None, limit: int = 5
    ) -> list[NearbyConstruction]:
        """Published constructions closest to a point, by geodesic distance."""
        return await self.maintenance.find_nearest(lat, lng, locale, limit)

    async def reparent_water_lines(self) -> ReparentReport:
        return await self.maintenance.reparent_water_lines()

    async def seed(self) -> SeedResult:
        return await self.maintenance.seed()
