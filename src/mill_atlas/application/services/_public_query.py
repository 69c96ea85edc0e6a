# src/mill_atlas/application/services/_public_query.py
"""
Public read model: published mills, water lines and poças for the map, the
detail pages and the search box.

Nothing unpublished leaves this service, and every coordinate it returns is
valid. Rows with broken coordinates or paths are skipped with a warning.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

import structlog

from mill_atlas.domain.geo import is_valid_coordinate, parse_linestring_wkt
from mill_atlas.domain.i18n import ensure_locale, resolve_translation
from mill_atlas.domain.search import DEFAULT_LIMIT, search_inventory
from mill_atlas.domain.types import (
    MapData,
    MapPoca,
    MapWaterLine,
    MillDetail,
    MillFilters,
    PublishedMill,
    SearchableMill,
    SearchablePoca,
    SearchableWaterLine,
    SearchResult,
    WaterLineDetail,
    WaterLineOption,
    WaterLineTranslationText,
)

if TYPE_CHECKING:
    from mill_atlas.config import MillAtlasConfig
    from mill_atlas.interfaces import CacheHandler, UowFactory

logger = structlog.get_logger(__name__)


def _has_valid_coordinates(row: Mapping[str, Any], kind: str) -> bool:
    if is_valid_coordinate(row.get("lat"), row.get("lng")):
        return True
    logger.warning(
        "Skipping record with invalid coordinates",
        kind=kind,
        id=str(row.get("id")),
        lat=row.get("lat"),
        lng=row.get("lng"),
    )
    return False


def _normalized(row: Mapping[str, Any]) -> dict[str, Any]:
    data = dict(row)
    if data.get("gallery_images") is None:
        data["gallery_images"] = []
    return data


def _line_name(
    translations: Sequence[WaterLineTranslationText],
    locale: str,
    default_locale: str,
    fallback: str,
) -> tuple[str, Optional[str]]:
    chosen = resolve_translation(translations, locale, default_locale)
    if chosen is None:
        return fallback, None
    return chosen.name or fallback, chosen.description


class PublicQueryService:
    def __init__(
        self,
        uow_factory: UowFactory,
        config: MillAtlasConfig,
        cache: CacheHandler | None = None,
    ):
        self._uow_factory = uow_factory
        self._config = config
        self._cache = cache

    # --- helpers ---

    def _locale(self, locale: Optional[str]) -> str:
        return ensure_locale(
            locale or self._config.i18n.default_locale, self._config.i18n.locales
        )

    async def _cached(self, key: str, loader):
        generation = None
        if self._cache is not None:
            generation = self._cache.generation
            hit = await self._cache.get(key)
            if hit is not None:
                logger.debug("Public cache hit", key=key)
                return hit
        value = await loader()
        if self._cache is not None:
            await self._cache.set(
                key, value, ttl=self._config.cache.ttl, generation=generation
            )
        return value

    def _to_published(self, rows: Sequence[Mapping[str, Any]]) -> list[PublishedMill]:
        return [
            PublishedMill.model_validate(_normalized(r))
            for r in rows
            if _has_valid_coordinates(r, "mill")
        ]

    # --- mills ---

    async def get_published_mills(
        self, locale: Optional[str] = None, filters: Optional[MillFilters] = None
    ) -> list[PublishedMill]:
        loc = self._locale(locale)
        async with self._uow_factory() as uow:
            rows = await uow.mills.list_published(loc, filters)
        mills = self._to_published(rows)
        logger.debug("Published mills loaded", locale=loc, count=len(mills))
        return mills

    async def _get_mill(
        self, locale: Optional[str], *, published_only: bool = True, **key: Any
    ) -> MillDetail | None:
        loc = self._locale(locale)
        async with self._uow_factory() as uow:
            row = await uow.mills.get_detail(loc, published_only=published_only, **key)
            if row is None:
                return None
            names: list[WaterLineTranslationText] = []
            if row["water_line_id"] is not None:
                names = (await uow.water_lines.get_translations([row["water_line_id"]]))[
                    row["water_line_id"]
                ]
        if not _has_valid_coordinates(row, "mill"):
            return None
        data = _normalized(row)
        if names:
            data["water_line_name"], _ = _line_name(
                names, loc, self._config.i18n.default_locale, row["water_line_slug"]
            )
        return MillDetail.model_validate(data)

    async def get_mill_by_slug(
        self, slug: str, locale: Optional[str] = None
    ) -> MillDetail | None:
        return await self._get_mill(locale, slug=slug)

    async def get_mill_by_id(
        self, mill_id: uuid.UUID, locale: Optional[str] = None
    ) -> MillDetail | None:
        return await self._get_mill(locale, construction_id=mill_id)

    async def get_mill_for_review(
        self, slug: str, locale: Optional[str] = None
    ) -> MillDetail | None:
        """Same shape as the public detail but ignores the status."""
        return await self._get_mill(locale, published_only=False, slug=slug)

    async def get_unique_districts(self) -> list[str]:
        async with self._uow_factory() as uow:
            districts = await uow.mills.list_published_districts()
        return sorted({d for d in districts if d and d.strip()})

    async def get_connected_mills(
        self, mill_id: uuid.UUID, locale: Optional[str] = None
    ) -> list[PublishedMill]:
        loc = self._locale(locale)
        async with self._uow_factory() as uow:
            water_line_id = await uow.mills.get_water_line_id(mill_id)
            if water_line_id is None:
                return []
            rows = await uow.mills.list_published_on_water_line(
                water_line_id, loc, exclude_id=mill_id
            )
        return self._to_published(rows)

    # --- map ---

    async def _load_water_lines(self, uow, locale: str) -> list[MapWaterLine]:
        rows = await uow.water_lines.list_published()
        translations = await uow.water_lines.get_translations(r["id"] for r in rows)
        lines: list[MapWaterLine] = []
        for r in rows:
            path = parse_linestring_wkt(r["path_wkt"])
            if len(path) < 2:
                logger.warning(
                    "Skipping water line with fewer than 2 valid points",
                    id=str(r["id"]),
                    slug=r["slug"],
                )
                continue
            name, _ = _line_name(
                translations[r["id"]], locale, self._config.i18n.default_locale, r["slug"]
            )
            lines.append(
                MapWaterLine(
                    id=r["id"], slug=r["slug"], path=path, color=r["color"], name=name
                )
            )
        return lines

    async def get_map_data(
        self, locale: Optional[str] = None, filters: Optional[MillFilters] = None
    ) -> MapData:
        loc = self._locale(locale)
        filters = filters or MillFilters()

        async def load() -> MapData:
            async with self._uow_factory() as uow:
                mill_rows = await uow.mills.list_published(loc, filters)
                poca_rows = await uow.pocas.list_published(loc)
                lines = await self._load_water_lines(uow, loc)
            pocas = [
                MapPoca.model_validate(dict(r))
                for r in poca_rows
                if _has_valid_coordinates(r, "poca")
            ]
            return MapData(mills=self._to_published(mill_rows), pocas=pocas, water_lines=lines)

        return await self._cached(f"map:{loc}:{filters.cache_key()}", load)

    # --- water lines ---

    async def get_water_line_by_slug(
        self, slug: str, locale: Optional[str] = None
    ) -> WaterLineDetail | None:
        loc = self._locale(locale)
        async with self._uow_factory() as uow:
            row = await uow.water_lines.get_published_by_slug(slug)
            if row is None:
                return None
            translations = (await uow.water_lines.get_translations([row["id"]]))[row["id"]]
            mill_rows = await uow.mills.list_published_on_water_line(row["id"], loc)
        path = parse_linestring_wkt(row["path_wkt"])
        if len(path) < 2:
            logger.warning("Water line has an invalid path", slug=slug)
            return None
        name, description = _line_name(
            translations, loc, self._config.i18n.default_locale, row["slug"]
        )
        return WaterLineDetail(
            id=row["id"],
            slug=row["slug"],
            name=name,
            description=description,
            color=row["color"],
            path=path,
            connected_mills=self._to_published(mill_rows),
        )

    async def get_water_lines_list(self, locale: Optional[str] = None) -> list[WaterLineOption]:
        loc = self._locale(locale)
        async with self._uow_factory() as uow:
            rows = await uow.water_lines.list_published()
            translations = await uow.water_lines.get_translations(r["id"] for r in rows)
        options = [
            WaterLineOption(
                id=r["id"],
                slug=r["slug"],
                name=_line_name(
                    translations[r["id"]], loc, self._config.i18n.default_locale, r["slug"]
                )[0],
            )
            for r in rows
        ]
        return sorted(options, key=lambda o: o.name.casefold())

    # --- search ---

    async def get_searchable_mills(self) -> list[SearchableMill]:
        async def load() -> list[SearchableMill]:
            async with self._uow_factory() as uow:
                rows = await uow.mills.list_searchable()
                translations = await uow.constructions.get_translations(
                    r["id"] for r in rows
                )
            return [
                SearchableMill.model_validate(
                    {**dict(r), "translations": translations[r["id"]]}
                )
                for r in rows
                if _has_valid_coordinates(r, "mill")
            ]

        return await self._cached("searchable:mills", load)

    async def get_searchable_water_lines(self) -> list[SearchableWaterLine]:
        async def load() -> list[SearchableWaterLine]:
            async with self._uow_factory() as uow:
                rows = await uow.water_lines.list_published()
                translations = await uow.water_lines.get_translations(
                    r["id"] for r in rows
                )
            return [
                SearchableWaterLine(
                    id=r["id"], slug=r["slug"], translations=translations[r["id"]]
                )
                for r in rows
            ]

        return await self._cached("searchable:water_lines", load)

    async def get_searchable_pocas(self) -> list[SearchablePoca]:
        async def load() -> list[SearchablePoca]:
            async with self._uow_factory() as uow:
                rows = await uow.pocas.list_published()
                translations = await uow.constructions.get_translations(
                    r["id"] for r in rows
                )
                line_names = await uow.water_lines.get_translations(
                    {r["water_line_id"] for r in rows if r["water_line_id"]}
                )
            default = self._config.i18n.default_locale
            pocas = []
            for r in rows:
                if not _has_valid_coordinates(r, "poca"):
                    continue
                name = None
                if r["water_line_id"] is not None:
                    name, _ = _line_name(
                        line_names[r["water_line_id"]],
                        default,
                        default,
                        r["water_line_slug"] or "",
                    )
                pocas.append(
                    SearchablePoca.model_validate(
                        {
                            **dict(r),
                            "water_line_name": name or None,
                            "translations": translations[r["id"]],
                        }
                    )
                )
            return pocas

        return await self._cached("searchable:pocas", load)

    async def search(
        self, query: Optional[str], locale: Optional[str] = None, limit: int = DEFAULT_LIMIT
    ) -> list[SearchResult]:
        loc = self._locale(locale)
        if not (query or "").strip():
            return []
        return search_inventory(
            query,
            await self.get_searchable_mills(),
            await self.get_searchable_water_lines(),
            await self.get_searchable_pocas(),
            locale=loc,
            limit=limit,
        )

    async def invalidate(self) -> None:
        if self._cache is not None:
            await self._cache.clear()
            logger.debug("Public cache cleared")
