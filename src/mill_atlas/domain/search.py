# src/mill_atlas/domain/search.py
"""
Cross-language inventory search.

Operates on the searchable read models (every record with all of its
translations), so a query typed in any language matches regardless of the
visitor's locale.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence

from .i18n import all_labels
from .taxonomy import MILL_TAXONOMY_FIELDS, PG_ENUM_NAMES
from .types import (
    SearchableMill,
    SearchablePoca,
    SearchableWaterLine,
    SearchResult,
    TranslationText,
)

DEFAULT_LIMIT = 10

# Extra vocabulary users type for typologies.
TYPOLOGY_COMMON_TERMS: dict[str, tuple[str, ...]] = {
    "azenha": ("vertical", "water", "wheel"),
    "rodizio": ("horizontal", "water", "wheel"),
    "mare": ("tide", "maré"),
}

# Boolean component -> keywords that find it when present.
COMPONENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "has_tremonha": ("tremonha", "hopper"),
    "has_quelha": ("quelha",),
    "has_urreiro": ("urreiro",),
    "has_aliviadouro": ("aliviadouro",),
    "has_farinaleiro": ("farinaleiro",),
    "epigraphy_presence": ("epigraf", "epigraph", "inscriç", "inscription"),
    "has_oven": ("forno", "oven"),
    "has_miller_house": ("casa", "house"),
    "has_stable": ("estreb", "stable"),
    "has_fulling_mill": ("pisão", "pisao", "fulling"),
    "stone_type_granite": ("granit",),
    "stone_type_schist": ("schist", "xisto"),
    "stone_type_other": ("outro", "other"),
    "gable_material_lusa": ("lusa",),
    "gable_material_marselha": ("marselha", "marseille"),
    "gable_material_meia_cana": ("meia", "cana"),
}

_FREE_TEXT_FIELDS = (
    "legacy_id",
    "district",
    "municipality",
    "parish",
    "place",
    "address",
    "millstone_diameter",
    "stone_material_description",
    "epigraphy_description",
)

_NUMERIC_FIELDS = (
    "millstone_quantity",
    "length",
    "width",
    "height",
    "rodizio_qty",
    "azenha_qty",
)


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip().lower()


def _contains(haystack: Any, needle: str) -> bool:
    return haystack is not None and needle in str(haystack).lower()


def _raw(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.value if isinstance(value, Enum) else str(value)


def _number_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _taxonomy_terms(mill: SearchableMill) -> Iterator[str]:
    for field, vocabulary in MILL_TAXONOMY_FIELDS.items():
        raw = _raw(getattr(mill, field, None))
        if raw is None:
            continue
        yield raw
        yield from all_labels(PG_ENUM_NAMES[vocabulary], raw)
        if field == "typology":
            yield from TYPOLOGY_COMMON_TERMS.get(raw, ())


def _first_title_match(
    translations: Iterable[TranslationText], q: str
) -> Optional[TranslationText]:
    for t in translations:
        if _contains(t.title, q):
            return t
    return None


def _display(
    translations: Sequence[Any],
    matched: Optional[Any],
    locale: str,
    attr: str,
) -> tuple[Optional[str], Optional[str]]:
    if matched is not None:
        return getattr(matched, attr), matched.lang_code
    for t in translations:
        if t.lang_code == locale:
            return getattr(t, attr), t.lang_code
    if translations:
        return getattr(translations[0], attr), translations[0].lang_code
    return None, None


def mill_matches(mill: SearchableMill, q: str) -> bool:
    """True when the normalized query `q` hits any searchable facet of the mill."""
    if any(_contains(t.title, q) or _contains(t.description, q) for t in mill.translations):
        return True
    if any(_contains(getattr(mill, f, None), q) for f in _FREE_TEXT_FIELDS):
        return True
    if any(_contains(term, q) for term in _taxonomy_terms(mill)):
        return True
    if any(_contains(_number_text(getattr(mill, f, None)), q) for f in _NUMERIC_FIELDS):
        return True
    for field, keywords in COMPONENT_KEYWORDS.items():
        if getattr(mill, field, False) and any(
            q in kw or kw in q for kw in keywords
        ):
            return True
    return False


def water_line_matches(line: SearchableWaterLine, q: str) -> bool:
    if _contains(line.slug, q):
        return True
    return any(_contains(t.name, q) or _contains(t.description, q) for t in line.translations)


def poca_matches(poca: SearchablePoca, q: str) -> bool:
    if _contains(poca.water_line_name, q):
        return True
    return any(_contains(t.title, q) or _contains(t.description, q) for t in poca.translations)


def search_inventory(
    query: Optional[str],
    mills: Sequence[SearchableMill],
    water_lines: Sequence[SearchableWaterLine],
    pocas: Sequence[SearchablePoca],
    *,
    locale: str,
    limit: int = DEFAULT_LIMIT,
) -> list[SearchResult]:
    """
    Search mills, water lines and poças; results keep that type order and are
    cut to `limit`.

    The display title is the first translation whose title matched the query,
    then the visitor's locale, then whichever translation exists.
    """
    q = normalize_query(query)
    if not q or limit <= 0:
        return []

    results: list[SearchResult] = []

    for mill in mills:
        if not mill_matches(mill, q):
            continue
        title, lang = _display(
            mill.translations, _first_title_match(mill.translations, q), locale, "title"
        )
        subtitle = ", ".join(p for p in (mill.municipality, mill.district) if p) or None
        results.append(
            SearchResult(
                type="mill",
                id=mill.id,
                slug=mill.slug,
                title=title or mill.slug,
                lang_code=lang,
                subtitle=subtitle,
            )
        )

    for line in water_lines:
        if not water_line_matches(line, q):
            continue
        matched = next((t for t in line.translations if _contains(t.name, q)), None)
        name, lang = _display(line.translations, matched, locale, "name")
        results.append(
            SearchResult(
                type="waterLine", id=line.id, slug=line.slug, title=name or line.slug, lang_code=lang
            )
        )

    for poca in pocas:
        if not poca_matches(poca, q):
            continue
        title, lang = _display(
            poca.translations, _first_title_match(poca.translations, q), locale, "title"
        )
        results.append(
            SearchResult(
                type="poca",
                id=poca.id,
                slug=poca.slug,
                title=title or poca.slug,
                lang_code=lang,
                subtitle=poca.water_line_name,
            )
        )

    return results[:limit]
