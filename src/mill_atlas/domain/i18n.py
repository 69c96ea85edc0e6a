# src/mill_atlas/domain/i18n.py
"""
Locale handling and taxonomy labels.

Labels are keyed by the Postgres vocabulary name (see
`taxonomy.PG_ENUM_NAMES`) because several vocabularies share raw values
(`conical`, `inexistent`, `public`).
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Protocol, TypeVar

import structlog

from mill_atlas.exceptions import InvalidLocaleError

from .taxonomy import PG_ENUM_NAMES

logger = structlog.get_logger(__name__)

_L = dict[str, str]

TAXONOMY_LABELS: dict[str, dict[str, _L]] = {
    "typology": {
        "azenha": {"pt": "Azenha", "en": "Azenha (vertical water wheel)"},
        "rodizio": {"pt": "Rodízio", "en": "Rodízio (horizontal water wheel)"},
        "mare": {"pt": "Moinho de maré", "en": "Tide mill"},
        "torre_fixa": {"pt": "Torre fixa", "en": "Fixed tower mill"},
        "giratorio": {"pt": "Giratório", "en": "Post mill"},
        "velas": {"pt": "Velas", "en": "Sail mill"},
        "armacao": {"pt": "Armação", "en": "Frame mill"},
    },
    "access": {
        "pedestrian": {"pt": "Pedonal", "en": "Pedestrian"},
        "car": {"pt": "Automóvel", "en": "Car"},
        "difficult_none": {"pt": "Difícil / inexistente", "en": "Difficult / none"},
        "traditional_track": {"pt": "Caminho tradicional", "en": "Traditional track"},
    },
    "legal_protection": {
        "inexistent": {"pt": "Inexistente", "en": "None"},
        "under_study": {"pt": "Em estudo", "en": "Under study"},
        "classified": {"pt": "Classificado", "en": "Classified"},
    },
    "property_status": {
        "private": {"pt": "Privada", "en": "Private"},
        "public": {"pt": "Pública", "en": "Public"},
        "unknown": {"pt": "Desconhecida", "en": "Unknown"},
    },
    "epoch": {
        "18th_c": {"pt": "Século XVIII", "en": "18th century"},
        "19th_c": {"pt": "Século XIX", "en": "19th century"},
        "20th_c": {"pt": "Século XX", "en": "20th century"},
        "pre_18th_c": {"pt": "Anterior ao século XVIII", "en": "Before 18th century"},
    },
    "current_use": {
        "milling": {"pt": "Moagem", "en": "Milling"},
        "housing": {"pt": "Habitação", "en": "Housing"},
        "tourism": {"pt": "Turismo", "en": "Tourism"},
        "ruin": {"pt": "Ruína", "en": "Ruin"},
        "museum": {"pt": "Museu", "en": "Museum"},
    },
    "setting": {
        "rural": {"pt": "Rural", "en": "Rural"},
        "urban": {"pt": "Urbano", "en": "Urban"},
        "isolated": {"pt": "Isolado", "en": "Isolated"},
        "riverbank": {"pt": "Margem de rio", "en": "Riverbank"},
    },
    "conservation_state": {
        "very_good": {"pt": "Muito bom", "en": "Very good"},
        "good": {"pt": "Bom", "en": "Good"},
        "reasonable": {"pt": "Razoável", "en": "Reasonable"},
        "bad": {"pt": "Mau", "en": "Bad"},
        "very_bad_ruin": {"pt": "Muito mau / ruína", "en": "Very bad / ruin"},
    },
    "plan_shape": {
        "circular": {"pt": "Circular", "en": "Circular"},
        "quadrangular": {"pt": "Quadrangular", "en": "Quadrangular"},
        "rectangular": {"pt": "Retangular", "en": "Rectangular"},
        "irregular": {"pt": "Irregular", "en": "Irregular"},
    },
    "volumetry": {
        "cylindrical": {"pt": "Cilíndrica", "en": "Cylindrical"},
        "conical": {"pt": "Cónica", "en": "Conical"},
        "prismatic_sq_rec": {"pt": "Prismática", "en": "Prismatic"},
    },
    "construction_technique": {
        "dry_stone": {"pt": "Pedra seca", "en": "Dry stone"},
        "mortared_stone": {"pt": "Alvenaria argamassada", "en": "Mortared stone"},
        "mixed_other": {"pt": "Mista / outra", "en": "Mixed / other"},
    },
    "exterior_finish": {
        "exposed": {"pt": "Pedra à vista", "en": "Exposed stone"},
        "plastered": {"pt": "Rebocado", "en": "Plastered"},
        "whitewashed": {"pt": "Caiado", "en": "Whitewashed"},
    },
    "roof_shape": {
        "conical": {"pt": "Cónica", "en": "Conical"},
        "gable": {"pt": "Duas águas", "en": "Gable"},
        "lean_to": {"pt": "Uma água", "en": "Lean-to"},
        "inexistent": {"pt": "Inexistente", "en": "None"},
        "false_dome": {"pt": "Falsa cúpula", "en": "False dome"},
    },
    "roof_material": {
        "tile": {"pt": "Telha", "en": "Tile"},
        "zinc": {"pt": "Zinco", "en": "Zinc"},
        "thatch": {"pt": "Colmo", "en": "Thatch"},
        "slate": {"pt": "Lousa", "en": "Slate"},
        "stone": {"pt": "Pedra", "en": "Stone"},
    },
    "captation_type": {
        "weir": {"pt": "Açude", "en": "Weir"},
        "pool": {"pt": "Poça", "en": "Pool"},
        "direct": {"pt": "Direta", "en": "Direct"},
    },
    "conduction_type": {
        "levada": {"pt": "Levada", "en": "Levada (channel)"},
        "modern_pipe": {"pt": "Tubagem moderna", "en": "Modern pipe"},
    },
    "conduction_state": {
        "operational_clean": {"pt": "Operacional / limpa", "en": "Operational / clean"},
        "clogged": {"pt": "Assoreada", "en": "Clogged"},
        "damaged_broken": {"pt": "Danificada", "en": "Damaged / broken"},
    },
    "admission_rodizio": {
        "cubo": {"pt": "Cubo", "en": "Cubo (pressure shaft)"},
        "calha": {"pt": "Calha", "en": "Calha (chute)"},
    },
    "admission_azenha": {
        "calha_superior": {"pt": "Calha superior", "en": "Overshot chute"},
        "canal_inferior": {"pt": "Canal inferior", "en": "Undershot channel"},
    },
    "wheel_type_rodizio": {
        "penas": {"pt": "Penas", "en": "Blades"},
        "colheres": {"pt": "Colheres", "en": "Spoons"},
    },
    "wheel_type_azenha": {
        "copeira": {"pt": "Copeira", "en": "Bucket wheel"},
        "dezio_palas": {"pt": "Dézio / palas", "en": "Paddle wheel"},
    },
    "motive_apparatus": {
        "sails": {"pt": "Velas", "en": "Sails"},
        "shells": {"pt": "Búzios", "en": "Shells"},
        "tail": {"pt": "Rabo", "en": "Tail"},
        "cap": {"pt": "Capelo", "en": "Cap"},
    },
    "millstone_state": {
        "complete": {"pt": "Completo", "en": "Complete"},
        "disassembled": {"pt": "Desmontado", "en": "Disassembled"},
        "fragmented": {"pt": "Fragmentado", "en": "Fragmented"},
        "missing": {"pt": "Inexistente", "en": "Missing"},
    },
    "epigraphy_location": {
        "door_jambs": {"pt": "Ombreiras", "en": "Door jambs"},
        "interior_walls": {"pt": "Paredes interiores", "en": "Interior walls"},
        "millstones": {"pt": "Mós", "en": "Millstones"},
        "other": {"pt": "Outro", "en": "Other"},
    },
    "epigraphy_type": {
        "dates": {"pt": "Datas", "en": "Dates"},
        "initials": {"pt": "Iniciais", "en": "Initials"},
        "religious_symbols": {"pt": "Símbolos religiosos", "en": "Religious symbols"},
        "counting_marks": {"pt": "Marcas de contagem", "en": "Counting marks"},
    },
}


def ensure_locale(locale: Optional[str], supported: tuple[str, ...]) -> str:
    """Return `locale` if supported, raise `InvalidLocaleError` otherwise."""
    if not locale or locale not in supported:
        raise InvalidLocaleError(locale, supported)
    return locale


def label_for(vocabulary: type[Enum] | str, value: str, locale: str) -> str:
    """Human label of a raw taxonomy value; the raw value when unknown."""
    name = vocabulary if isinstance(vocabulary, str) else PG_ENUM_NAMES[vocabulary]
    labels = TAXONOMY_LABELS.get(name, {}).get(value)
    if not labels:
        return value
    return labels.get(locale) or next(iter(labels.values()))


def all_labels(vocabulary: type[Enum] | str, value: str) -> list[str]:
    """Every locale's label for a raw value (used by search)."""
    name = vocabulary if isinstance(vocabulary, str) else PG_ENUM_NAMES[vocabulary]
    return list(TAXONOMY_LABELS.get(name, {}).get(value, {}).values())


class _HasLocale(Protocol):
    lang_code: str


T = TypeVar("T", bound=_HasLocale)


def resolve_translation(
    translations: Iterable[T], locale: str, default_locale: str
) -> Optional[T]:
    """
    Pick the best translation for `locale`.

    Fallback chain: exact locale -> default locale -> first available.
    """
    items = list(translations)
    if not items:
        return None
    by_lang = {t.lang_code: t for t in items}
    if locale in by_lang:
        return by_lang[locale]
    if default_locale in by_lang:
        logger.debug("Translation fallback to default locale", requested=locale)
        return by_lang[default_locale]
    logger.debug(
        "Translation fallback to first available",
        requested=locale,
        hit=items[0].lang_code,
    )
    return items[0]
