# src/mill_atlas/domain/taxonomy.py
"""
Controlled vocabularies of the inventory.

Each enum mirrors a Postgres ENUM type created by the migrations; the
`pg_name` of every vocabulary is listed in `PG_ENUM_NAMES`.
"""

from __future__ import annotations

from enum import Enum


class ConstructionStatus(str, Enum):
    """Publication lifecycle of a construction."""

    DRAFT = "draft"
    REVIEW = "review"
    PUBLISHED = "published"


class TypeCategory(str, Enum):
    """Discriminator stored in `constructions.type_category`."""

    MILL = "MILL"
    WATER_LINE = "water_line"
    POCA = "POCA"


class UserRole(str, Enum):
    PUBLIC = "public"
    RESEARCHER = "researcher"
    ADMIN = "admin"


# --- core ---


class Typology(str, Enum):
    AZENHA = "azenha"
    RODIZIO = "rodizio"
    MARE = "mare"
    TORRE_FIXA = "torre_fixa"
    GIRATORIO = "giratorio"
    VELAS = "velas"
    ARMACAO = "armacao"


class Access(str, Enum):
    PEDESTRIAN = "pedestrian"
    CAR = "car"
    DIFFICULT_NONE = "difficult_none"
    TRADITIONAL_TRACK = "traditional_track"


class LegalProtection(str, Enum):
    INEXISTENT = "inexistent"
    UNDER_STUDY = "under_study"
    CLASSIFIED = "classified"


class PropertyStatus(str, Enum):
    PRIVATE = "private"
    PUBLIC = "public"
    UNKNOWN = "unknown"


class Epoch(str, Enum):
    C18 = "18th_c"
    C19 = "19th_c"
    C20 = "20th_c"
    PRE_C18 = "pre_18th_c"


class CurrentUse(str, Enum):
    MILLING = "milling"
    HOUSING = "housing"
    TOURISM = "tourism"
    RUIN = "ruin"
    MUSEUM = "museum"


class Setting(str, Enum):
    RURAL = "rural"
    URBAN = "urban"
    ISOLATED = "isolated"
    RIVERBANK = "riverbank"


class ConservationRating(str, Enum):
    VERY_GOOD = "very_good"
    GOOD = "good"
    REASONABLE = "reasonable"
    BAD = "bad"
    VERY_BAD_RUIN = "very_bad_ruin"


# --- architecture ---


class PlanShape(str, Enum):
    CIRCULAR = "circular"
    QUADRANGULAR = "quadrangular"
    RECTANGULAR = "rectangular"
    IRREGULAR = "irregular"


class Volumetry(str, Enum):
    CYLINDRICAL = "cylindrical"
    CONICAL = "conical"
    PRISMATIC_SQ_REC = "prismatic_sq_rec"


class ConstructionTechnique(str, Enum):
    DRY_STONE = "dry_stone"
    MORTARED_STONE = "mortared_stone"
    MIXED_OTHER = "mixed_other"


class ExteriorFinish(str, Enum):
    EXPOSED = "exposed"
    PLASTERED = "plastered"
    WHITEWASHED = "whitewashed"


class RoofShape(str, Enum):
    CONICAL = "conical"
    GABLE = "gable"
    LEAN_TO = "lean_to"
    INEXISTENT = "inexistent"
    FALSE_DOME = "false_dome"


class RoofMaterial(str, Enum):
    TILE = "tile"
    ZINC = "zinc"
    THATCH = "thatch"
    SLATE = "slate"
    STONE = "stone"


# --- hydraulics ---


class CaptationType(str, Enum):
    WEIR = "weir"
    POOL = "pool"
    DIRECT = "direct"


class ConductionType(str, Enum):
    LEVADA = "levada"
    MODERN_PIPE = "modern_pipe"


class ConductionState(str, Enum):
    OPERATIONAL_CLEAN = "operational_clean"
    CLOGGED = "clogged"
    DAMAGED_BROKEN = "damaged_broken"


class AdmissionRodizio(str, Enum):
    CUBO = "cubo"
    CALHA = "calha"


class AdmissionAzenha(str, Enum):
    CALHA_SUPERIOR = "calha_superior"
    CANAL_INFERIOR = "canal_inferior"


class WheelTypeRodizio(str, Enum):
    PENAS = "penas"
    COLHERES = "colheres"


class WheelTypeAzenha(str, Enum):
    COPEIRA = "copeira"
    DEZIO_PALAS = "dezio_palas"


# --- wind / grinding / epigraphy ---


class MotiveApparatus(str, Enum):
    SAILS = "sails"
    SHELLS = "shells"
    TAIL = "tail"
    CAP = "cap"


class MillstoneState(str, Enum):
    COMPLETE = "complete"
    DISASSEMBLED = "disassembled"
    FRAGMENTED = "fragmented"
    MISSING = "missing"


class EpigraphyLocation(str, Enum):
    DOOR_JAMBS = "door_jambs"
    INTERIOR_WALLS = "interior_walls"
    MILLSTONES = "millstones"
    OTHER = "other"


class EpigraphyType(str, Enum):
    DATES = "dates"
    INITIALS = "initials"
    RELIGIOUS_SYMBOLS = "religious_symbols"
    COUNTING_MARKS = "counting_marks"


# Postgres ENUM type name for every vocabulary.
PG_ENUM_NAMES: dict[type[Enum], str] = {
    ConstructionStatus: "construction_status",
    UserRole: "user_role",
    Typology: "typology",
    Access: "access",
    LegalProtection: "legal_protection",
    PropertyStatus: "property_status",
    Epoch: "epoch",
    CurrentUse: "current_use",
    Setting: "setting",
    ConservationRating: "conservation_state",
    PlanShape: "plan_shape",
    Volumetry: "volumetry",
    ConstructionTechnique: "construction_technique",
    ExteriorFinish: "exterior_finish",
    RoofShape: "roof_shape",
    RoofMaterial: "roof_material",
    CaptationType: "captation_type",
    ConductionType: "conduction_type",
    ConductionState: "conduction_state",
    AdmissionRodizio: "admission_rodizio",
    AdmissionAzenha: "admission_azenha",
    WheelTypeRodizio: "wheel_type_rodizio",
    WheelTypeAzenha: "wheel_type_azenha",
    MotiveApparatus: "motive_apparatus",
    MillstoneState: "millstone_state",
    EpigraphyLocation: "epigraphy_location",
    EpigraphyType: "epigraphy_type",
}

# mills_data column -> vocabulary. Ratings share one vocabulary.
MILL_TAXONOMY_FIELDS: dict[str, type[Enum]] = {
    "typology": Typology,
    "access": Access,
    "legal_protection": LegalProtection,
    "property_status": PropertyStatus,
    "epoch": Epoch,
    "setting": Setting,
    "current_use": CurrentUse,
    "plan_shape": PlanShape,
    "volumetry": Volumetry,
    "construction_technique": ConstructionTechnique,
    "exterior_finish": ExteriorFinish,
    "roof_shape": RoofShape,
    "roof_material": RoofMaterial,
    "captation_type": CaptationType,
    "conduction_type": ConductionType,
    "conduction_state": ConductionState,
    "admission_rodizio": AdmissionRodizio,
    "admission_azenha": AdmissionAzenha,
    "wheel_type_rodizio": WheelTypeRodizio,
    "wheel_type_azenha": WheelTypeAzenha,
    "motive_apparatus": MotiveApparatus,
    "millstone_state": MillstoneState,
    "epigraphy_location": EpigraphyLocation,
    "epigraphy_type": EpigraphyType,
    "rating_structure": ConservationRating,
    "rating_roof": ConservationRating,
    "rating_hydraulic": ConservationRating,
    "rating_mechanism": ConservationRating,
    "rating_overall": ConservationRating,
}

# Fields accepted as multi-value filters on the public map.
MAP_FILTER_FIELDS: tuple[str, ...] = (
    "typology",
    "roof_material",
    "roof_shape",
    "access",
    "motive_apparatus",
    "epoch",
    "current_use",
    "setting",
    "legal_protection",
    "property_status",
    "construction_technique",
    "plan_shape",
    "volumetry",
    "exterior_finish",
)
