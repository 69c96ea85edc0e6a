# src/mill_atlas/domain/types.py
"""
Data transfer objects exchanged between the layers.

Read models are built by repositories (`model_validate(..., from_attributes=
True)` or from row mappings); input models carry validated form data into the
authoring services.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .geo import is_valid_coordinate
from .taxonomy import (
    Access,
    AdmissionAzenha,
    AdmissionRodizio,
    CaptationType,
    ConductionState,
    ConductionType,
    ConservationRating,
    ConstructionStatus,
    ConstructionTechnique,
    CurrentUse,
    Epoch,
    EpigraphyLocation,
    EpigraphyType,
    ExteriorFinish,
    LegalProtection,
    MillstoneState,
    MotiveApparatus,
    PlanShape,
    PropertyStatus,
    RoofMaterial,
    RoofShape,
    Setting,
    TypeCategory,
    Typology,
    UserRole,
    Volumetry,
    WheelTypeAzenha,
    WheelTypeRodizio,
)

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
DEFAULT_WATER_LINE_COLOR = "#3b82f6"


class _Dto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_orm_model(cls, orm_obj: Any):
        return cls.model_validate(orm_obj, from_attributes=True)


# =========================
# shared building blocks
# =========================


class ConstructionLocation(_Dto):
    district: Optional[str] = None
    municipality: Optional[str] = None
    parish: Optional[str] = None
    place: Optional[str] = None
    address: Optional[str] = None
    drainage_basin: Optional[str] = None


class MillAttributes(_Dto):
    """Every descriptive column of `mills_data`."""

    typology: Typology
    access: Optional[Access] = None
    legal_protection: Optional[LegalProtection] = None
    property_status: Optional[PropertyStatus] = None
    epoch: Optional[Epoch] = None
    setting: Optional[Setting] = None
    current_use: Optional[CurrentUse] = None
    # architecture
    plan_shape: Optional[PlanShape] = None
    volumetry: Optional[Volumetry] = None
    construction_technique: Optional[ConstructionTechnique] = None
    exterior_finish: Optional[ExteriorFinish] = None
    roof_shape: Optional[RoofShape] = None
    roof_material: Optional[RoofMaterial] = None
    # hydraulics
    captation_type: Optional[CaptationType] = None
    conduction_type: Optional[ConductionType] = None
    conduction_state: Optional[ConductionState] = None
    admission_rodizio: Optional[AdmissionRodizio] = None
    admission_azenha: Optional[AdmissionAzenha] = None
    wheel_type_rodizio: Optional[WheelTypeRodizio] = None
    wheel_type_azenha: Optional[WheelTypeAzenha] = None
    rodizio_qty: Optional[int] = Field(default=None, ge=0)
    azenha_qty: Optional[int] = Field(default=None, ge=0)
    # wind
    motive_apparatus: Optional[MotiveApparatus] = None
    # grinding
    millstone_quantity: Optional[int] = Field(default=None, ge=0)
    millstone_diameter: Optional[str] = None
    millstone_state: Optional[MillstoneState] = None
    has_tremonha: bool = False
    has_quelha: bool = False
    has_urreiro: bool = False
    has_aliviadouro: bool = False
    has_farinaleiro: bool = False
    # epigraphy
    epigraphy_presence: bool = False
    epigraphy_location: Optional[EpigraphyLocation] = None
    epigraphy_type: Optional[EpigraphyType] = None
    epigraphy_description: Optional[str] = None
    # conservation
    rating_structure: Optional[ConservationRating] = None
    rating_roof: Optional[ConservationRating] = None
    rating_hydraulic: Optional[ConservationRating] = None
    rating_mechanism: Optional[ConservationRating] = None
    rating_overall: Optional[ConservationRating] = None
    # annexes
    has_oven: bool = False
    has_miller_house: bool = False
    has_stable: bool = False
    has_fulling_mill: bool = False
    # stone / gable materials
    stone_type_granite: bool = False
    stone_type_schist: bool = False
    stone_type_other: bool = False
    stone_material_description: Optional[str] = None
    gable_material_lusa: bool = False
    gable_material_marselha: bool = False
    gable_material_meia_cana: bool = False
    # dimensions (metres)
    length: Optional[float] = Field(default=None, ge=0)
    width: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    water_line_id: Optional[uuid.UUID] = None


MILL_ATTRIBUTE_FIELDS: tuple[str, ...] = tuple(MillAttributes.model_fields)


class Observations(_Dto):
    observations_structure: Optional[str] = None
    observations_roof: Optional[str] = None
    observations_hydraulic: Optional[str] = None
    observations_mechanism: Optional[str] = None
    observations_general: Optional[str] = None


class TranslationText(Observations):
    lang_code: str
    title: str
    description: Optional[str] = None


class WaterLineTranslationText(_Dto):
    lang_code: str
    name: str
    description: Optional[str] = None


# =========================
# public read models
# =========================


class MillFilters(BaseModel):
    """Multi-value taxonomy filters of the public map; empty means no filter."""

    typology: list[Typology] = Field(default_factory=list)
    roof_material: list[RoofMaterial] = Field(default_factory=list)
    roof_shape: list[RoofShape] = Field(default_factory=list)
    access: list[Access] = Field(default_factory=list)
    motive_apparatus: list[MotiveApparatus] = Field(default_factory=list)
    epoch: list[Epoch] = Field(default_factory=list)
    current_use: list[CurrentUse] = Field(default_factory=list)
    setting: list[Setting] = Field(default_factory=list)
    legal_protection: list[LegalProtection] = Field(default_factory=list)
    property_status: list[PropertyStatus] = Field(default_factory=list)
    construction_technique: list[ConstructionTechnique] = Field(default_factory=list)
    plan_shape: list[PlanShape] = Field(default_factory=list)
    volumetry: list[Volumetry] = Field(default_factory=list)
    exterior_finish: list[ExteriorFinish] = Field(default_factory=list)
    district: Optional[str] = None

    def cache_key(self) -> str:
        return self.model_dump_json(exclude_defaults=True)


class PublishedMill(ConstructionLocation):
    id: uuid.UUID
    slug: str
    legacy_id: Optional[str] = None
    main_image: Optional[str] = None
    gallery_images: list[str] = Field(default_factory=list)
    custom_icon_url: Optional[str] = None
    lat: float
    lng: float
    typology: Typology
    access: Optional[Access] = None
    legal_protection: Optional[LegalProtection] = None
    property_status: Optional[PropertyStatus] = None
    epoch: Optional[Epoch] = None
    current_use: Optional[CurrentUse] = None
    setting: Optional[Setting] = None
    roof_material: Optional[RoofMaterial] = None
    roof_shape: Optional[RoofShape] = None
    motive_apparatus: Optional[MotiveApparatus] = None
    construction_technique: Optional[ConstructionTechnique] = None
    plan_shape: Optional[PlanShape] = None
    volumetry: Optional[Volumetry] = None
    exterior_finish: Optional[ExteriorFinish] = None
    water_line_id: Optional[uuid.UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None


class MillDetail(ConstructionLocation, MillAttributes, Observations):
    id: uuid.UUID
    slug: str
    status: ConstructionStatus
    legacy_id: Optional[str] = None
    main_image: Optional[str] = None
    gallery_images: list[str] = Field(default_factory=list)
    custom_icon_url: Optional[str] = None
    lat: float
    lng: float
    title: Optional[str] = None
    description: Optional[str] = None
    lang_code: Optional[str] = None
    water_line_slug: Optional[str] = None
    water_line_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MapWaterLine(_Dto):
    id: uuid.UUID
    slug: str
    path: list[list[float]]
    color: str = DEFAULT_WATER_LINE_COLOR
    name: str


class MapPoca(_Dto):
    id: uuid.UUID
    slug: str
    lat: float
    lng: float
    title: Optional[str] = None
    water_line_id: uuid.UUID


class MapData(BaseModel):
    mills: list[PublishedMill] = Field(default_factory=list)
    pocas: list[MapPoca] = Field(default_factory=list)
    water_lines: list[MapWaterLine] = Field(default_factory=list)


class WaterLineDetail(_Dto):
    id: uuid.UUID
    slug: str
    name: str
    description: Optional[str] = None
    color: str = DEFAULT_WATER_LINE_COLOR
    path: list[list[float]]
    connected_mills: list[PublishedMill] = Field(default_factory=list)


class WaterLineOption(_Dto):
    id: uuid.UUID
    slug: str
    name: str


# --- searchable records (all translations attached) ---


class SearchableMill(ConstructionLocation, MillAttributes):
    id: uuid.UUID
    slug: str
    legacy_id: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    translations: list[TranslationText] = Field(default_factory=list)


class SearchableWaterLine(_Dto):
    id: uuid.UUID
    slug: str
    translations: list[WaterLineTranslationText] = Field(default_factory=list)


class SearchablePoca(_Dto):
    id: uuid.UUID
    slug: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    water_line_id: Optional[uuid.UUID] = None
    water_line_name: Optional[str] = None
    water_line_slug: Optional[str] = None
    translations: list[TranslationText] = Field(default_factory=list)


class SearchResult(BaseModel):
    type: Literal["mill", "waterLine", "poca"]
    id: uuid.UUID
    slug: str
    title: str
    lang_code: Optional[str] = None
    subtitle: Optional[str] = None


# =========================
# dashboard read models
# =========================


class ConstructionHeader(_Dto):
    id: uuid.UUID
    slug: str
    status: ConstructionStatus
    type_category: str
    created_by: Optional[uuid.UUID] = None


class NearbyConstruction(BaseModel):
    id: uuid.UUID
    slug: str
    type_category: str
    title: Optional[str] = None
    distance_m: float


class StatusChange(BaseModel):
    id: uuid.UUID
    status: ConstructionStatus


class ReviewQueueItem(_Dto):
    id: uuid.UUID
    slug: str
    status: ConstructionStatus
    type_category: str
    title: Optional[str] = None
    created_at: Optional[datetime] = None


class InventoryItem(_Dto):
    id: uuid.UUID
    slug: str
    type_category: str
    status: ConstructionStatus
    title: Optional[str] = None
    district: Optional[str] = None
    municipality: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ConstructionForEdit(ConstructionLocation, MillAttributes):
    id: uuid.UUID
    slug: str
    status: ConstructionStatus
    legacy_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    main_image: Optional[str] = None
    gallery_images: list[str] = Field(default_factory=list)
    custom_icon_url: Optional[str] = None
    translations: list[TranslationText] = Field(default_factory=list)


class PocaForEdit(_Dto):
    id: uuid.UUID
    slug: str
    status: ConstructionStatus
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    water_line_id: uuid.UUID
    translations: list[TranslationText] = Field(default_factory=list)


class WaterLineForEdit(_Dto):
    id: uuid.UUID
    construction_id: uuid.UUID
    slug: str
    status: ConstructionStatus
    color: str
    path: list[list[float]]
    translations: list[WaterLineTranslationText] = Field(default_factory=list)


class Profile(_Dto):
    id: uuid.UUID
    role: UserRole = UserRole.PUBLIC
    full_name: Optional[str] = None
    academic_affiliation: Optional[str] = None


class CurrentUser(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None
    role: UserRole = UserRole.PUBLIC

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_researcher_or_admin(self) -> bool:
        return self.role in (UserRole.RESEARCHER, UserRole.ADMIN)


class BibliographyEntry(_Dto):
    id: uuid.UUID
    title: str
    author: str
    year: Optional[int] = None
    publisher: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None


# =========================
# input models
# =========================


def _check_coordinates(lat: float, lng: float) -> None:
    if not is_valid_coordinate(lat, lng):
        raise ValueError(
            "Invalid coordinates: latitude must be within [-90, 90] "
            "and longitude within [-180, 180]"
        )


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class MillInput(ConstructionLocation, MillAttributes, Observations):
    """Add/edit mill form payload."""

    title: str = Field(min_length=1)
    description: Optional[str] = None
    locale: str = "pt"
    latitude: float
    longitude: float
    legacy_id: Optional[str] = None
    main_image: Optional[str] = None
    gallery_images: list[str] = Field(default_factory=list)
    custom_icon_url: Optional[str] = None
    status: ConstructionStatus = ConstructionStatus.DRAFT

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @model_validator(mode="after")
    def _validate_coordinates(self) -> "MillInput":
        _check_coordinates(self.latitude, self.longitude)
        return self


class PocaInput(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    locale: str = "pt"
    latitude: float
    longitude: float
    water_line_id: uuid.UUID
    status: ConstructionStatus = ConstructionStatus.DRAFT

    @model_validator(mode="after")
    def _validate_coordinates(self) -> "PocaInput":
        if not self.title.strip():
            raise ValueError("Title is required")
        _check_coordinates(self.latitude, self.longitude)
        return self


class WaterLineInput(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: str = DEFAULT_WATER_LINE_COLOR
    path: list[list[float]]
    locale: str = "pt"
    status: ConstructionStatus = ConstructionStatus.DRAFT

    @field_validator("color")
    @classmethod
    def _validate_color(cls, v: str) -> str:
        if not HEX_COLOR_RE.match(v):
            raise ValueError("Color must be a hex value like #3b82f6")
        return v.lower()

    @field_validator("path")
    @classmethod
    def _validate_path(cls, v: list[list[float]]) -> list[list[float]]:
        if len(v) < 2:
            raise ValueError("A water line needs at least 2 points")
        for point in v:
            if len(point) != 2:
                raise ValueError("Each path point must be [lat, lng]")
            _check_coordinates(point[0], point[1])
        return v


class BibliographyInput(BaseModel):
    title: str
    author: str
    year: Optional[int] = None
    publisher: Optional[str] = None
    url: Optional[str] = None

    @field_validator("title", "author", mode="before")
    @classmethod
    def _required(cls, v: Any, info) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return v.strip() if isinstance(v, str) else v

    @field_validator("year", "publisher", "url", mode="before")
    @classmethod
    def _empty_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not re.match(r"^https?://[^\s/$.?#][^\s]*$", v, re.I):
            raise ValueError("Invalid URL")
        return v


TypeFilter = Literal["MILL", "LEVADA", "POCA", "ALL"]

TYPE_FILTER_TO_CATEGORY: dict[str, TypeCategory] = {
    "MILL": TypeCategory.MILL,
    "LEVADA": TypeCategory.WATER_LINE,
    "POCA": TypeCategory.POCA,
}
