# src/mill_atlas/infrastructure/db/_schema.py
"""
ORM models matching the Alembic schema.

Every model is a keyword-only dataclass; server-side defaults are mirrored
with `default`/`default_factory` so objects built in Python carry the same
values the database would assign.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from mill_atlas.domain.taxonomy import (
    PG_ENUM_NAMES,
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
    Typology,
    UserRole,
    Volumetry,
    WheelTypeAzenha,
    WheelTypeRodizio,
)

from ._types import Geography, Geometry
from .base import Base


def pg_enum(enum_cls: type[PyEnum]) -> ENUM:
    """Postgres ENUM bound to a domain vocabulary; stores the raw values."""
    return ENUM(
        enum_cls,
        name=PG_ENUM_NAMES[enum_cls],
        values_callable=lambda members: [m.value for m in members],
        create_type=False,
        validate_strings=True,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _created_at() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default_factory=_utcnow,
        init=False,
    )


def _updated_at() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        default_factory=_utcnow,
        init=False,
    )


# =========================
# identities
# =========================


class Profile(Base, kw_only=True):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    role: Mapped[UserRole] = mapped_column(
        pg_enum(UserRole), server_default=UserRole.PUBLIC.value, default=UserRole.PUBLIC
    )
    full_name: Mapped[Optional[str]] = mapped_column(Text, default=None)
    academic_affiliation: Mapped[Optional[str]] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


# =========================
# constructions (shared parent)
# =========================


class Construction(Base, kw_only=True):
    __tablename__ = "constructions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
        default_factory=uuid.uuid4,
    )
    slug: Mapped[str] = mapped_column(String(255), unique=True)
    # WKT "POINT(lng lat)"
    geom: Mapped[Optional[str]] = mapped_column(Geography("POINT"), default=None)
    legacy_id: Mapped[Optional[str]] = mapped_column(Text, default=None)
    type_category: Mapped[str] = mapped_column(
        Text, server_default="MILL", default="MILL"
    )
    district: Mapped[Optional[str]] = mapped_column(Text, default=None)
    municipality: Mapped[Optional[str]] = mapped_column(Text, default=None)
    parish: Mapped[Optional[str]] = mapped_column(Text, default=None)
    place: Mapped[Optional[str]] = mapped_column(Text, default=None)
    address: Mapped[Optional[str]] = mapped_column(Text, default=None)
    drainage_basin: Mapped[Optional[str]] = mapped_column(Text, default=None)
    main_image: Mapped[Optional[str]] = mapped_column(Text, default=None)
    gallery_images: Mapped[Optional[list[str]]] = mapped_column(
        ARRAY(Text), default=None
    )
    custom_icon_url: Mapped[Optional[str]] = mapped_column(Text, default=None)
    status: Mapped[ConstructionStatus] = mapped_column(
        pg_enum(ConstructionStatus),
        server_default=ConstructionStatus.DRAFT.value,
        default=ConstructionStatus.DRAFT,
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), default=None
    )
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        Index("ix_constructions_status", "status"),
        Index("ix_constructions_type_category", "type_category"),
        Index("ix_constructions_geom", "geom", postgresql_using="gist"),
    )


class ConstructionTranslation(Base, kw_only=True):
    __tablename__ = "construction_translations"

    construction_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("constructions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    lang_code: Mapped[str] = mapped_column(String(10), primary_key=True)
    title: Mapped[str] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    observations_structure: Mapped[Optional[str]] = mapped_column(Text, default=None)
    observations_roof: Mapped[Optional[str]] = mapped_column(Text, default=None)
    observations_hydraulic: Mapped[Optional[str]] = mapped_column(Text, default=None)
    observations_mechanism: Mapped[Optional[str]] = mapped_column(Text, default=None)
    observations_general: Mapped[Optional[str]] = mapped_column(Text, default=None)


# =========================
# specialisations
# =========================


class WaterLine(Base, kw_only=True):
    __tablename__ = "water_lines"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
        default_factory=uuid.uuid4,
    )
    # NULL only for legacy imports awaiting `water-lines reparent`
    construction_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("constructions.id", ondelete="CASCADE"),
        unique=True,
        nullable=True,
    )
    slug: Mapped[str] = mapped_column(String(255), unique=True)
    # WKT "LINESTRING(lng lat, ...)"
    path: Mapped[str] = mapped_column(Geometry("LINESTRING"))
    color: Mapped[str] = mapped_column(
        String(7), server_default="#3b82f6", default="#3b82f6"
    )
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class WaterLineTranslation(Base, kw_only=True):
    __tablename__ = "water_line_translations"

    water_line_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("water_lines.id", ondelete="CASCADE"),
        primary_key=True,
    )
    locale: Mapped[str] = mapped_column(String(10), primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)


class MillData(Base, kw_only=True):
    __tablename__ = "mills_data"

    construction_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("constructions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    typology: Mapped[Typology] = mapped_column(pg_enum(Typology))
    access: Mapped[Optional[Access]] = mapped_column(pg_enum(Access), default=None)
    legal_protection: Mapped[Optional[LegalProtection]] = mapped_column(
        pg_enum(LegalProtection), default=None
    )
    property_status: Mapped[Optional[PropertyStatus]] = mapped_column(
        pg_enum(PropertyStatus), default=None
    )
    epoch: Mapped[Optional[Epoch]] = mapped_column(pg_enum(Epoch), default=None)
    setting: Mapped[Optional[Setting]] = mapped_column(pg_enum(Setting), default=None)
    current_use: Mapped[Optional[CurrentUse]] = mapped_column(
        pg_enum(CurrentUse), default=None
    )
    # architecture
    plan_shape: Mapped[Optional[PlanShape]] = mapped_column(
        pg_enum(PlanShape), default=None
    )
    volumetry: Mapped[Optional[Volumetry]] = mapped_column(
        pg_enum(Volumetry), default=None
    )
    construction_technique: Mapped[Optional[ConstructionTechnique]] = mapped_column(
        pg_enum(ConstructionTechnique), default=None
    )
    exterior_finish: Mapped[Optional[ExteriorFinish]] = mapped_column(
        pg_enum(ExteriorFinish), default=None
    )
    roof_shape: Mapped[Optional[RoofShape]] = mapped_column(
        pg_enum(RoofShape), default=None
    )
    roof_material: Mapped[Optional[RoofMaterial]] = mapped_column(
        pg_enum(RoofMaterial), default=None
    )
    # hydraulics
    captation_type: Mapped[Optional[CaptationType]] = mapped_column(
        pg_enum(CaptationType), default=None
    )
    conduction_type: Mapped[Optional[ConductionType]] = mapped_column(
        pg_enum(ConductionType), default=None
    )
    conduction_state: Mapped[Optional[ConductionState]] = mapped_column(
        pg_enum(ConductionState), default=None
    )
    admission_rodizio: Mapped[Optional[AdmissionRodizio]] = mapped_column(
        pg_enum(AdmissionRodizio), default=None
    )
    admission_azenha: Mapped[Optional[AdmissionAzenha]] = mapped_column(
        pg_enum(AdmissionAzenha), default=None
    )
    wheel_type_rodizio: Mapped[Optional[WheelTypeRodizio]] = mapped_column(
        pg_enum(WheelTypeRodizio), default=None
    )
    wheel_type_azenha: Mapped[Optional[WheelTypeAzenha]] = mapped_column(
        pg_enum(WheelTypeAzenha), default=None
    )
    rodizio_qty: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    azenha_qty: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    # wind
    motive_apparatus: Mapped[Optional[MotiveApparatus]] = mapped_column(
        pg_enum(MotiveApparatus), default=None
    )
    # grinding
    millstone_quantity: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    millstone_diameter: Mapped[Optional[str]] = mapped_column(Text, default=None)
    millstone_state: Mapped[Optional[MillstoneState]] = mapped_column(
        pg_enum(MillstoneState), default=None
    )
    has_tremonha: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False)
    has_quelha: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False)
    has_urreiro: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False)
    has_aliviadouro: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False)
    has_farinaleiro: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False)
    # epigraphy
    epigraphy_presence: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    epigraphy_location: Mapped[Optional[EpigraphyLocation]] = mapped_column(
        pg_enum(EpigraphyLocation), default=None
    )
    epigraphy_type: Mapped[Optional[EpigraphyType]] = mapped_column(
        pg_enum(EpigraphyType), default=None
    )
    epigraphy_description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    # conservation
    rating_structure: Mapped[Optional[ConservationRating]] = mapped_column(
        pg_enum(ConservationRating), default=None
    )
    rating_roof: Mapped[Optional[ConservationRating]] = mapped_column(
        pg_enum(ConservationRating), default=None
    )
    rating_hydraulic: Mapped[Optional[ConservationRating]] = mapped_column(
        pg_enum(ConservationRating), default=None
    )
    rating_mechanism: Mapped[Optional[ConservationRating]] = mapped_column(
        pg_enum(ConservationRating), default=None
    )
    rating_overall: Mapped[Optional[ConservationRating]] = mapped_column(
        pg_enum(ConservationRating), default=None
    )
    # annexes
    has_oven: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False)
    has_miller_house: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    has_stable: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False)
    has_fulling_mill: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    # stone / gable materials
    stone_type_granite: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    stone_type_schist: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    stone_type_other: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    stone_material_description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    gable_material_lusa: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    gable_material_marselha: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    gable_material_meia_cana: Mapped[bool] = mapped_column(
        Boolean, server_default="false", default=False
    )
    # dimensions (metres)
    length: Mapped[Optional[float]] = mapped_column(Float, default=None)
    width: Mapped[Optional[float]] = mapped_column(Float, default=None)
    height: Mapped[Optional[float]] = mapped_column(Float, default=None)
    water_line_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("water_lines.id", ondelete="SET NULL"),
        default=None,
    )

    __table_args__ = (
        Index("ix_mills_data_typology", "typology"),
        Index("ix_mills_data_water_line_id", "water_line_id"),
    )


class PocaData(Base, kw_only=True):
    __tablename__ = "pocas_data"

    construction_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("constructions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    water_line_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("water_lines.id", ondelete="RESTRICT"),
    )


class BibliographyRecord(Base, kw_only=True):
    __tablename__ = "bibliography"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
        default_factory=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(Text)
    author: Mapped[str] = mapped_column(Text)
    year: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    publisher: Mapped[Optional[str]] = mapped_column(Text, default=None)
    url: Mapped[Optional[str]] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        CheckConstraint("length(title) > 0", name="title_not_empty"),
    )
