# src/mill_atlas/infrastructure/db/base.py
"""
Shared `MetaData` and the declarative base.

All ORM models attach to the single module-level `metadata`, which Alembic
also uses as its autogenerate target.
"""

from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(MappedAsDataclass, DeclarativeBase):
    """Project-wide declarative base (dataclass-mapped)."""

    __abstract__ = True
    metadata = metadata
