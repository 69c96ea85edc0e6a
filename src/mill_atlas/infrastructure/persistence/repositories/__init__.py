# src/mill_atlas/infrastructure/persistence/repositories/__init__.py
"""SQLAlchemy repositories, one per aggregate table."""

from ._base_repo import BaseRepository
from ._bibliography_repo import SqlAlchemyBibliographyRepository
from ._construction_repo import SqlAlchemyConstructionRepository
from ._mill_repo import SqlAlchemyMillRepository
from ._poca_repo import SqlAlchemyPocaRepository
from ._profile_repo import SqlAlchemyProfileRepository
from ._water_line_repo import SqlAlchemyWaterLineRepository

__all__ = [
    "BaseRepository",
    "SqlAlchemyBibliographyRepository",
    "SqlAlchemyConstructionRepository",
    "SqlAlchemyMillRepository",
    "SqlAlchemyPocaRepository",
    "SqlAlchemyProfileRepository",
    "SqlAlchemyWaterLineRepository",
]
