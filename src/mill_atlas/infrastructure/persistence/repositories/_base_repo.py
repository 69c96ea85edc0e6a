# src/mill_atlas/infrastructure/persistence/repositories/_base_repo.py
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """Base class of all SQLAlchemy repositories."""

    def __init__(self, session: "AsyncSession"):
        self._session = session
