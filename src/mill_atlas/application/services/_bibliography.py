# src/mill_atlas/application/services/_bibliography.py
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

import structlog

from mill_atlas.domain.types import BibliographyEntry, BibliographyInput, CurrentUser
from mill_atlas.exceptions import NotFoundError

from ._access import require_researcher_or_admin

if TYPE_CHECKING:
    from mill_atlas.interfaces import UowFactory

logger = structlog.get_logger(__name__)


class BibliographyService:
    def __init__(self, uow_factory: UowFactory):
        self._uow_factory = uow_factory

    async def list_entries(self) -> list[BibliographyEntry]:
        async with self._uow_factory() as uow:
            return await uow.bibliography.list_entries()

    async def create_entry(
        self, user: Optional[CurrentUser], data: BibliographyInput
    ) -> BibliographyEntry:
        require_researcher_or_admin(user)
        async with self._uow_factory() as uow:
            entry = await uow.bibliography.add(data)
        logger.info("Bibliography entry created", entry_id=str(entry.id))
        return entry

    async def delete_entry(self, user: Optional[CurrentUser], entry_id: uuid.UUID) -> None:
        require_researcher_or_admin(user)
        async with self._uow_factory() as uow:
            if not await uow.bibliography.delete(entry_id):
                raise NotFoundError("Bibliography entry not found")
        logger.info("Bibliography entry deleted", entry_id=str(entry_id))
