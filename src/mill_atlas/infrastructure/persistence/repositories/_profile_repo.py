# src/mill_atlas/infrastructure/persistence/repositories/_profile_repo.py
from __future__ import annotations

import uuid

from sqlalchemy import select

from mill_atlas.domain.types import Profile
from mill_atlas.infrastructure.db._schema import Profile as ProfileRecord

from ._base_repo import BaseRepository


class SqlAlchemyProfileRepository(BaseRepository):
    async def get(self, user_id: uuid.UUID) -> Profile | None:
        stmt = select(ProfileRecord).where(ProfileRecord.id == user_id)
        record = (await self._session.execute(stmt)).scalar_one_or_none()
        return Profile.from_orm_model(record) if record else None
