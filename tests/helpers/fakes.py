# tests/helpers/fakes.py
"""
Test doubles: object storage, auth gateway and an in-memory unit of work
whose repositories are plain objects the test fills in.
"""

from __future__ import annotations

import uuid
from types import SimpleNamespace
from typing import Any, Optional

from mill_atlas.domain.types import BibliographyEntry, BibliographyInput, Profile

TEST_JWT_SECRET = "test-secret-with-enough-length-for-hs256"


class FakeStorage:
    """Records uploads instead of sending them."""

    def __init__(self, base_url: str = "https://storage.test"):
        self.base_url = base_url
        self.uploads: list[tuple[str, str, bytes, str]] = []

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        self.uploads.append((bucket, path, content, content_type))
        return self.get_public_url(bucket, path)


class FakeAuthGateway:
    def __init__(self):
        self.sent: list[tuple[str, Optional[str]]] = []

    async def send_magic_link(self, email: str, redirect_to: Optional[str] = None) -> None:
        self.sent.append((email, redirect_to))


class FakeProfileRepository:
    def __init__(self, profiles: Optional[dict[uuid.UUID, Profile]] = None):
        self.profiles = profiles or {}

    async def get(self, user_id: uuid.UUID) -> Optional[Profile]:
        return self.profiles.get(user_id)


class FakeBibliographyRepository:
    def __init__(self):
        self.entries: dict[uuid.UUID, BibliographyEntry] = {}

    async def list_entries(self) -> list[BibliographyEntry]:
        return sorted(
            self.entries.values(),
            key=lambda e: (e.year is None, -(e.year or 0)),
        )

    async def add(self, data: BibliographyInput) -> BibliographyEntry:
        entry = BibliographyEntry(id=uuid.uuid4(), **data.model_dump())
        self.entries[entry.id] = entry
        return entry

    async def delete(self, entry_id: uuid.UUID) -> bool:
        return self.entries.pop(entry_id, None) is not None


class FakeUnitOfWork:
    """Shares its repositories across every `async with`, like one database."""

    def __init__(self, **repos: Any):
        self.profiles = repos.pop("profiles", FakeProfileRepository())
        self.bibliography = repos.pop("bibliography", FakeBibliographyRepository())
        for name, repo in repos.items():
            setattr(self, name, repo)
        self.entered = 0

    async def __aenter__(self) -> "FakeUnitOfWork":
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    def factory(self):
        return lambda: self


def namespace(**kwargs: Any) -> SimpleNamespace:
    return SimpleNamespace(**kwargs)
