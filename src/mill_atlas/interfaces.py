# src/mill_atlas/interfaces.py
"""
Abstract protocols the application layer depends on.

Services receive a `UowFactory` and optional collaborators (cache, storage,
auth gateway) typed against these protocols, never against the concrete
SQLAlchemy or httpx implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

if TYPE_CHECKING:
    from mill_atlas.infrastructure.persistence.repositories import (
        SqlAlchemyBibliographyRepository,
        SqlAlchemyConstructionRepository,
        SqlAlchemyMillRepository,
        SqlAlchemyPocaRepository,
        SqlAlchemyProfileRepository,
        SqlAlchemyWaterLineRepository,
    )


class CacheHandler(Protocol):
    """Cache used by the public read layer."""

    async def get(self, key: str) -> Any | None: ...

    @property
    def generation(self) -> int:
        """Bumped by every clear()."""
        ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        generation: int | None = None,
    ) -> None:
        """Stores `value` unless `generation` is given and no longer current."""
        ...

    async def delete(self, key: str) -> None: ...

    async def clear(self) -> None:
        """Drop every entry. Called after any write that affects published data."""
        ...


class ObjectStorage(Protocol):
    """Bucket storage for images and marker icons."""

    async def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> str:
        """Uploads `content` and returns its public URL."""
        ...

    def get_public_url(self, bucket: str, path: str) -> str: ...


class AuthGateway(Protocol):
    """External identity provider (magic-link sign in)."""

    async def send_magic_link(self, email: str, redirect_to: Optional[str] = None) -> None: ...


class IUnitOfWork(Protocol):
    constructions: "SqlAlchemyConstructionRepository"
    mills: "SqlAlchemyMillRepository"
    water_lines: "SqlAlchemyWaterLineRepository"
    pocas: "SqlAlchemyPocaRepository"
    profiles: "SqlAlchemyProfileRepository"
    bibliography: "SqlAlchemyBibliographyRepository"

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


UowFactory = Callable[[], IUnitOfWork]
