# src/mill_atlas/application/services/_media.py
"""
Uploads of construction images/documents and custom SVG map markers.

Files are never overwritten: every upload gets a millisecond timestamp in
its name and the storage request is sent with `x-upsert: false`.
"""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING, Optional

import structlog

from mill_atlas.domain.types import CurrentUser
from mill_atlas.exceptions import ConfigurationError, ValidationError

from ._access import require_researcher_or_admin

if TYPE_CHECKING:
    from mill_atlas.config import MillAtlasConfig
    from mill_atlas.interfaces import ObjectStorage

logger = structlog.get_logger(__name__)

ALLOWED_FILE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "application/pdf"})
ALLOWED_SVG_TYPES = frozenset({"image/svg+xml", "image/svg"})

_UNSAFE_SLUG_CHARS = re.compile(r"[^a-z0-9-]", re.I)


def sanitize_slug(slug: str) -> str:
    return _UNSAFE_SLUG_CHARS.sub("-", slug).lower()


def _extension(filename: str, default: str) -> str:
    if "." not in filename:
        return default
    return filename.rsplit(".", 1)[-1].lower() or default


def _now_ms() -> int:
    return int(time.time() * 1000)


def construction_file_path(
    filename: str, slug: str, prefix: Optional[str] = None, *, timestamp_ms: Optional[int] = None
) -> str:
    ts = timestamp_ms if timestamp_ms is not None else _now_ms()
    ext = _extension(filename, "bin")
    name = f"{prefix}-{ts}.{ext}" if prefix else f"{ts}.{ext}"
    return f"mills/{sanitize_slug(slug)}/{name}"


def map_icon_path(filename: str, slug: str, *, timestamp_ms: Optional[int] = None) -> str:
    ts = timestamp_ms if timestamp_ms is not None else _now_ms()
    return f"markers/{sanitize_slug(slug)}/icon-{ts}.{_extension(filename, 'svg')}"


def _mb(size: int) -> str:
    return f"{size / 1024 / 1024:g}MB"


class MediaService:
    def __init__(self, config: MillAtlasConfig, storage: ObjectStorage | None = None):
        self._config = config
        self._storage = storage

    def _require_storage(self) -> ObjectStorage:
        if self._storage is None:
            raise ConfigurationError("Object storage is not configured")
        return self._storage

    @property
    def file_size_limit(self) -> int:
        return self._config.storage.max_file_size

    @property
    def svg_size_limit(self) -> int:
        return self._config.storage.max_svg_size

    def validate_construction_file(self, content_type: Optional[str], size: int) -> None:
        if content_type not in ALLOWED_FILE_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG images and PDF documents are allowed."
            )
        limit = self.file_size_limit
        if size > limit:
            raise ValidationError(f"File size exceeds maximum allowed size of {_mb(limit)}.")

    def validate_svg(self, content_type: Optional[str], size: int) -> None:
        if content_type not in ALLOWED_SVG_TYPES:
            raise ValidationError("Invalid file type. Only SVG files are allowed.")
        limit = self.svg_size_limit
        if size > limit:
            raise ValidationError(f"File size exceeds maximum allowed size of {_mb(limit)}.")

    async def upload_construction_file(
        self,
        user: Optional[CurrentUser],
        *,
        filename: str,
        content_type: Optional[str],
        data: bytes,
        slug: Optional[str],
        prefix: Optional[str] = None,
    ) -> str:
        """Stores the file in the constructions bucket and returns its relative path."""
        require_researcher_or_admin(user)
        if not slug:
            raise ValidationError("Slug is required for file organization")
        self.validate_construction_file(content_type, len(data))
        path = construction_file_path(filename, slug, prefix or None)
        await self._require_storage().upload(
            self._config.storage.constructions_bucket, path, data, content_type
        )
        return path

    async def upload_map_icon(
        self,
        user: Optional[CurrentUser],
        *,
        filename: str,
        content_type: Optional[str],
        data: bytes,
        slug: Optional[str],
    ) -> str:
        """Stores an SVG marker in the map-assets bucket and returns its public URL."""
        require_researcher_or_admin(user)
        if not slug:
            raise ValidationError("Slug is required for file organization")
        self.validate_svg(content_type, len(data))
        path = map_icon_path(filename, slug)
        return await self._require_storage().upload(
            self._config.storage.map_assets_bucket, path, data, content_type
        )

    def get_public_url(self, path: Optional[str], bucket: Optional[str] = None) -> Optional[str]:
        if not path:
            return None
        base = self._config.storage.base_url
        if not base:
            logger.warning("Storage base URL is not configured; cannot build public URL")
            return None
        bucket = bucket or self._config.storage.constructions_bucket
        return f"{base.rstrip('/')}/storage/v1/object/public/{bucket}/{path}"
