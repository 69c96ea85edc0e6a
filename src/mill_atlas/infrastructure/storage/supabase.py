# src/mill_atlas/infrastructure/storage/supabase.py
"""
httpx client for the hosted storage buckets and the magic-link endpoint.

Both talk to the same Supabase project REST API using the service key:
    POST {base}/storage/v1/object/{bucket}/{path}   (upload)
    GET  {base}/storage/v1/object/public/{bucket}/{path}   (public URL)
    POST {base}/auth/v1/otp   (magic link)
"""

from __future__ import annotations

from typing import Optional

import httpx
import structlog

from mill_atlas.config import StorageSettings
from mill_atlas.exceptions import AuthenticationError, ConfigurationError, StorageError
from mill_atlas.interfaces import AuthGateway, ObjectStorage

logger = structlog.get_logger(__name__)


class SupabaseClient(ObjectStorage, AuthGateway):
    def __init__(
        self,
        settings: StorageSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.base_url or not settings.service_key:
            raise ConfigurationError(
                "storage.base_url and storage.service_key must be configured "
                "(MILLATLAS_STORAGE__BASE_URL / MILLATLAS_STORAGE__SERVICE_KEY)"
            )
        self._base_url = settings.base_url.rstrip("/")
        key = settings.service_key
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {key}", "apikey": key},
            timeout=httpx.Timeout(settings.timeout),
            transport=transport,
        )

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{path}"

    async def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> str:
        try:
            response = await self._client.post(
                f"/storage/v1/object/{bucket}/{path}",
                content=content,
                headers={
                    "Content-Type": content_type,
                    "x-upsert": "false",
                    "cache-control": "3600",
                },
            )
        except httpx.HTTPError as e:
            logger.error("Storage upload failed", bucket=bucket, path=path, error=str(e))
            raise StorageError(f"Upload failed: {e}") from e
        if response.is_error:
            logger.error(
                "Storage rejected upload",
                bucket=bucket,
                path=path,
                status=response.status_code,
                body=response.text[:500],
            )
            raise StorageError(f"Upload failed: {response.status_code} {response.text[:200]}")
        logger.info("File uploaded", bucket=bucket, path=path, size=len(content))
        return self.get_public_url(bucket, path)

    async def send_magic_link(self, email: str, redirect_to: Optional[str] = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        try:
            response = await self._client.post(
                "/auth/v1/otp",
                json={"email": email, "create_user": True},
                params=params,
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Could not send magic link: {e}") from e
        if response.is_error:
            logger.warning(
                "Magic link request rejected", status=response.status_code
            )
            raise AuthenticationError(
                f"Could not send magic link ({response.status_code})"
            )

    async def aclose(self) -> None:
        await self._client.aclose()
