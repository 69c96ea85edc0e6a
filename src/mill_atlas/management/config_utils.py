# src/mill_atlas/management/config_utils.py
"""Helpers for presenting and converting database URLs."""

from __future__ import annotations

from typing import Union

from sqlalchemy.engine.url import URL, make_url


def mask_db_url(url: Union[str, URL, None]) -> str:
    """Render a DSN with its password replaced by '***'."""
    if url is None:
        return "[not configured]"
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return "[unparseable database URL]"


def to_sync_url(url: Union[str, URL]) -> URL:
    """asyncpg DSN -> psycopg DSN, for alembic and other sync tooling."""
    url_obj = make_url(url)
    if url_obj.drivername.startswith("postgresql"):
        return url_obj.set(drivername="postgresql+psycopg")
    return url_obj
