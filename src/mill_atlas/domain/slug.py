# src/mill_atlas/domain/slug.py
"""URL slugs for constructions ("Azenha do Rio" -> "azenha-do-rio")."""

from __future__ import annotations

import re
import unicodedata
from typing import Awaitable, Callable

_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def generate_slug(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _NON_WORD.sub("", stripped).strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


async def generate_unique_slug(
    base_slug: str, exists: Callable[[str], Awaitable[bool]]
) -> str:
    """Append -1, -2, ... to `base_slug` until `exists` returns False."""
    slug = base_slug
    counter = 1
    while await exists(slug):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug
