# tests/unit/domain/test_slug.py
from __future__ import annotations

import pytest

from mill_atlas.domain.slug import generate_slug, generate_unique_slug


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Azenha do Rio", "azenha-do-rio"),
        ("Moinho de São João", "moinho-de-sao-joao"),
        ("  Poça -- Grande!  ", "poca-grande"),
        ("Levada_da_Serra", "levada_da_serra"),
        ("Açude (1890)", "acude-1890"),
        ("!!!", ""),
    ],
)
def test_generate_slug(text, expected):
    assert generate_slug(text) == expected


async def test_unique_slug_returns_base_when_free():
    async def exists(slug: str) -> bool:
        return False

    assert await generate_unique_slug("azenha", exists) == "azenha"


async def test_unique_slug_appends_counter():
    taken = {"azenha", "azenha-1", "azenha-2"}

    async def exists(slug: str) -> bool:
        return slug in taken

    assert await generate_unique_slug("azenha", exists) == "azenha-3"
