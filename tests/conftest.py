# tests/conftest.py
"""
Shared fixtures.

- `test_config`: a `MillAtlasConfig` built in-process (no .env lookup) with a
  JWT secret and storage settings filled in.
- `make_user`: builds a `CurrentUser` for a given role.

PostGIS-backed fixtures live in `tests/integration/conftest.py`.
"""

from __future__ import annotations

import uuid
from typing import Callable

import pytest
import structlog

from mill_atlas.config import MillAtlasConfig
from mill_atlas.domain.taxonomy import UserRole
from mill_atlas.domain.types import CurrentUser

from tests.helpers.fakes import TEST_JWT_SECRET


@pytest.fixture
def test_config() -> MillAtlasConfig:
    return MillAtlasConfig.model_validate(
        {
            "auth": {
                "jwt_secret": TEST_JWT_SECRET,
                "jwt_audience": "authenticated",
                "magic_link_redirect": "https://atlas.test",
            },
            "storage": {
                "base_url": "https://storage.test",
                "service_key": "service-key",
            },
        }
    )


@pytest.fixture
def make_user() -> Callable[[UserRole], CurrentUser]:
    def _make(role: UserRole = UserRole.RESEARCHER) -> CurrentUser:
        return CurrentUser(id=uuid.uuid4(), email=f"{role.value}@atlas.test", role=role)

    return _make


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
