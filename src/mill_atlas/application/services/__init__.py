# src/mill_atlas/application/services/__init__.py
"""
Application services.

Each service implements one group of use cases on top of a `UowFactory`;
role checks happen here, not in the HTTP layer.
"""

from ._access import (
    AccessService,
    extract_bearer,
    is_admin,
    is_researcher_or_admin,
    require_admin,
    require_researcher_or_admin,
)
from ._authoring import AuthoringService, effective_status
from ._bibliography import BibliographyService
from ._maintenance import MaintenanceService, ReparentReport, ReparentResult, SeedResult
from ._media import MediaService, construction_file_path, map_icon_path
from ._public_query import PublicQueryService
from ._review import ReviewService

__all__ = [
    "AccessService",
    "AuthoringService",
    "BibliographyService",
    "MaintenanceService",
    "MediaService",
    "PublicQueryService",
    "ReparentReport",
    "ReparentResult",
    "ReviewService",
    "SeedResult",
    "construction_file_path",
    "effective_status",
    "extract_bearer",
    "is_admin",
    "is_researcher_or_admin",
    "map_icon_path",
    "require_admin",
    "require_researcher_or_admin",
]
