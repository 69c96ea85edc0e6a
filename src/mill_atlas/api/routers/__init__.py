# src/mill_atlas/api/routers/__init__.py
from . import auth, dashboard, public

__all__ = ["auth", "dashboard", "public"]
