# src/mill_atlas/infrastructure/storage/__init__.py
from .supabase import SupabaseClient

__all__ = ["SupabaseClient"]
