from .base import Base, metadata
from .engine import create_async_db_engine, dispose_engine
from .session import create_async_sessionmaker, session_scope

__all__ = [
    "Base",
    "metadata",
    "create_async_db_engine",
    "dispose_engine",
    "create_async_sessionmaker",
    "session_scope",
]
