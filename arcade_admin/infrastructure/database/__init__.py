"""Database infrastructure helpers (engine, sessions, migrations)."""

from .base import Base
from .session import build_session_factory, get_engine, init_db

__all__ = ["Base", "build_session_factory", "get_engine", "init_db"]
