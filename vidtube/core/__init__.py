"""Core app configuration, database, and credential primitives."""

from vidtube.core.config import Settings, get_settings
from vidtube.core.database import Database, get_db

__all__ = ["Database", "Settings", "get_db", "get_settings"]
