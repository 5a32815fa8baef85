"""Core app configuration and database."""

from designhub.core.config import Settings, get_settings
from designhub.core.database import Database, get_db

__all__ = ["Database", "Settings", "get_db", "get_settings"]
