"""Core app configuration, database, security primitives and error taxonomy."""

from storeauth.core.config import get_settings, settings
from storeauth.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
