"""Core app configuration and database."""

from kodbank.core.config import get_settings, settings
from kodbank.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
