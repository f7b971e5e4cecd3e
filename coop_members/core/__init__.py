"""Core app configuration, database and credential primitives."""

from coop_members.core.config import get_settings, settings
from coop_members.core.database import get_db
from coop_members.core.tokens import get_issuer

__all__ = ["get_settings", "settings", "get_db", "get_issuer"]
