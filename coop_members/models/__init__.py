"""SQLAlchemy ORM models."""

from coop_members.models.base import Base
from coop_members.models.member import Member

__all__ = ["Base", "Member"]
