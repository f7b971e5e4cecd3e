"""ORM model for co-op members (credential store)."""

from sqlalchemy import Boolean, Column, Integer, String, false

from coop_members.models.base import Base


class Member(Base):
    """
    One member's login identity and hashed secret.

    email is unique and case-sensitive as stored. password_hash never leaves the
    service layer; API schemas do not expose it.
    """

    __tablename__ = "members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False, server_default=false())
