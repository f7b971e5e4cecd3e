"""Pydantic request/response schemas."""

from coop_members.schemas.auth import (
    CurrentIdentity,
    LoginRequest,
    MemberOut,
    MembersListResponse,
    MemberUpdate,
    RegisterRequest,
    TokenResponse,
)
from coop_members.schemas.health import HealthResponse

__all__ = [
    "CurrentIdentity",
    "HealthResponse",
    "LoginRequest",
    "MemberOut",
    "MemberUpdate",
    "MembersListResponse",
    "RegisterRequest",
    "TokenResponse",
]
