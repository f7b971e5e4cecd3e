"""Request/response schemas for registration, login and member access."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """New member details. Field contents are validated again by the registration flow."""

    first_name: str = Field(..., max_length=255, description="First name")
    last_name: str = Field(..., max_length=255, description="Last name")
    email: str = Field(..., max_length=255, description="Email address (login handle)")
    password: str = Field(..., max_length=128, description="Password (8-128 characters)")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., max_length=255, description="Email address")
    password: str = Field(..., max_length=128, description="Password")


class TokenResponse(BaseModel):
    """Capability token returned after registration or login."""

    access_token: str = Field(..., description="Signed JWT carrying member_id and role")
    token_type: str = Field(default="bearer", description="Token type")
    member_id: int = Field(..., description="Member the token was issued for")
    role: str = Field(..., description="Role fixed into the token: member or admin")
    expires_at: datetime | None = Field(
        default=None, description="Expiry, or null when tokens do not expire"
    )


class CurrentIdentity(BaseModel):
    """Identity resolved from the request's bearer token."""

    member_id: int | None
    role: str


class MemberOut(BaseModel):
    """Member row as exposed over the API (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    is_admin: bool


class MemberUpdate(BaseModel):
    """Profile changes; omitted fields are left as they are. is_admin is admin-only."""

    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    is_admin: bool | None = None


class MembersListResponse(BaseModel):
    """Members visible to the caller."""

    members: list[MemberOut]
