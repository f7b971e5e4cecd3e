"""
Capability tokens: signed, time-bound claim sets naming a member and a role.

Claims follow the layout the data layer reads (member_id, role, aud) plus the
standard sub/iat/exp. The role is fixed when the token is issued; a change to a
member's admin flag only shows up in tokens issued after it (next login).
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import jwt

from coop_members.core.config import get_settings
from coop_members.core.exceptions import InvalidToken

MEMBER_ROLE = "member"
ADMIN_ROLE = "admin"
ANONYMOUS_ROLE = "anonymous"
TOKEN_ROLES = (MEMBER_ROLE, ADMIN_ROLE)


@dataclass(frozen=True)
class Identity:
    """Who is acting on a request: a member id and role, or anonymous."""

    subject_id: int | None
    role: str

    @property
    def is_anonymous(self) -> bool:
        return self.subject_id is None


ANONYMOUS = Identity(subject_id=None, role=ANONYMOUS_ROLE)


@dataclass(frozen=True)
class Capability:
    """An issued token together with the claims it was minted from."""

    token: str
    subject_id: int
    role: str
    issued_at: datetime
    expires_at: datetime | None = None

    @property
    def identity(self) -> Identity:
        return Identity(subject_id=self.subject_id, role=self.role)


class CapabilityIssuer:
    """Issues and verifies capability tokens with one signing key."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta | None = None,
        audience: str = "postgraphile",
    ) -> None:
        if not secret:
            raise ValueError("signing key must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self.audience = audience

    def issue(self, subject_id: int, role: str, now: datetime | None = None) -> Capability:
        """Sign a token for subject_id with role; exp is set only when a lifetime is configured."""
        if role not in TOKEN_ROLES:
            raise ValueError(f"cannot issue a token for role {role!r}")
        issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
        expires_at = issued_at + self.lifetime if self.lifetime is not None else None
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "member_id": subject_id,
            "role": role,
            "aud": self.audience,
            "iat": issued_at,
        }
        if expires_at is not None:
            payload["exp"] = expires_at
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        return Capability(
            token=token,
            subject_id=subject_id,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def verify(self, token: str) -> Identity:
        """
        Check signature, audience and expiry; return the identity the token names.

        Any failure raises InvalidToken with the same message, whether the token is
        expired, forged or garbage.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"require": ["sub", "iat", "aud"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken() from e
        member_id = payload.get("member_id")
        role = payload.get("role")
        if not isinstance(member_id, int) or isinstance(member_id, bool):
            raise InvalidToken()
        if role not in TOKEN_ROLES or payload.get("sub") != str(member_id):
            raise InvalidToken()
        return Identity(subject_id=member_id, role=role)


@lru_cache
def get_issuer() -> CapabilityIssuer:
    """Process-wide issuer, built once from settings at first use."""
    settings = get_settings()
    lifetime = (
        timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
        if settings.JWT_EXPIRE_MINUTES is not None
        else None
    )
    return CapabilityIssuer(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        lifetime=lifetime,
        audience=settings.JWT_AUDIENCE,
    )
