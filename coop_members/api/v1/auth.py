"""Registration, login and auth dependencies (get_current_identity, require_member)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coop_members.core.database import get_db
from coop_members.core.exceptions import (
    AuthenticationFailed,
    DataIntegrityError,
    DuplicateEmail,
    InvalidInput,
    InvalidToken,
)
from coop_members.core.tokens import Capability, CapabilityIssuer, Identity, get_issuer
from coop_members.schemas.auth import (
    CurrentIdentity,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from coop_members.services import auth as auth_service
from coop_members.services.policy import current_identity

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def _token_response(capability: Capability) -> TokenResponse:
    return TokenResponse(
        access_token=capability.token,
        token_type="bearer",
        member_id=capability.subject_id,
        role=capability.role,
        expires_at=capability.expires_at,
    )


def _integrity_failure(e: DataIntegrityError) -> HTTPException:
    logger.exception("Data integrity error: %s", e.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error.",
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[CapabilityIssuer, Depends(get_issuer)],
) -> TokenResponse:
    """
    Register a new member; returns a member-role access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    try:
        capability = auth_service.register(
            db,
            issuer,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            password=body.password,
        )
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message) from e
    except DuplicateEmail as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    return _token_response(capability)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[CapabilityIssuer, Depends(get_issuer)],
) -> TokenResponse:
    """Authenticate with email and password; returns an access token (role member or admin)."""
    try:
        capability = auth_service.login(db, issuer, email=body.email, password=body.password)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message) from e
    except AuthenticationFailed as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except DataIntegrityError as e:
        raise _integrity_failure(e) from e
    return _token_response(capability)


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[CapabilityIssuer, Depends(get_issuer)],
) -> Identity:
    """Dependency: identity from the Bearer token, anonymous if none. Raises 401 if the token is invalid."""
    token = credentials.credentials if credentials is not None else None
    try:
        return current_identity(token, issuer)
    except InvalidToken as e:
        logger.info("Rejected bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def require_member(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    """Dependency: require a valid token (member or admin). Raises 401 for anonymous requests."""
    if identity.is_anonymous:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


@router.get("/me", response_model=CurrentIdentity)
def me(identity: Annotated[Identity, Depends(get_current_identity)]) -> CurrentIdentity:
    """Return the identity the presented token resolves to (anonymous without one)."""
    return CurrentIdentity(member_id=identity.subject_id, role=identity.role)
