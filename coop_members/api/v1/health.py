"""Health check: database connectivity and the auth settings that shape token behaviour."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coop_members.core.config import settings
from coop_members.core.database import check_db_connected, get_db
from coop_members.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Used by load balancers and monitoring; never exposes the signing key."""
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        token_lifetime_minutes=settings.JWT_EXPIRE_MINUTES,
        db_role_switching=settings.DB_ROLE_SWITCHING,
    )
