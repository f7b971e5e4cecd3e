"""PostgreSQL connection, session management and per-request claim settings."""

from collections.abc import Generator
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from coop_members.core.config import settings

if TYPE_CHECKING:
    from coop_members.core.tokens import Identity

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def apply_identity(db: Session, identity: "Identity", switch_role: bool | None = None) -> None:
    """
    Expose the acting identity to the database for the current transaction.

    Sets jwt.claims.member_id and jwt.claims.role (read by the RLS policies) and,
    when role switching is enabled, SET LOCAL ROLE to the token's role or
    DEFAULT_ROLE for anonymous requests. Both are transaction-local. No-op on
    non-Postgres dialects, where the ORM row filters are the only gate.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    member_id = "" if identity.subject_id is None else str(identity.subject_id)
    db.execute(
        text(
            "SELECT set_config('jwt.claims.member_id', :member_id, true), "
            "set_config('jwt.claims.role', :role, true)"
        ),
        {"member_id": member_id, "role": identity.role},
    )
    if switch_role is None:
        switch_role = settings.DB_ROLE_SWITCHING
    if switch_role:
        role = settings.DEFAULT_ROLE if identity.is_anonymous else identity.role
        # Role names come from TOKEN_ROLES or a validated setting, never from request input.
        db.execute(text(f'SET LOCAL ROLE "{role}"'))
