"""Member persistence: uniquely keyed credential storage and policy-filtered access."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coop_members.core.database import apply_identity
from coop_members.core.exceptions import DuplicateEmail, InvalidInput
from coop_members.core.security import EMAIL_MAX_LEN, NAME_MAX_LEN
from coop_members.core.tokens import ADMIN_ROLE, Identity
from coop_members.models import Member
from coop_members.services.policy import Operation, row_filter

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "email")


def validate_name(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field} is required.")
    if len(value) > NAME_MAX_LEN:
        raise InvalidInput(f"{field} must be at most {NAME_MAX_LEN} characters.")
    return value.strip()


def validate_email(value: Any) -> str:
    """Require a plausible email. Case is preserved; uniqueness is case-sensitive."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("email is required.")
    email = value.strip()
    if len(email) > EMAIL_MAX_LEN:
        raise InvalidInput(f"email must be at most {EMAIL_MAX_LEN} characters.")
    local, sep, domain = email.partition("@")
    if not sep or not local or not domain or " " in email:
        raise InvalidInput("email is not a valid address.")
    return email


def insert_member(
    db: Session,
    first_name: str,
    last_name: str,
    email: str,
    password_hash: str,
    is_admin: bool = False,
) -> int:
    """
    Insert a member row and return its id. Does not commit.

    The unique constraint on email is what rejects a duplicate, including the
    second of two racing registrations. The insert runs in a savepoint: on
    rejection only the savepoint is rolled back, DuplicateEmail is raised, and
    the caller's transaction stays usable with nothing written.
    """
    member = Member(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=password_hash,
        is_admin=is_admin,
    )
    try:
        with db.begin_nested():
            db.add(member)
    except IntegrityError as e:
        raise DuplicateEmail() from e
    return member.id


def find_by_email(db: Session, email: str) -> Member | None:
    return db.query(Member).filter(Member.email == email).first()


def find_by_id(db: Session, member_id: int) -> Member | None:
    return db.query(Member).filter(Member.id == member_id).first()


def list_members(db: Session, identity: Identity) -> list[Member]:
    """Members visible to identity, by id. Anonymous sees none."""
    apply_identity(db, identity)
    return (
        db.query(Member)
        .filter(row_filter(identity, Operation.SELECT, Member.id))
        .order_by(Member.id)
        .all()
    )


def get_member(db: Session, identity: Identity, member_id: int) -> Member | None:
    """The member with member_id if identity may see it; None otherwise (same as missing)."""
    apply_identity(db, identity)
    return (
        db.query(Member)
        .filter(Member.id == member_id)
        .filter(row_filter(identity, Operation.SELECT, Member.id))
        .first()
    )


def update_member(
    db: Session,
    identity: Identity,
    member_id: int,
    changes: dict[str, Any],
) -> Member | None:
    """
    Apply profile changes to a member row within identity's update scope.

    Returns None when the row is not visible for update. is_admin may only be
    changed by an admin; the new value takes effect in tokens issued afterwards.
    """
    if "is_admin" in changes and identity.role != ADMIN_ROLE:
        raise InvalidInput("Only admins may change is_admin.")

    cleaned: dict[str, Any] = {}
    for field, value in changes.items():
        if field == "email":
            cleaned[field] = validate_email(value)
        elif field in ("first_name", "last_name"):
            cleaned[field] = validate_name(field, value)
        elif field == "is_admin":
            if not isinstance(value, bool):
                raise InvalidInput("is_admin must be a boolean.")
            cleaned[field] = value
        else:
            raise InvalidInput(f"{field} cannot be updated.")

    apply_identity(db, identity)
    member = (
        db.query(Member)
        .filter(Member.id == member_id)
        .filter(row_filter(identity, Operation.UPDATE, Member.id))
        .first()
    )
    if member is None:
        return None

    for field, value in cleaned.items():
        setattr(member, field, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateEmail() from e
    logger.info(
        "Member updated: member_id=%s by=%s role=%s fields=%s",
        member_id,
        identity.subject_id,
        identity.role,
        sorted(cleaned),
    )
    return member
