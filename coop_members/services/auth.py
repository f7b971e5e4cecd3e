"""Registration and login flows: validate, hash or verify, persist, issue a capability."""

import logging

from sqlalchemy.orm import Session

from coop_members.core.exceptions import AuthenticationFailed, DuplicateEmail, InvalidInput
from coop_members.core.security import (
    DUMMY_HASH,
    PASSWORD_MAX_BYTES,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
    password_too_long,
    verify_password,
)
from coop_members.core.tokens import ADMIN_ROLE, MEMBER_ROLE, Capability, CapabilityIssuer
from coop_members.services.members import (
    find_by_email,
    insert_member,
    validate_email,
    validate_name,
)

logger = logging.getLogger(__name__)


def _validate_password(password: object) -> str:
    if not isinstance(password, str) or not password:
        raise InvalidInput("password is required.")
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise InvalidInput(
            f"password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters."
        )
    if password_too_long(password):
        raise InvalidInput(f"password must be at most {PASSWORD_MAX_BYTES} bytes (UTF-8).")
    return password


def register(
    db: Session,
    issuer: CapabilityIssuer,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    is_admin: bool = False,
) -> Capability:
    """
    Create a member and return its first capability.

    Input errors raise InvalidInput before storage is touched. An existing email
    raises DuplicateEmail with no write. The commit happens before the token is
    issued, so a returned capability always names a persisted member.

    is_admin is for operator tooling only; the HTTP route never sets it.
    """
    first_name = validate_name("first_name", first_name)
    last_name = validate_name("last_name", last_name)
    email = validate_email(email)
    password = _validate_password(password)

    if find_by_email(db, email) is not None:
        logger.info("Registration rejected, email already registered: email=%s", email)
        raise DuplicateEmail()

    password_hash = hash_password(password)
    try:
        member_id = insert_member(
            db,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            is_admin=is_admin,
        )
    except DuplicateEmail:
        logger.info("Registration lost race on unique email: email=%s", email)
        raise
    db.commit()

    role = ADMIN_ROLE if is_admin else MEMBER_ROLE
    logger.info("Member registered: member_id=%s role=%s", member_id, role)
    return issuer.issue(member_id, role)


def login(db: Session, issuer: CapabilityIssuer, email: str, password: str) -> Capability:
    """
    Verify email and password and return a capability.

    Unknown email and wrong password raise the same AuthenticationFailed. An
    unknown email still runs one bcrypt check (against DUMMY_HASH) so timing does
    not reveal which emails are registered. Role is admin if the member's
    is_admin flag is set at this moment, member otherwise.
    """
    if not isinstance(email, str) or not email.strip():
        raise InvalidInput("email is required.")
    if not isinstance(password, str) or not password:
        raise InvalidInput("password is required.")
    if len(password) > PASSWORD_MAX_LEN or password_too_long(password):
        raise AuthenticationFailed()

    member = find_by_email(db, email.strip())
    if member is None:
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed: email=%s", email)
        raise AuthenticationFailed()
    if not verify_password(password, member.password_hash):
        logger.info("Login failed: email=%s", email)
        raise AuthenticationFailed()

    role = ADMIN_ROLE if member.is_admin else MEMBER_ROLE
    logger.info("Login succeeded: member_id=%s role=%s", member.id, role)
    return issuer.issue(member.id, role)
