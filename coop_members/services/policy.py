"""
Row-level authorization for member rows.

A declarative rule table maps (role, operation) to a row scope:

  ALL   every row
  OWN   only the row whose id equals the identity's subject_id
  NONE  no rows

Rows outside the scope are invisible rather than forbidden: the data layer
injects row_filter() into its queries, so another member's row and a
nonexistent row look the same (empty result / 404).
"""

from enum import Enum
from typing import Any

from sqlalchemy import false, true
from sqlalchemy.sql.elements import ColumnElement

from coop_members.core.tokens import (
    ADMIN_ROLE,
    ANONYMOUS,
    ANONYMOUS_ROLE,
    MEMBER_ROLE,
    CapabilityIssuer,
    Identity,
)


class Operation(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class Scope(str, Enum):
    ALL = "all"
    OWN = "own"
    NONE = "none"


# Anything not listed is NONE. INSERT and DELETE are granted to no role: members
# are only created by the registration flow and never deleted.
RULES: dict[tuple[str, Operation], Scope] = {
    (MEMBER_ROLE, Operation.SELECT): Scope.OWN,
    (MEMBER_ROLE, Operation.UPDATE): Scope.OWN,
    (ADMIN_ROLE, Operation.SELECT): Scope.ALL,
    (ADMIN_ROLE, Operation.UPDATE): Scope.ALL,
}


def scope_for(identity: Identity, operation: Operation) -> Scope:
    """Return the row scope granted to identity for operation."""
    if identity.is_anonymous or identity.role == ANONYMOUS_ROLE:
        return Scope.NONE
    return RULES.get((identity.role, operation), Scope.NONE)


def is_allowed(identity: Identity, row_id: int, operation: Operation) -> bool:
    """True if identity may perform operation on the row with primary key row_id."""
    scope = scope_for(identity, operation)
    if scope is Scope.ALL:
        return True
    if scope is Scope.OWN:
        return identity.subject_id == row_id
    return False


def row_filter(identity: Identity, operation: Operation, id_column: Any) -> ColumnElement[bool]:
    """SQL predicate selecting exactly the rows identity may touch with operation."""
    scope = scope_for(identity, operation)
    if scope is Scope.ALL:
        return true()
    if scope is Scope.OWN:
        return id_column == identity.subject_id
    return false()


def current_identity(token: str | None, issuer: CapabilityIssuer) -> Identity:
    """
    Resolve the acting identity for a request.

    No token means anonymous. A token that fails verification raises InvalidToken;
    it is never downgraded to anonymous or partially trusted.
    """
    if not token:
        return ANONYMOUS
    return issuer.verify(token)
