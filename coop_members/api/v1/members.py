"""Member read/update routes, filtered by the row-level policy for the caller's token."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coop_members.api.v1.auth import require_member
from coop_members.core.database import get_db
from coop_members.core.exceptions import DuplicateEmail, InvalidInput
from coop_members.core.tokens import Identity
from coop_members.schemas.auth import MemberOut, MembersListResponse, MemberUpdate
from coop_members.services import members as member_service

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")


@router.get("", response_model=MembersListResponse)
def list_members(
    identity: Annotated[Identity, Depends(require_member)],
    db: Annotated[Session, Depends(get_db)],
) -> MembersListResponse:
    """List members visible to the caller: their own row, or every row for admins."""
    rows = member_service.list_members(db, identity)
    return MembersListResponse(members=[MemberOut.model_validate(m) for m in rows])


@router.get("/{member_id}", response_model=MemberOut)
def get_member(
    member_id: int,
    identity: Annotated[Identity, Depends(require_member)],
    db: Annotated[Session, Depends(get_db)],
) -> MemberOut:
    """Read one member. Rows outside the caller's scope are reported as not found."""
    member = member_service.get_member(db, identity, member_id)
    if member is None:
        raise _not_found()
    return MemberOut.model_validate(member)


@router.patch("/{member_id}", response_model=MemberOut)
def update_member(
    member_id: int,
    body: MemberUpdate,
    identity: Annotated[Identity, Depends(require_member)],
    db: Annotated[Session, Depends(get_db)],
) -> MemberOut:
    """Update profile fields of a member in the caller's scope. is_admin is admin-only."""
    try:
        member = member_service.update_member(
            db, identity, member_id, body.model_dump(exclude_unset=True)
        )
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message) from e
    except DuplicateEmail as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    if member is None:
        raise _not_found()
    return MemberOut.model_validate(member)
