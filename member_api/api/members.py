"""
Member administration endpoints.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from member_api.api.schemas import MemberResponse
from member_api.auth import AccountGuard, RequireAdmin, RequireAuth, delete_member_sessions
from member_api.core import MemberNotFoundError, get_logger
from member_api.db import get_db
from member_api.db.repositories import get_member_by_id, list_members, soft_delete_member

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["members"])

MAX_MEMBERS_LISTED = 50


@router.get("/users")
def get_members(
    _auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, Any]:
    """List members (at most 50)."""
    members = list_members(db, limit=MAX_MEMBERS_LISTED)
    return {"users": [MemberResponse.model_validate(m).model_dump() for m in members]}


@router.get("/user/{member_id}")
def get_member(
    member_id: int,
    _auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, Any]:
    """Get a single member by ID."""
    member = get_member_by_id(db, member_id)
    if member is None:
        raise MemberNotFoundError()
    return {"user": MemberResponse.model_validate(member).model_dump()}


@router.delete("/user/{member_id}")
def delete_member(
    member_id: int,
    auth: RequireAdmin,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, str]:
    """Soft-delete a member and revoke its sessions. Admin only."""
    admin, _ = auth
    if not soft_delete_member(db, member_id, deleter_id=admin.id):
        raise MemberNotFoundError()
    delete_member_sessions(db, member_id)
    logger.info("Member deleted", data={"member_id": member_id, "admin_id": admin.id})
    return {"message": "Member deleted"}


@router.post("/user/{member_id}/unlock")
def unlock_member(
    member_id: int,
    _auth: RequireAdmin,
    db: Annotated[Session, Depends(get_db)],
    guard: AccountGuard,
) -> dict[str, str]:
    """Clear a member's login lock. Admin only."""
    if not guard.unlock(db, member_id):
        raise MemberNotFoundError()
    return {"message": "Member unlocked"}
