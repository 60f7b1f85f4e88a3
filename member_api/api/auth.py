"""
Authentication API endpoints.

Handles registration, login, logout, and the caller's own profile.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from member_api.api.schemas import (
    AuthResponse,
    LoginRequest,
    MemberResponse,
    RegisterRequest,
    UpdateProfileRequest,
)
from member_api.auth import (
    AccountGuard,
    LoginLimiter,
    RequireAuth,
    create_session,
    delete_session,
)
from member_api.core import EmailTakenError, get_client_ip
from member_api.db import get_db
from member_api.db.repositories import email_exists, update_member
from member_api.services import auth_service

router = APIRouter(prefix="/api/v1", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Register a new member.

    Returns a session token and the member's info.
    """
    member = auth_service.register(db, body.name, body.email, body.password)

    session_data = create_session(
        db,
        member,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    return AuthResponse(
        token=session_data.token,
        user=MemberResponse.model_validate(member),
    )


@router.post("/login")
def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    limiter: LoginLimiter,
    guard: AccountGuard,
) -> AuthResponse:
    """
    Log in with email and password.

    Responds 429 with ``Retry-After`` when the client is rate limited,
    403 when the account is locked and 401 for bad credentials.
    """
    client_ip = get_client_ip(request)

    member = auth_service.authenticate(
        db,
        limiter,
        guard,
        client_ip=client_ip,
        email=body.email,
        password=body.password,
    )

    session_data = create_session(
        db,
        member,
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
    )

    return AuthResponse(
        token=session_data.token,
        user=MemberResponse.model_validate(member),
    )


@router.post("/logout")
def logout(
    auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, str]:
    """Invalidate the current session."""
    _, session = auth
    delete_session(db, session.id)
    return {"status": "logged_out"}


@router.get("/profile")
def get_profile(auth: RequireAuth) -> dict[str, Any]:
    """Get the authenticated member's info."""
    member, _ = auth
    return {"user": MemberResponse.model_validate(member).model_dump()}


@router.put("/profile")
def update_profile(
    body: UpdateProfileRequest,
    auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, Any]:
    """Update the authenticated member's name and/or email."""
    member, _ = auth

    if body.email and body.email.lower() != member.email and email_exists(db, body.email):
        raise EmailTakenError()

    member = update_member(
        db,
        member,
        name=body.name,
        email=body.email,
        modifier_id=member.id,
    )
    return {"user": MemberResponse.model_validate(member).model_dump()}
