# This project was developed with assistance from AI tools.
"""Login, session verification, and password change."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db import User, get_db

from ..core.errors import UnauthorizedError, ValidationError
from ..middleware.auth import CurrentUser
from ..schemas import Envelope, MessageResponse
from ..schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    UserSummary,
    VerifyResponse,
)
from ..services import auth as auth_service

router = APIRouter()


def _summary(user: User) -> UserSummary:
    return UserSummary(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        status=user.status,
        sf_field=user.sf_field,
        sf_value=user.sf_value,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )


@router.post("/login", response_model=Envelope[LoginResponse])
async def login(body: LoginRequest, session: AsyncSession = Depends(get_db)) -> Envelope[LoginResponse]:
    """Exchange email + password (admins) or access code (LOs, agents) for a session token."""
    if not body.credential:
        raise ValidationError("Email and password/access code required")
    user, token, expires_at = await auth_service.authenticate(session, body.email, body.credential)
    return Envelope(data=LoginResponse(user=_summary(user), token=token, expires_at=expires_at))


@router.get("/verify", response_model=Envelope[VerifyResponse])
async def verify(user: CurrentUser, session: AsyncSession = Depends(get_db)) -> Envelope[VerifyResponse]:
    """Return the principal behind the current token."""
    row = await auth_service.get_user(session, user.user_id)
    if row is None:
        raise UnauthorizedError("User not found")
    return Envelope(data=VerifyResponse(user=_summary(row)))


@router.patch("/password", response_model=Envelope[MessageResponse])
async def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> Envelope[MessageResponse]:
    await auth_service.change_password(session, user.user_id, body.current_password, body.new_password)
    return Envelope(data=MessageResponse(message="Password updated"))


@router.post("/logout", response_model=Envelope[MessageResponse])
async def logout() -> Envelope[MessageResponse]:
    # Tokens are stateless; the client discards its copy
    return Envelope(data=MessageResponse(message="Logged out"))
