# This project was developed with assistance from AI tools.
"""Session issuer: credential checks against the users table.

An email may hold one row per role (e.g. the same person as loan officer
and agent, each with its own access code), so login tries the credential
against every active row for the email and the first match wins.
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import User, UserRole, UserStatus

from ..core.auth import create_session_token, hash_password, verify_password
from ..core.config import settings
from ..core.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only hashes the first 72 bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72

# Deterministic candidate order when an email has several roles
_ROLE_ORDER = {UserRole.ADMIN: 0, UserRole.LOAN_OFFICER: 1, UserRole.AGENT: 2}


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def authenticate(session: AsyncSession, email: str, credential: str) -> tuple[User, str, datetime]:
    """Check a credential and mint a session token.

    Returns:
        ``(user, token, expires_at)`` for the matching row.

    Raises:
        InvalidCredentialsError: no row for the email, or no hash matched.
        AccountDisabledError: every row for the email is disabled.
    """
    if not email or not credential:
        raise ValidationError("Email and password/access code required")

    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    candidates = sorted(result.scalars().all(), key=lambda u: _ROLE_ORDER.get(u.role, 99))

    if not candidates:
        logger.warning("Login failed: unknown email")
        raise InvalidCredentialsError()

    active = [u for u in candidates if u.status == UserStatus.ACTIVE]
    if not active:
        logger.warning("Login refused: all %d account(s) disabled", len(candidates))
        raise AccountDisabledError()

    user = next((u for u in active if verify_password(credential, u.password_hash)), None)
    if user is None:
        logger.warning("Login failed: bad credential for %d candidate row(s)", len(active))
        raise InvalidCredentialsError()

    now = datetime.now(UTC)
    user.last_login_at = now
    await session.commit()

    lifetime = timedelta(hours=settings.JWT_EXPIRES_HOURS)
    token = create_session_token(
        user.id,
        user.role,
        user.name or "",
        user.sf_field,
        user.sf_value,
        expires_in=lifetime,
    )
    logger.info("Login: user=%s role=%s", user.id, user.role.value)
    return user, token, now + lifetime


async def get_user(session: AsyncSession, user_id: str) -> User | None:
    return await session.get(User, user_id)


async def change_password(session: AsyncSession, user_id: str, current: str, new: str) -> None:
    """Replace a principal's credential after re-verifying the current one."""
    validate_password(new)

    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(current, user.password_hash):
        raise InvalidCredentialsError("Current password is incorrect")

    user.password_hash = hash_password(new)
    await session.commit()
    logger.info("Password changed: user=%s", user_id)


def validate_password(password: str) -> None:
    """Reject passwords bcrypt cannot hash faithfully."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
