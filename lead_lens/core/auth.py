# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Password hashing, access-code generation, and session token encode/decode.
Used by the session issuer service, the request middleware, and the seed
CLI. Keeping them separate from ``middleware/auth.py`` avoids pulling
FastAPI/Starlette imports into code that runs outside the request lifecycle.
"""

import secrets
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from db.enums import UserRole

from ..schemas.auth import SessionClaims
from .config import settings
from .errors import InvalidTokenError

BCRYPT_ROUNDS = 12

# No 0/O or 1/I/L so codes survive being read aloud or copied by hand
ACCESS_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
ACCESS_CODE_LENGTH = 8


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Compare a plaintext credential against a stored bcrypt hash.

    A malformed stored hash counts as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_access_code() -> str:
    """Random 8-character access code for loan officers and agents."""
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(ACCESS_CODE_LENGTH))


def create_session_token(
    user_id: str,
    role: UserRole,
    name: str,
    sf_field: str | None,
    sf_value: str | None,
    expires_in: timedelta | None = None,
) -> str:
    """Mint a signed session token carrying the principal's scope claims.

    Scope claims are snapshotted here; edits to the user row take effect
    only after the next login.
    """
    now = datetime.now(UTC)
    lifetime = expires_in if expires_in is not None else timedelta(hours=settings.JWT_EXPIRES_HOURS)
    payload = {
        "sub": user_id,
        "role": role.value,
        "name": name,
        "sf_field": sf_field,
        "sf_value": sf_value,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> SessionClaims:
    """Verify signature and expiry, then parse the claims.

    Raises:
        InvalidTokenError: on any signature, expiry, or shape problem.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError() from exc

    try:
        return SessionClaims(**payload)
    except ValueError as exc:
        raise InvalidTokenError() from exc
