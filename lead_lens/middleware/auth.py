# This project was developed with assistance from AI tools.
"""
Session token authentication for dashboard requests.

Verifies the HS256 Bearer token minted at login, recovers role and scope
claims, and provides FastAPI dependencies for route-level auth.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from db.enums import UserRole

from ..core.auth import decode_session_token
from ..core.errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)

# Every token failure looks the same to the client
_UNAUTHORIZED_MESSAGE = "Missing or invalid token"


def _extract_token(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:]
    return None


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: validate the session token and return UserContext."""
    token = _extract_token(request)
    if not token:
        raise UnauthorizedError(_UNAUTHORIZED_MESSAGE)

    try:
        claims = decode_session_token(token)
    except InvalidTokenError as exc:
        logger.debug("Rejected session token: %s", exc)
        raise UnauthorizedError(_UNAUTHORIZED_MESSAGE) from exc

    return UserContext(
        user_id=claims.sub,
        role=claims.role,
        name=claims.name or "",
        sf_field=claims.sf_field,
        sf_value=claims.sf_value,
    )


# Type alias for use in route signatures
CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: restrict a route to specific roles.

    Usage:
        @router.get("/admin-only", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    allowed = {r.value for r in allowed_roles}

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed:
            logger.warning(
                "RBAC denied: user=%s role=%s attempted route requiring %s",
                user.user_id,
                user.role,
                sorted(allowed),
            )
            raise ForbiddenError()
        return user

    return _check


AdminUser = Annotated[UserContext, Depends(require_roles(UserRole.ADMIN))]
