# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from db.enums import UserRole, UserStatus

from . import CamelModel


class SessionClaims(BaseModel):
    """Decoded session token claims."""

    sub: str
    role: str
    name: str | None = None
    sf_field: str | None = None
    sf_value: str | None = None
    iat: int | None = None
    exp: int


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request.

    ``role`` stays a plain string so a token minted with a role this build
    does not know still reaches the scope fallback instead of failing parse.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: str
    name: str = ""
    sf_field: str | None = None
    sf_value: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class LoginRequest(CamelModel):
    """Email plus either a password (admins) or an access code (LOs, agents)."""

    email: str = Field(min_length=1)
    password: str | None = None
    access_code: str | None = None

    @property
    def credential(self) -> str | None:
        return self.password or self.access_code


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class UserSummary(CamelModel):
    """Principal as returned by login and verify."""

    id: str
    email: str
    name: str | None = None
    role: UserRole
    status: UserStatus
    sf_field: str | None = None
    sf_value: str | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class LoginResponse(CamelModel):
    user: UserSummary
    token: str
    expires_at: datetime


class VerifyResponse(CamelModel):
    user: UserSummary
