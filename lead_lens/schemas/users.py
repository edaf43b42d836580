# This project was developed with assistance from AI tools.
"""Request/response models for principal management (admins, LOs, agents)."""

from datetime import datetime

from pydantic import Field

from db.enums import UserStatus

from . import CamelModel


class UserListItem(CamelModel):
    """Principal row in an admin list.

    ``sf_field``/``sf_value`` are populated for admins only; ``active_leads``
    for loan officers and agents only.
    """

    id: str
    name: str
    email: str
    status: UserStatus
    sf_field: str | None = None
    sf_value: str | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None
    active_leads: int | None = None


class CreateAdminRequest(CamelModel):
    name: str
    email: str
    password: str
    sf_field: str | None = None
    sf_value: str | None = None


class CreateScopedUserRequest(CamelModel):
    """Loan officers and agents get a generated access code instead of a password."""

    name: str
    email: str


class UpdateUserRequest(CamelModel):
    name: str | None = None
    email: str | None = None
    status: UserStatus | None = None
    # admin only; ignored for scoped roles
    sf_field: str | None = None
    sf_value: str | None = None


class CreatedScopedUser(CamelModel):
    user: UserListItem
    access_code: str = Field(description="Shown once; only the hash is stored.")


class AccessCodeResponse(CamelModel):
    access_code: str
