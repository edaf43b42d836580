# This project was developed with assistance from AI tools.
"""Principal management shared by the admin, loan-officer, and agent routes.

The three routers differ only in their ``RoleProfile``: how a principal
authenticates (password vs generated access code) and which CRM field
carries its scope.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db import User, UserRole, UserStatus

from ..core.auth import generate_access_code, hash_password
from ..core.errors import AlreadyExistsError, NotFoundError, ValidationError
from ..schemas.users import UpdateUserRequest, UserListItem
from .audit import detach_user
from .auth import normalize_email, validate_password
from .contacts import count_for_scope_values
from .salesforce.client import CRMClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class RoleProfile:
    role: UserRole
    label: str
    sf_field: str | None
    uses_access_code: bool


ROLE_PROFILES: dict[UserRole, RoleProfile] = {
    UserRole.ADMIN: RoleProfile(UserRole.ADMIN, "Admin", None, uses_access_code=False),
    UserRole.LOAN_OFFICER: RoleProfile(
        UserRole.LOAN_OFFICER, "Loan officer", "Loan_Partners__c", uses_access_code=True,
    ),
    UserRole.AGENT: RoleProfile(
        UserRole.AGENT, "Agent", "MtgPlanner_CRM__Referred_By_Text__c", uses_access_code=True,
    ),
}


# ---------------------------------------------------------------------------
# Pagination / validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaginationParams:
    page: int
    page_size: int
    search: str
    offset: int


def _parse_int(value: Any) -> int | None:
    """Leading integer of a query value, or None (``"2.5"`` -> 2, ``"x"`` -> None)."""
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value)) if value is not None else None
    return int(match.group(1)) if match else None


def parse_pagination(query: Mapping[str, Any]) -> PaginationParams:
    """Normalize ``page``/``pageSize``/``search`` query values.

    Missing, zero, or non-numeric values fall back to the defaults; page is
    at least 1 and page size is clamped to [1, 100].
    """
    page = max(1, _parse_int(query.get("page")) or 1)
    page_size = min(MAX_PAGE_SIZE, max(1, _parse_int(query.get("pageSize")) or DEFAULT_PAGE_SIZE))
    search = str(query.get("search") or "").strip()
    return PaginationParams(page=page, page_size=page_size, search=search, offset=(page - 1) * page_size)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def validate_name_and_email(name: Any, email: Any) -> tuple[str, str]:
    """Trim both, lowercase the email. Raises ValidationError."""
    clean_name = name.strip() if isinstance(name, str) else ""
    clean_email = normalize_email(email) if isinstance(email, str) else ""
    if not clean_name or not clean_email:
        raise ValidationError("Name and email required")
    if not is_valid_email(clean_email):
        raise ValidationError("Invalid email format")
    return clean_name, clean_email


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _filters(role: UserRole, search: str) -> list:
    conditions = [User.role == role]
    if search:
        pattern = f"%{search.lower()}%"
        conditions.append(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
    return conditions


async def list_users(session: AsyncSession, role: UserRole, params: PaginationParams) -> tuple[list[User], int]:
    """One page of principals for a role, ordered by name, plus the total."""
    conditions = _filters(role, params.search)

    count_stmt = select(func.count()).select_from(User).where(*conditions)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(User)
        .where(*conditions)
        .order_by(User.name, User.email)
        .offset(params.offset)
        .limit(params.page_size)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def get_user_for_role(session: AsyncSession, role: UserRole, user_id: str) -> User:
    result = await session.execute(select(User).where(User.id == user_id, User.role == role))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError(f"{ROLE_PROFILES[role].label} not found")
    return user


async def _ensure_email_free(
    session: AsyncSession, role: UserRole, email: str, exclude_id: str | None = None
) -> None:
    stmt = select(User.id).where(User.email == email, User.role == role)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if (await session.execute(stmt)).first() is not None:
        raise AlreadyExistsError()


async def _commit_unique(session: AsyncSession) -> None:
    """Commit, translating a (email, role) unique violation into 409."""
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise AlreadyExistsError() from exc


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def create_user(
    session: AsyncSession,
    role: UserRole,
    *,
    name: Any,
    email: Any,
    password: str | None = None,
    sf_field: str | None = None,
    sf_value: str | None = None,
) -> tuple[User, str | None]:
    """Create a principal.

    Admins supply a password and may carry an optional scope. Loan officers
    and agents get a generated access code and are scoped by their name.

    Returns:
        ``(user, access_code)``; ``access_code`` is None for admins and is
        the only time the plaintext code is available.
    """
    profile = ROLE_PROFILES[role]
    clean_name, clean_email = validate_name_and_email(name, email)

    access_code: str | None = None
    if profile.uses_access_code:
        access_code = generate_access_code()
        credential = access_code
        sf_field, sf_value = profile.sf_field, clean_name
    else:
        if not password:
            raise ValidationError("Name, email, and password required")
        validate_password(password)
        credential = password
        sf_field, sf_value = (sf_field or None), (sf_value or None)

    await _ensure_email_free(session, role, clean_email)

    user = User(
        email=clean_email,
        name=clean_name,
        password_hash=hash_password(credential),
        role=role,
        status=UserStatus.ACTIVE,
        sf_field=sf_field,
        sf_value=sf_value,
    )
    session.add(user)
    await _commit_unique(session)
    await session.refresh(user)
    logger.info("Created %s: id=%s", role.value, user.id)
    return user, access_code


async def update_user(
    session: AsyncSession,
    role: UserRole,
    user_id: str,
    changes: UpdateUserRequest,
    *,
    acting_user_id: str | None = None,
) -> User:
    """Apply a partial update. Only fields present in the request are touched.

    Renaming a loan officer or agent also rewrites its scope value, since
    their CRM scope is their display name.
    """
    profile = ROLE_PROFILES[role]
    user = await get_user_for_role(session, role, user_id)
    supplied = set(changes.model_fields_set)
    if profile.uses_access_code:
        # scope follows the name for LOs and agents
        supplied -= {"sf_field", "sf_value"}
    if not supplied:
        raise ValidationError("No fields to update")

    if "name" in supplied:
        name = (changes.name or "").strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        user.name = name
        if profile.uses_access_code:
            user.sf_value = name

    if "email" in supplied:
        email = normalize_email(changes.email or "")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        if email != user.email:
            await _ensure_email_free(session, role, email, exclude_id=user.id)
        user.email = email

    if "status" in supplied:
        if changes.status is None:
            raise ValidationError("Status must be active or disabled")
        if changes.status != user.status:
            if changes.status not in UserStatus.valid_transitions()[user.status]:
                raise ValidationError(f"Cannot change status from {user.status.value} to {changes.status.value}")
            if user.id == acting_user_id and changes.status == UserStatus.DISABLED:
                raise ValidationError("Cannot disable your own account")
        user.status = changes.status

    if "sf_field" in supplied:
        user.sf_field = changes.sf_field or None
    if "sf_value" in supplied:
        user.sf_value = changes.sf_value or None

    await _commit_unique(session)
    await session.refresh(user)
    logger.info("Updated %s: id=%s fields=%s", role.value, user.id, sorted(supplied))
    return user


async def regenerate_code(session: AsyncSession, role: UserRole, user_id: str) -> str:
    """Issue a fresh access code; the previous one stops working immediately."""
    if not ROLE_PROFILES[role].uses_access_code:
        raise ValidationError("Access codes apply to loan officers and agents only")
    user = await get_user_for_role(session, role, user_id)
    access_code = generate_access_code()
    user.password_hash = hash_password(access_code)
    await session.commit()
    logger.info("Regenerated access code for %s: id=%s", role.value, user.id)
    return access_code


async def delete_user(
    session: AsyncSession, role: UserRole, user_id: str, *, acting_user_id: str | None = None
) -> None:
    """Hard delete. The principal's audit entries are kept with a null owner."""
    if user_id == acting_user_id:
        raise ValidationError("Cannot delete your own account")
    user = await get_user_for_role(session, role, user_id)
    await detach_user(session, user.id)
    await session.delete(user)
    await session.commit()
    logger.info("Deleted %s: id=%s", role.value, user_id)


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------


async def lead_counts(client: CRMClient, role: UserRole, users: list[User]) -> dict[str, int]:
    """Active lead count per principal id, for the LO and agent lists."""
    names = [u.sf_value or u.name for u in users if (u.sf_value or u.name)]
    by_name = await count_for_scope_values(client, names, role.value, ROLE_PROFILES[role].sf_field)
    return {u.id: by_name.get(u.sf_value or u.name or "", 0) for u in users}


def to_list_item(user: User, active_leads: int | None = None) -> UserListItem:
    is_admin = user.role == UserRole.ADMIN
    return UserListItem(
        id=user.id,
        name=user.name or "",
        email=user.email,
        status=user.status,
        sf_field=user.sf_field if is_admin else None,
        sf_value=user.sf_value if is_admin else None,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
        active_leads=active_leads,
    )
