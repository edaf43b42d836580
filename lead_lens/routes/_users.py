# This project was developed with assistance from AI tools.
"""Shared CRUD router for the three principal kinds.

``admins.py``, ``loan_officers.py`` and ``agents.py`` each build their
router here; only creation differs (password vs generated access code).
All routes are admin-only.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from db import UserRole, get_db

from ..middleware.auth import AdminUser
from ..schemas import Envelope, MessageResponse, Page
from ..schemas.users import (
    AccessCodeResponse,
    CreateAdminRequest,
    CreatedScopedUser,
    CreateScopedUserRequest,
    UpdateUserRequest,
    UserListItem,
)
from ..services import users as user_service
from ..services.salesforce.client import CRMClient, get_crm_client


def build_user_router(role: UserRole) -> APIRouter:
    profile = user_service.ROLE_PROFILES[role]
    router = APIRouter()

    @router.get("", response_model=Envelope[Page[UserListItem]])
    async def list_users(
        request: Request,
        _admin: AdminUser,
        session: AsyncSession = Depends(get_db),
        client: CRMClient = Depends(get_crm_client),
    ) -> Envelope[Page[UserListItem]]:
        """Paginated list with name/email substring search."""
        params = user_service.parse_pagination(request.query_params)
        rows, total = await user_service.list_users(session, role, params)
        counts = await user_service.lead_counts(client, role, rows) if profile.uses_access_code else {}
        items = [user_service.to_list_item(u, counts.get(u.id)) for u in rows]
        return Envelope(data=Page(items=items, total=total, page=params.page, page_size=params.page_size))

    if profile.uses_access_code:

        @router.post("", response_model=Envelope[CreatedScopedUser])
        async def create_scoped_user(
            body: CreateScopedUserRequest,
            _admin: AdminUser,
            session: AsyncSession = Depends(get_db),
        ) -> Envelope[CreatedScopedUser]:
            """Create the principal and return its access code (shown once)."""
            user, access_code = await user_service.create_user(session, role, name=body.name, email=body.email)
            return Envelope(data=CreatedScopedUser(user=user_service.to_list_item(user), access_code=access_code))

        @router.post("/{user_id}/regenerate-code", response_model=Envelope[AccessCodeResponse])
        async def regenerate_code(
            user_id: str,
            _admin: AdminUser,
            session: AsyncSession = Depends(get_db),
        ) -> Envelope[AccessCodeResponse]:
            access_code = await user_service.regenerate_code(session, role, user_id)
            return Envelope(data=AccessCodeResponse(access_code=access_code))

    else:

        @router.post("", response_model=Envelope[UserListItem])
        async def create_admin(
            body: CreateAdminRequest,
            _admin: AdminUser,
            session: AsyncSession = Depends(get_db),
        ) -> Envelope[UserListItem]:
            user, _ = await user_service.create_user(
                session,
                role,
                name=body.name,
                email=body.email,
                password=body.password,
                sf_field=body.sf_field,
                sf_value=body.sf_value,
            )
            return Envelope(data=user_service.to_list_item(user))

    @router.patch("/{user_id}", response_model=Envelope[UserListItem])
    async def update_user(
        user_id: str,
        body: UpdateUserRequest,
        admin: AdminUser,
        session: AsyncSession = Depends(get_db),
    ) -> Envelope[UserListItem]:
        """Partial update: name, email, status (and scope for admins)."""
        user = await user_service.update_user(session, role, user_id, body, acting_user_id=admin.user_id)
        return Envelope(data=user_service.to_list_item(user))

    @router.delete("/{user_id}", response_model=Envelope[MessageResponse])
    async def delete_user(
        user_id: str,
        admin: AdminUser,
        session: AsyncSession = Depends(get_db),
    ) -> Envelope[MessageResponse]:
        """Hard delete; the principal's audit history is kept without an owner."""
        await user_service.delete_user(session, role, user_id, acting_user_id=admin.user_id)
        return Envelope(data=MessageResponse(message=f"{profile.label} deleted"))

    return router
