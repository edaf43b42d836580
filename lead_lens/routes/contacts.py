# This project was developed with assistance from AI tools.
"""Contact list, bulk update, and per-contact timelines."""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_db

from ..middleware.auth import CurrentUser
from ..schemas import Envelope
from ..schemas.contact import (
    ActivityItem,
    BulkUpdateRequest,
    ContactFilters,
    ContactPage,
    FieldHistoryItem,
    UpdateResult,
)
from ..services import contacts as contact_service
from ..services.salesforce.client import CRMClient, get_crm_client
from ..services.salesforce.query import clamp_page, clamp_page_size, total_pages

router = APIRouter()


@router.get("", response_model=Envelope[ContactPage])
async def list_contacts(
    user: CurrentUser,
    client: CRMClient = Depends(get_crm_client),
    search: str | None = None,
    status: str | None = None,
    temperature: str | None = None,
    date_from: date | None = Query(default=None, alias="dateFrom"),
    date_to: date | None = Query(default=None, alias="dateTo"),
    page: int = 1,
    page_size: int = Query(default=50, alias="pageSize"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_dir: Literal["asc", "desc"] | None = Query(default=None, alias="sortDir"),
) -> Envelope[ContactPage]:
    """Contacts visible to the caller, newest activity first unless sorted otherwise."""
    filters = ContactFilters(
        search=search,
        status=status,
        temperature=temperature,
        date_from=date_from,
        date_to=date_to,
        page=clamp_page(page),
        page_size=clamp_page_size(page_size),
        sort_by=sort_by,
        sort_dir=sort_dir,
    )
    rows, total = await contact_service.list_contacts(client, user, filters)
    return Envelope(
        data=ContactPage(
            items=rows,
            page=filters.page,
            page_size=filters.page_size,
            total_count=total,
            total_pages=total_pages(total, filters.page_size),
        )
    )


@router.patch("", response_model=Envelope[list[UpdateResult]])
async def bulk_update(
    body: BulkUpdateRequest,
    request: Request,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    client: CRMClient = Depends(get_crm_client),
) -> Envelope[list[UpdateResult]]:
    """Write field changes to up to 200 contacts; results come back per record."""
    results = await contact_service.bulk_update(
        session,
        client,
        user,
        body.updates,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return Envelope(data=results)


@router.get("/{contact_id}/activity", response_model=Envelope[list[ActivityItem]])
async def contact_activity(
    contact_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    client: CRMClient = Depends(get_crm_client),
) -> Envelope[list[ActivityItem]]:
    items = await contact_service.get_activity(session, client, contact_id, user)
    return Envelope(data=items)


@router.get("/{contact_id}/history", response_model=Envelope[list[FieldHistoryItem]])
async def contact_history(
    contact_id: str,
    user: CurrentUser,
    client: CRMClient = Depends(get_crm_client),
) -> Envelope[list[FieldHistoryItem]]:
    items = await contact_service.get_field_history(client, contact_id, user)
    return Envelope(data=items)
