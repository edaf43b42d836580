# This project was developed with assistance from AI tools.
"""CRM picklist metadata for the grid's dropdown cells."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_db

from ..middleware.auth import CurrentUser
from ..schemas import Envelope
from ..schemas.contact import PicklistOption
from ..services.metadata import get_dropdowns
from ..services.salesforce.client import CRMClient, get_crm_client

router = APIRouter()


@router.get("/dropdowns", response_model=Envelope[dict[str, list[PicklistOption]]])
async def dropdowns(
    _user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    client: CRMClient = Depends(get_crm_client),
) -> Envelope[dict[str, list[PicklistOption]]]:
    """Active picklist options keyed by CRM field name."""
    values = await get_dropdowns(session, client)
    return Envelope(data={field: [PicklistOption(**o) for o in opts] for field, opts in values.items()})
