# This project was developed with assistance from AI tools.
"""Liveness/readiness probe."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_db

from ..core.config import settings
from ..schemas import Envelope

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=Envelope[dict])
async def health(session: AsyncSession = Depends(get_db)) -> Envelope[dict]:
    """Report service and database status. Always 200 so the probe can read the body."""
    database = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health check: database unavailable: %s", exc)
        database = "unavailable"
    return Envelope(
        data={
            "status": "ok" if database == "ok" else "degraded",
            "database": database,
            "crm": "mock" if settings.MOCK_SALESFORCE else "salesforce",
        }
    )
