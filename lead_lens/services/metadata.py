# This project was developed with assistance from AI tools.
"""Picklist (dropdown) metadata, cached in Postgres with a fixed TTL."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db import MetadataCache

from ..core.config import settings
from .salesforce.client import CRMClient

logger = logging.getLogger(__name__)

CONTACT_OBJECT = "Contact"

PICKLIST_FIELDS = (
    "Status__c",
    "Temparture__c",
    "No_of_Calls__c",
    "MtgPlanner_CRM__Stage__c",
    "BDR__c",
    "Leon_BDR__c",
    "Marat_BDR__c",
    "Loan_Partners__c",
    "Leon_Loan_Partner__c",
    "Marat__c",
    "LeadSource",
)

Options = list[dict[str, str]]


def extract_picklist_values(describe: dict[str, Any], field_name: str) -> Options:
    """Active ``{value, label}`` options for one field of a describe result."""
    field = next((f for f in describe.get("fields", []) if f.get("name") == field_name), None)
    if not field or not field.get("picklistValues"):
        return []
    return [
        {"value": p["value"], "label": p.get("label") or p["value"]}
        for p in field["picklistValues"]
        if p.get("active")
    ]


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


async def _read_cache(session: AsyncSession, ttl: timedelta) -> dict[str, Options] | None:
    """Cached options if every field is present and none is older than ``ttl``."""
    result = await session.execute(
        select(MetadataCache).where(MetadataCache.object_name == CONTACT_OBJECT)
    )
    rows = {r.field_name: r for r in result.scalars().all()}
    if any(name not in rows for name in PICKLIST_FIELDS):
        return None
    oldest = min(_aware(rows[name].cached_at) for name in PICKLIST_FIELDS)
    if datetime.now(UTC) - oldest > ttl:
        return None
    return {name: rows[name].metadata_json for name in PICKLIST_FIELDS}


async def _write_cache(session: AsyncSession, values: dict[str, Options], now: datetime) -> None:
    """Upsert one row per field. Concurrent refreshes write identical values."""
    for field_name, options in values.items():
        row = await session.get(MetadataCache, (CONTACT_OBJECT, field_name))
        if row is None:
            session.add(
                MetadataCache(
                    object_name=CONTACT_OBJECT,
                    field_name=field_name,
                    metadata_json=options,
                    cached_at=now,
                )
            )
        else:
            row.metadata_json = options
            row.cached_at = now
    await session.commit()


async def get_dropdowns(session: AsyncSession, client: CRMClient) -> dict[str, Options]:
    """Picklist options per CRM field, refreshed from ``describe`` when stale."""
    ttl = timedelta(seconds=settings.METADATA_CACHE_TTL_SECONDS)
    cached = await _read_cache(session, ttl)
    if cached is not None:
        return cached

    describe = await client.describe(CONTACT_OBJECT)
    values = {name: extract_picklist_values(describe, name) for name in PICKLIST_FIELDS}
    try:
        await _write_cache(session, values, datetime.now(UTC))
    except IntegrityError:
        # another request inserted the same rows first
        await session.rollback()
    logger.info("Picklist cache refreshed (%d fields)", len(values))
    return values
