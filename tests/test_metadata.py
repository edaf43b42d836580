# This project was developed with assistance from AI tools.
"""Tests for picklist extraction and the TTL-bound metadata cache."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from db import MetadataCache
from sqlalchemy import select, update

from lead_lens.services.metadata import PICKLIST_FIELDS, extract_picklist_values, get_dropdowns
from lead_lens.services.salesforce.mock import MockSalesforceClient


def _spy_client() -> MockSalesforceClient:
    client = MockSalesforceClient()
    client.describe = AsyncMock(wraps=client.describe)
    return client


def test_extract_skips_inactive_values():
    describe = {
        "fields": [
            {
                "name": "LeadSource",
                "picklistValues": [
                    {"active": True, "value": "Web", "label": "Website"},
                    {"active": False, "value": "Fax", "label": "Fax"},
                    {"active": True, "value": "Phone", "label": None},
                ],
            }
        ]
    }
    assert extract_picklist_values(describe, "LeadSource") == [
        {"value": "Web", "label": "Website"},
        {"value": "Phone", "label": "Phone"},
    ]


def test_extract_missing_field_is_empty():
    assert extract_picklist_values({"fields": []}, "Status__c") == []
    assert extract_picklist_values({"fields": [{"name": "Status__c"}]}, "Status__c") == []


@pytest.mark.asyncio
async def test_first_read_describes_and_caches(db_session):
    client = _spy_client()

    values = await get_dropdowns(db_session, client)

    assert set(values) == set(PICKLIST_FIELDS)
    assert [o["value"] for o in values["Temparture__c"]] == ["Hot", "Warm", "Cold"]
    assert "Cold Call" not in [o["value"] for o in values["LeadSource"]]
    client.describe.assert_awaited_once_with("Contact")

    rows = (await db_session.execute(select(MetadataCache))).scalars().all()
    assert len(rows) == len(PICKLIST_FIELDS)


@pytest.mark.asyncio
async def test_fresh_cache_skips_crm(db_session):
    client = _spy_client()
    first = await get_dropdowns(db_session, client)
    second = await get_dropdowns(db_session, client)

    assert second == first
    assert client.describe.await_count == 1


@pytest.mark.asyncio
async def test_stale_cache_refreshes(db_session):
    client = _spy_client()
    await get_dropdowns(db_session, client)

    stale = datetime.now(UTC) - timedelta(minutes=31)
    await db_session.execute(
        update(MetadataCache).where(MetadataCache.field_name == "Status__c").values(cached_at=stale)
    )
    await db_session.commit()

    await get_dropdowns(db_session, client)
    assert client.describe.await_count == 2


@pytest.mark.asyncio
async def test_partial_cache_refreshes(db_session):
    db_session.add(
        MetadataCache(
            object_name="Contact",
            field_name="Status__c",
            metadata_json=[{"value": "Old", "label": "Old"}],
            cached_at=datetime.now(UTC),
        )
    )
    await db_session.commit()
    client = _spy_client()

    values = await get_dropdowns(db_session, client)

    client.describe.assert_awaited_once()
    assert values["Status__c"][0]["value"] == "New"
