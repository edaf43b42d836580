# This project was developed with assistance from AI tools.
"""Route tests for /api/contacts and /api/metadata."""

from unittest.mock import AsyncMock

import pytest
from db import AuditLog
from personas import admin, agent, auth_headers, loan_officer
from sqlalchemy import select

from lead_lens.core.errors import CRMError

# ---------------------------------------------------------------------------
# GET /api/contacts
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_requires_auth(api):
    resp = await api.get("/api/contacts")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_list_shape_and_paging(api):
    resp = await api.get("/api/contacts", params={"pageSize": 3, "page": 2}, headers=auth_headers(admin()))

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["page"] == 2
    assert data["pageSize"] == 3
    assert data["totalCount"] == 8
    assert data["totalPages"] == 3
    assert len(data["items"]) == 3
    assert {"id", "name", "temperature", "loanPartner", "lastModifiedDate"} <= set(data["items"][0])


@pytest.mark.asyncio
async def test_list_is_scoped(api):
    resp = await api.get("/api/contacts", headers=auth_headers(loan_officer()))
    items = resp.json()["data"]["items"]
    assert len(items) == 5
    for item in items:
        assert "Test LO" in (item["loanPartner"], item["leonLoanPartner"], item["maratLoanPartner"])


@pytest.mark.asyncio
async def test_list_filters(api):
    resp = await api.get(
        "/api/contacts",
        params={"status": "Follow Up", "dateFrom": "2026-01-01", "dateTo": "2026-12-31"},
        headers=auth_headers(agent()),
    )
    items = resp.json()["data"]["items"]
    assert [i["name"] for i in items] == ["Sarah Chen"]


@pytest.mark.asyncio
async def test_page_size_clamped(api):
    resp = await api.get("/api/contacts", params={"pageSize": 5000, "page": 0}, headers=auth_headers(admin()))
    data = resp.json()["data"]
    assert data["pageSize"] == 200
    assert data["page"] == 1


@pytest.mark.asyncio
async def test_bad_date_is_400(api):
    resp = await api.get("/api/contacts", params={"dateFrom": "yesterday"}, headers=auth_headers(admin()))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION"


@pytest.mark.asyncio
async def test_scope_missing_is_403(api):
    user = loan_officer()
    headers = auth_headers(user.model_copy(update={"sf_value": None}))
    resp = await api.get("/api/contacts", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "NO_SCOPE"


@pytest.mark.asyncio
async def test_crm_failure_surfaces_upstream_message(api, crm, monkeypatch):
    monkeypatch.setattr(crm, "query", AsyncMock(side_effect=CRMError("Salesforce request failed: 503")))
    resp = await api.get("/api/contacts", headers=auth_headers(admin()))
    assert resp.status_code == 500
    assert resp.json()["error"] == {"code": "SERVER_ERROR", "message": "Salesforce request failed: 503"}


# ---------------------------------------------------------------------------
# PATCH /api/contacts
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_bulk_update_route(api, crm, db_session):
    body = {
        "updates": [
            {"id": "003MOCK000000001", "fields": {"status": "Closed"}},
            {"id": "003MOCK000000003", "fields": {"status": "Closed"}},
        ]
    }

    resp = await api.patch(
        "/api/contacts", json=body, headers={**auth_headers(loan_officer()), "User-Agent": "grid/1.0"}
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == [
        {"id": "003MOCK000000001", "success": True, "error": None},
        {"id": "003MOCK000000003", "success": False, "error": "Record not in scope"},
    ]
    entry = (await db_session.execute(select(AuditLog))).scalar_one()
    assert entry.sf_record_id == "003MOCK000000001"
    assert entry.user_agent == "grid/1.0"
    assert entry.before_json == {"status": "Active"}


@pytest.mark.asyncio
async def test_bulk_update_too_many(api, crm):
    body = {"updates": [{"id": f"003X{i}", "fields": {"status": "New"}} for i in range(201)]}
    resp = await api.patch("/api/contacts", json=body, headers=auth_headers(admin()))
    assert resp.status_code == 400
    assert resp.json()["error"] == {"code": "TOO_MANY_RECORDS", "message": "Max 200 records per request"}
    assert crm.updates == []


@pytest.mark.asyncio
async def test_bulk_update_unknown_field(api, crm):
    body = {
        "updates": [
            {"id": "003MOCK000000001", "fields": {"status": "Closed"}},
            {"id": "003MOCK000000002", "fields": {"Status__c": "Closed"}},
        ]
    }
    resp = await api.patch("/api/contacts", json=body, headers=auth_headers(admin()))
    assert resp.status_code == 400
    assert resp.json()["error"] == {"code": "UNKNOWN_FIELD", "message": "Unknown field: Status__c"}
    assert crm.updates == []


@pytest.mark.asyncio
async def test_bulk_update_not_editable(api, crm):
    body = {"updates": [{"id": "003MOCK000000001", "fields": {"referredByText": "Me"}}]}
    resp = await api.patch("/api/contacts", json=body, headers=auth_headers(agent()))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "FIELD_NOT_EDITABLE"


@pytest.mark.asyncio
async def test_bulk_update_empty(api):
    resp = await api.patch("/api/contacts", json={"updates": []}, headers=auth_headers(admin()))
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Timelines
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_activity_route(api):
    resp = await api.get("/api/contacts/003MOCK000000001/activity", headers=auth_headers(loan_officer()))
    assert resp.status_code == 200
    items = resp.json()["data"]
    assert [i["type"] for i in items] == ["sf_task", "sf_task"]
    assert items[0]["date"] >= items[1]["date"]


@pytest.mark.asyncio
async def test_activity_out_of_scope_404(api):
    resp = await api.get("/api/contacts/003MOCK000000005/activity", headers=auth_headers(loan_officer()))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_history_route(api):
    resp = await api.get("/api/contacts/003MOCK000000001/history", headers=auth_headers(admin()))
    assert resp.status_code == 200
    first = resp.json()["data"][0]
    assert first == {
        "field": "MtgPlanner_CRM__Stage__c",
        "oldValue": "Prospect",
        "newValue": "Application",
        "date": "2026-02-12T09:00:00.000Z",
        "changedBy": "Leon Belov",
    }


# ---------------------------------------------------------------------------
# GET /api/metadata/dropdowns
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_dropdowns_route(api):
    resp = await api.get("/api/metadata/dropdowns", headers=auth_headers(agent()))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["Temparture__c"] == [
        {"value": "Hot", "label": "Hot"},
        {"value": "Warm", "label": "Warm"},
        {"value": "Cold", "label": "Cold"},
    ]
    assert "LeadSource" in data


@pytest.mark.asyncio
async def test_dropdowns_require_auth(api):
    resp = await api.get("/api/metadata/dropdowns")
    assert resp.status_code == 401
