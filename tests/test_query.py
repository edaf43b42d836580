# This project was developed with assistance from AI tools.
"""Tests for SOQL construction and the CRM -> ContactRow projection."""

from datetime import date

import pytest

from lead_lens.core.errors import ValidationError
from lead_lens.schemas.contact import ContactFilters
from lead_lens.services.salesforce.query import (
    DEFAULT_ORDER_BY,
    build_contact_query,
    build_where,
    clamp_page,
    clamp_page_size,
    map_record_to_contact,
    total_pages,
)
from lead_lens.services.salesforce.mock import FAKE_CONTACTS


@pytest.mark.parametrize("value,expected", [(None, 50), (0, 50), (-4, 1), (10, 10), (200, 200), (500, 200)])
def test_clamp_page_size(value, expected):
    assert clamp_page_size(value) == expected


@pytest.mark.parametrize("value,expected", [(None, 1), (0, 1), (-1, 1), (7, 7)])
def test_clamp_page(value, expected):
    assert clamp_page(value) == expected


def test_total_pages():
    assert total_pages(0, 50) == 0
    assert total_pages(50, 50) == 1
    assert total_pages(51, 50) == 2


# ---------------------------------------------------------------------------
# WHERE
# ---------------------------------------------------------------------------


def test_no_conditions_no_where():
    assert build_where(None, ContactFilters()) == ""


def test_all_filters_and_scope():
    filters = ContactFilters(
        search=" smith ",
        status="Active",
        temperature="Hot",
        date_from=date(2026, 1, 1),
        date_to=date(2026, 1, 31),
    )
    where = build_where("(Marat__c = 'Kim')", filters)
    assert where == (
        " WHERE (Marat__c = 'Kim') AND Status__c = 'Active' AND Temparture__c = 'Hot'"
        " AND Name LIKE '%smith%' AND CreatedDate >= 2026-01-01T00:00:00Z"
        " AND CreatedDate <= 2026-01-31T23:59:59Z"
    )


def test_filter_values_are_escaped():
    where = build_where(None, ContactFilters(status="x' OR Name != '", search="50%_off"))
    assert "Status__c = 'x\\' OR Name != \\''" in where
    assert "Name LIKE '%50\\%\\_off%'" in where


def test_blank_search_ignored():
    assert build_where(None, ContactFilters(search="   ")) == ""


# ---------------------------------------------------------------------------
# Full query
# ---------------------------------------------------------------------------


def test_build_contact_query_defaults():
    data, count = build_contact_query(None, ContactFilters())
    assert data.startswith("SELECT Id, Name, ")
    assert data.endswith(f"FROM Contact ORDER BY {DEFAULT_ORDER_BY} LIMIT 50 OFFSET 0")
    assert count == "SELECT COUNT() FROM Contact"


def test_build_contact_query_page_offset_and_sort():
    data, _ = build_contact_query(
        None, ContactFilters(page=3, page_size=20, sort_by="temperature", sort_dir="asc")
    )
    assert data.endswith("ORDER BY Temparture__c ASC LIMIT 20 OFFSET 40")


def test_sort_defaults_to_descending():
    data, _ = build_contact_query(None, ContactFilters(sort_by="createdDate"))
    assert "ORDER BY CreatedDate DESC" in data


def test_sort_column_must_be_known():
    with pytest.raises(ValidationError):
        build_contact_query(None, ContactFilters(sort_by="Name; DELETE"))


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def test_map_record_to_contact():
    row = map_record_to_contact({**FAKE_CONTACTS[0], "Unmapped__c": "dropped"})
    assert row.id == "003MOCK000000001"
    assert row.temperature == "Hot"
    assert row.loan_partner == "Test LO"
    assert row.owner_name == "Leon Belov"
    assert row.referred_by_text == "Test Agent"
    assert "Unmapped__c" not in row.model_dump(by_alias=True)


def test_map_record_serializes_camel_case():
    data = map_record_to_contact(FAKE_CONTACTS[0]).model_dump(by_alias=True)
    assert data["hotLead"] is True
    assert data["noOfCalls"] == "3"
    assert data["lastModifiedDate"] == "2026-02-10T14:30:00.000Z"


def test_map_record_handles_missing_owner():
    row = map_record_to_contact({"Id": "003X", "Owner": None})
    assert row.owner_name is None
    assert row.name is None
