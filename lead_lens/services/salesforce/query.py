# This project was developed with assistance from AI tools.
"""SOQL construction for contact reads and the CRM -> ContactRow projection."""

import math
from datetime import date
from typing import Any

from ...core.errors import ValidationError
from ...schemas.contact import ContactFilters, ContactRow
from ..field_map import FIELD_MAP
from ..scope import escape_soql, soql_literal

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

CONTACT_FIELDS = (
    "Id", "Name", "FirstName", "LastName", "Email", "Phone", "MobilePhone",
    "OwnerId", "Owner.Name", "CreatedDate", "LastModifiedDate",
    "LeadSource", "Status__c", "Temparture__c", "No_of_Calls__c",
    "Message_QuickUpdate__c", "Hot_Lead__c", "PAAL__c", "In_Process__c",
    "Is_Client__c", "MtgPlanner_CRM__Stage__c", "MtgPlanner_CRM__Thank_you_to_Referral_Source__c",
    "BDR__c", "Leon_BDR__c", "Marat_BDR__c",
    "Loan_Partners__c", "Leon_Loan_Partner__c", "Marat__c",
    "MtgPlanner_CRM__Referred_By_Text__c", "MtgPlanner_CRM__Last_Touch__c",
    "Last_Touch_via_360_SMS__c", "Description", "RecordTypeId",
)

# Standard columns not covered by FIELD_MAP, by their wire name
_STANDARD_COLUMNS = {
    "id": "Id",
    "name": "Name",
    "firstName": "FirstName",
    "lastName": "LastName",
    "email": "Email",
    "phone": "Phone",
    "mobilePhone": "MobilePhone",
    "ownerId": "OwnerId",
    "recordType": "RecordTypeId",
    "description": "Description",
    "createdDate": "CreatedDate",
    "lastModifiedDate": "LastModifiedDate",
}

SORTABLE_FIELDS = {**_STANDARD_COLUMNS, **FIELD_MAP}
DEFAULT_ORDER_BY = "LastModifiedDate DESC"


def clamp_page(page: int | None) -> int:
    return max(1, page or 1)


def clamp_page_size(page_size: int | None) -> int:
    if not page_size:
        return DEFAULT_PAGE_SIZE
    return min(MAX_PAGE_SIZE, max(1, page_size))


def _escape_like(value: str) -> str:
    return escape_soql(value).replace("%", "\\%").replace("_", "\\_")


def _order_by(sort_by: str | None, sort_dir: str | None) -> str:
    if not sort_by:
        return DEFAULT_ORDER_BY
    column = SORTABLE_FIELDS.get(sort_by)
    if column is None:
        raise ValidationError(f"Cannot sort by: {sort_by}")
    direction = "ASC" if (sort_dir or "").lower() == "asc" else "DESC"
    return f"{column} {direction}"


def _day_start(d: date) -> str:
    return f"{d.isoformat()}T00:00:00Z"


def _day_end(d: date) -> str:
    return f"{d.isoformat()}T23:59:59Z"


def build_where(scope_condition: str | None, filters: ContactFilters) -> str:
    conditions: list[str] = []
    if scope_condition:
        conditions.append(scope_condition)
    if filters.status:
        conditions.append(f"Status__c = {soql_literal(filters.status)}")
    if filters.temperature:
        conditions.append(f"Temparture__c = {soql_literal(filters.temperature)}")
    if filters.search and filters.search.strip():
        conditions.append(f"Name LIKE '%{_escape_like(filters.search.strip())}%'")
    if filters.date_from:
        conditions.append(f"CreatedDate >= {_day_start(filters.date_from)}")
    if filters.date_to:
        conditions.append(f"CreatedDate <= {_day_end(filters.date_to)}")
    return f" WHERE {' AND '.join(conditions)}" if conditions else ""


def build_contact_query(scope_condition: str | None, filters: ContactFilters) -> tuple[str, str]:
    """Return ``(data_soql, count_soql)`` sharing the same WHERE clause."""
    page = clamp_page(filters.page)
    page_size = clamp_page_size(filters.page_size)
    offset = (page - 1) * page_size

    where = build_where(scope_condition, filters)
    order_by = _order_by(filters.sort_by, filters.sort_dir)
    data_soql = (
        f"SELECT {', '.join(CONTACT_FIELDS)} FROM Contact{where} "
        f"ORDER BY {order_by} LIMIT {page_size} OFFSET {offset}"
    )
    count_soql = f"SELECT COUNT() FROM Contact{where}"
    return data_soql, count_soql


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if page_size else 0


def map_record_to_contact(record: dict[str, Any]) -> ContactRow:
    """Project a CRM Contact record into ContactRow; anything unmapped is dropped."""
    owner = record.get("Owner") or {}
    return ContactRow(
        id=record["Id"],
        name=record.get("Name"),
        first_name=record.get("FirstName"),
        last_name=record.get("LastName"),
        email=record.get("Email"),
        phone=record.get("Phone"),
        mobile_phone=record.get("MobilePhone"),
        status=record.get("Status__c"),
        temperature=record.get("Temparture__c"),
        no_of_calls=record.get("No_of_Calls__c"),
        message=record.get("Message_QuickUpdate__c"),
        hot_lead=record.get("Hot_Lead__c"),
        paal=record.get("PAAL__c"),
        in_process=record.get("In_Process__c"),
        stage=record.get("MtgPlanner_CRM__Stage__c"),
        thank_you_to_referral_source=record.get("MtgPlanner_CRM__Thank_you_to_Referral_Source__c"),
        bdr=record.get("BDR__c"),
        loan_partner=record.get("Loan_Partners__c"),
        leon_loan_partner=record.get("Leon_Loan_Partner__c"),
        marat_loan_partner=record.get("Marat__c"),
        leon_bdr=record.get("Leon_BDR__c"),
        marat_bdr=record.get("Marat_BDR__c"),
        lead_source=record.get("LeadSource"),
        is_client=record.get("Is_Client__c"),
        referred_by_text=record.get("MtgPlanner_CRM__Referred_By_Text__c"),
        last_touch=record.get("MtgPlanner_CRM__Last_Touch__c"),
        last_touch_sms=record.get("Last_Touch_via_360_SMS__c"),
        description=record.get("Description"),
        owner_id=record.get("OwnerId"),
        owner_name=owner.get("Name") if isinstance(owner, dict) else None,
        record_type=record.get("RecordTypeId"),
        created_date=record.get("CreatedDate"),
        last_modified_date=record.get("LastModifiedDate"),
    )
