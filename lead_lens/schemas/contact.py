# This project was developed with assistance from AI tools.
"""Contact, activity, and bulk-update schemas."""

from datetime import date
from typing import Any, Literal

from pydantic import Field

from . import CamelModel


class ContactRow(CamelModel):
    """CRM contact projected into the dashboard's fixed shape."""

    id: str
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile_phone: str | None = None
    status: str | None = None
    temperature: str | None = None
    no_of_calls: str | int | float | None = None
    message: str | None = None
    hot_lead: bool | None = None
    paal: bool | None = None
    in_process: bool | None = None
    stage: str | None = None
    thank_you_to_referral_source: bool | None = None
    bdr: str | None = None
    loan_partner: str | None = None
    leon_loan_partner: str | None = None
    marat_loan_partner: str | None = None
    leon_bdr: str | None = None
    marat_bdr: str | None = None
    lead_source: str | None = None
    is_client: bool | None = None
    referred_by_text: str | None = None
    last_touch: str | None = None
    last_touch_sms: str | None = None
    description: str | None = None
    owner_id: str | None = None
    owner_name: str | None = None
    record_type: str | None = None
    created_date: str | None = None
    last_modified_date: str | None = None


class ContactFilters(CamelModel):
    """Query-string filters for the contact list."""

    search: str | None = None
    status: str | None = None
    temperature: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    page: int = 1
    page_size: int = 50
    sort_by: str | None = None
    sort_dir: Literal["asc", "desc"] | None = None


class ContactPage(CamelModel):
    items: list[ContactRow]
    page: int
    page_size: int
    total_count: int
    total_pages: int


class ContactUpdate(CamelModel):
    """One record of a bulk update: CRM id plus internal field names to values."""

    id: str = Field(min_length=1)
    fields: dict[str, Any]


class BulkUpdateRequest(CamelModel):
    updates: list[ContactUpdate]


class UpdateResult(CamelModel):
    id: str
    success: bool
    error: str | None = None


class ActivityItem(CamelModel):
    """CRM task or dashboard audit entry on a contact's timeline."""

    type: Literal["sf_task", "audit"]
    date: str
    subject: str | None = None
    description: str | None = None
    status: str | None = None
    action: str | None = None
    changes: dict[str, Any] | None = None


class FieldHistoryItem(CamelModel):
    field: str | None = None
    old_value: Any = None
    new_value: Any = None
    date: str | None = None
    changed_by: str | None = None


class PicklistOption(CamelModel):
    value: str
    label: str
