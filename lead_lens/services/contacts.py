# This project was developed with assistance from AI tools.
"""Contact reads and writes through the CRM, scoped to the caller.

Every path starts from ``resolve_scope(user)`` so the same predicate that
filters the list also gates writes, counts, and per-contact timelines.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from db import AuditAction

from ..core.errors import CRMError, NotFoundError, TooManyRecordsError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.contact import (
    ActivityItem,
    ContactFilters,
    ContactRow,
    ContactUpdate,
    FieldHistoryItem,
    UpdateResult,
)
from .audit import get_entries_for_record, record_audit_best_effort
from .field_map import FIELD_MAP, validate_updates
from .salesforce.client import CRMClient
from .salesforce.query import build_contact_query, map_record_to_contact
from .scope import build_scope_condition, resolve_scope, soql_literal, verify_ids_in_scope

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 200
TIMELINE_LIMIT = 50
NOT_IN_SCOPE = "Record not in scope"
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


async def list_contacts(
    client: CRMClient, user: UserContext, filters: ContactFilters
) -> tuple[list[ContactRow], int]:
    """One page of in-scope contacts plus the total match count.

    The page and the count share a WHERE clause and run concurrently.
    """
    data_soql, count_soql = build_contact_query(resolve_scope(user), filters)
    data, count = await asyncio.gather(client.query(data_soql), client.query(count_soql))
    rows = [map_record_to_contact(r) for r in data.get("records", [])]
    return rows, int(count.get("totalSize", 0))


async def _snapshot(client: CRMClient, updates: Sequence[ContactUpdate]) -> dict[str, dict]:
    """Current values of the fields each record is about to change, keyed by id.

    Used only for the audit trail; a failed read leaves ``before`` empty.
    """
    fields = sorted({FIELD_MAP[name] for u in updates for name in u.fields})
    ids = list(dict.fromkeys(u.id for u in updates))
    if not ids or not fields:
        return {}
    id_list = ",".join(soql_literal(i) for i in ids)
    soql = f"SELECT Id, {', '.join(fields)} FROM Contact WHERE Id IN ({id_list})"
    try:
        result = await client.query(soql)
    except CRMError as exc:
        logger.warning("Pre-update snapshot failed, auditing without before values: %s", exc)
        return {}
    current = {r["Id"]: r for r in result.get("records", [])}
    return {
        u.id: {name: current[u.id].get(FIELD_MAP[name]) for name in u.fields}
        for u in updates
        if u.id in current
    }


async def bulk_update(
    session: AsyncSession,
    client: CRMClient,
    user: UserContext,
    updates: Sequence[ContactUpdate],
    *,
    ip: str | None = None,
    user_agent: str | None = None,
) -> list[UpdateResult]:
    """Validate, scope-check, write, and audit a batch of contact updates.

    Validation covers every field of every record before the CRM is called;
    one bad field rejects the whole batch. Records outside the caller's
    scope come back as failures without being sent. The CRM applies the
    rest with partial success, and each accepted record gets one audit entry.

    Returns:
        One result per input record, in input order.
    """
    if not updates:
        raise ValidationError("Updates array is required")
    if len(updates) > MAX_BATCH_SIZE:
        raise TooManyRecordsError(MAX_BATCH_SIZE)

    sf_records = validate_updates(updates, user.role)

    ids = [u.id for u in updates]
    if user.is_admin:
        allowed = set(ids)
    else:
        allowed = await verify_ids_in_scope(client, ids, user.role, user.sf_field, user.sf_value)
        if len(allowed) < len(set(ids)):
            logger.warning(
                "Bulk update: user=%s attempted %d out-of-scope record(s)",
                user.user_id,
                len(set(ids) - allowed),
            )

    to_send = [(i, rec) for i, rec in enumerate(sf_records) if rec["Id"] in allowed]
    results: list[UpdateResult | None] = [None] * len(updates)
    for i, u in enumerate(updates):
        if u.id not in allowed:
            results[i] = UpdateResult(id=u.id, success=False, error=NOT_IN_SCOPE)

    if to_send:
        before = await _snapshot(client, [updates[i] for i, _ in to_send])
        saved = await client.update_records("Contact", [rec for _, rec in to_send])
        if len(saved) != len(to_send):
            logger.error(
                "Bulk update: user=%s sent %d record(s), Salesforce returned %d result(s)",
                user.user_id,
                len(to_send),
                len(saved),
            )
            raise CRMError(f"Salesforce returned {len(saved)} results for {len(to_send)} records")
        for (i, _), outcome in zip(to_send, saved):
            errors = outcome.get("errors") or []
            results[i] = UpdateResult(
                id=updates[i].id,
                success=bool(outcome.get("success")),
                error=errors[0].get("message") if errors else None,
            )

        for i, _ in to_send:
            if results[i].success:
                await record_audit_best_effort(
                    session,
                    user_id=user.user_id,
                    sf_record_id=updates[i].id,
                    action=AuditAction.UPDATE,
                    before=before.get(updates[i].id),
                    after=dict(updates[i].fields),
                    ip=ip,
                    user_agent=user_agent,
                )

    logger.info(
        "Bulk update: user=%s records=%d succeeded=%d",
        user.user_id,
        len(updates),
        sum(1 for r in results if r.success),
    )
    return results


async def count_for_scope_values(
    client: CRMClient, names: Sequence[str], role: str, scope_field: str | None = None
) -> dict[str, int]:
    """In-scope contact count per principal name; a failed count reads as 0."""
    unique = list(dict.fromkeys(n for n in names if n))

    async def _count(name: str) -> tuple[str, int]:
        try:
            condition = build_scope_condition(role, scope_field, name)
            where = f" WHERE {condition}" if condition else ""
            result = await client.query(f"SELECT COUNT() FROM Contact{where}")
            return name, int(result.get("totalSize", 0))
        except Exception as exc:
            logger.warning("Lead count failed for %r: %s", name, exc)
            return name, 0

    pairs = await asyncio.gather(*(_count(n) for n in unique))
    return dict(pairs)


async def _ensure_visible(client: CRMClient, contact_id: str, user: UserContext) -> None:
    if user.is_admin:
        return
    visible = await verify_ids_in_scope(client, [contact_id], user.role, user.sf_field, user.sf_value)
    if contact_id not in visible:
        raise NotFoundError("Contact not found")


async def get_activity(
    session: AsyncSession, client: CRMClient, contact_id: str, user: UserContext
) -> list[ActivityItem]:
    """CRM tasks and dashboard audit entries for one contact, newest first."""
    await _ensure_visible(client, contact_id, user)

    soql = (
        "SELECT Id, Subject, ActivityDate, Status, Description, CreatedDate FROM Task "
        f"WHERE WhoId = {soql_literal(contact_id)} ORDER BY CreatedDate DESC LIMIT {TIMELINE_LIMIT}"
    )
    try:
        tasks: list[dict[str, Any]] = (await client.query(soql)).get("records", [])
    except CRMError as exc:
        logger.warning("Task history unavailable for %s: %s", contact_id, exc)
        tasks = []

    entries = await get_entries_for_record(session, contact_id)

    items = [
        ActivityItem(
            type="sf_task",
            date=task.get("CreatedDate") or task.get("ActivityDate") or "",
            subject=task.get("Subject"),
            description=task.get("Description"),
            status=task.get("Status"),
        )
        for task in tasks
    ]
    items.extend(
        ActivityItem(
            type="audit",
            date=_iso(entry.created_at),
            action=entry.action,
            changes=entry.after_json,
        )
        for entry in entries
    )
    items.sort(key=lambda item: _sort_key(item.date), reverse=True)
    return items


async def get_field_history(client: CRMClient, contact_id: str, user: UserContext) -> list[FieldHistoryItem]:
    """CRM field-change history for one contact, newest first."""
    await _ensure_visible(client, contact_id, user)

    soql = (
        "SELECT Field, OldValue, NewValue, CreatedDate, CreatedBy.Name FROM ContactHistory "
        f"WHERE ContactId = {soql_literal(contact_id)} ORDER BY CreatedDate DESC LIMIT {TIMELINE_LIMIT}"
    )
    try:
        records = (await client.query(soql)).get("records", [])
    except CRMError as exc:
        logger.warning("Field history unavailable for %s: %s", contact_id, exc)
        return []

    return [
        FieldHistoryItem(
            field=r.get("Field"),
            old_value=r.get("OldValue"),
            new_value=r.get("NewValue"),
            date=r.get("CreatedDate"),
            changed_by=(r.get("CreatedBy") or {}).get("Name"),
        )
        for r in records
    ]


def _iso(value) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


def _sort_key(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    # Task ActivityDate is a bare date
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
