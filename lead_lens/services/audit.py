# This project was developed with assistance from AI tools.
"""Audit log service.

Append-only record of successful CRM writes. Entries are written after the
CRM has already accepted the change, so a failed audit insert is logged and
swallowed rather than surfaced; there is no way to roll the CRM back.
"""

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db import AuditAction, AuditLog

logger = logging.getLogger(__name__)


async def write_audit_log(
    session: AsyncSession,
    *,
    user_id: str | None,
    sf_record_id: str,
    action: AuditAction = AuditAction.UPDATE,
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
    ip: str | None = None,
    user_agent: str | None = None,
) -> AuditLog:
    """Insert and commit a single audit entry.

    Args:
        session: Database session.
        user_id: Acting principal.
        sf_record_id: CRM record that was written.
        action: What happened to the record.
        before: Field values prior to the write, keyed by dashboard name.
        after: Field values sent in the write, keyed by dashboard name.
        ip: Requester address.
        user_agent: Requester User-Agent header.

    Returns:
        The committed AuditLog row.
    """
    entry = AuditLog(
        user_id=user_id,
        sf_record_id=sf_record_id,
        action=action.value,
        before_json=before,
        after_json=after,
        ip=(ip or "")[:45] or None,
        user_agent=user_agent or None,
    )
    session.add(entry)
    await session.commit()
    return entry


async def record_audit_best_effort(session: AsyncSession, **kwargs: Any) -> AuditLog | None:
    """``write_audit_log`` that never raises; failures are logged."""
    try:
        return await write_audit_log(session, **kwargs)
    except Exception:
        logger.exception(
            "Audit write failed for record %s (user=%s); CRM change stands",
            kwargs.get("sf_record_id"),
            kwargs.get("user_id"),
        )
        await session.rollback()
        return None


async def get_entries_for_record(session: AsyncSession, sf_record_id: str) -> list[AuditLog]:
    """All audit entries for one CRM record, newest first."""
    stmt = (
        select(AuditLog)
        .where(AuditLog.sf_record_id == sf_record_id)
        .order_by(AuditLog.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def detach_user(session: AsyncSession, user_id: str) -> None:
    """Null the owner on a principal's entries ahead of a hard delete.

    Does not commit; the caller deletes the user in the same transaction.
    """
    await session.execute(
        update(AuditLog).where(AuditLog.user_id == user_id).values(user_id=None)
    )
