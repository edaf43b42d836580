# This project was developed with assistance from AI tools.
"""Tests for principal management: pagination, create, update, delete."""

import pytest
from db import AuditLog, User, UserRole, UserStatus
from sqlalchemy import select

from lead_lens.core.auth import verify_password
from lead_lens.core.errors import AlreadyExistsError, NotFoundError, ValidationError
from lead_lens.schemas.users import UpdateUserRequest
from lead_lens.services.audit import write_audit_log
from lead_lens.services.salesforce.mock import MockSalesforceClient
from lead_lens.services.users import (
    PaginationParams,
    create_user,
    delete_user,
    lead_counts,
    list_users,
    parse_pagination,
    regenerate_code,
    to_list_item,
    update_user,
    validate_name_and_email,
)

# ---------------------------------------------------------------------------
# parse_pagination
# ---------------------------------------------------------------------------


def test_pagination_defaults():
    assert parse_pagination({}) == PaginationParams(page=1, page_size=25, search="", offset=0)


@pytest.mark.parametrize(
    "query,page,page_size",
    [
        ({"page": "0"}, 1, 25),
        ({"page": "-3"}, 1, 25),
        ({"page": "abc"}, 1, 25),
        ({"page": "3", "pageSize": "10"}, 3, 10),
        ({"pageSize": "200"}, 1, 100),
        ({"pageSize": "0"}, 1, 25),
        ({"pageSize": "-5"}, 1, 1),
        ({"page": "2.9", "pageSize": "15.5"}, 2, 15),
    ],
)
def test_pagination_clamping(query, page, page_size):
    params = parse_pagination(query)
    assert params.page == page
    assert params.page_size == page_size
    assert params.offset == (page - 1) * page_size


def test_pagination_search_is_trimmed():
    assert parse_pagination({"search": "  jane  "}).search == "jane"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_validate_name_and_email_normalizes():
    assert validate_name_and_email("  Jane Doe ", " Jane@Example.com") == ("Jane Doe", "jane@example.com")


@pytest.mark.parametrize(
    "name,email,message",
    [
        ("", "a@b.co", "Name and email required"),
        ("Jane", None, "Name and email required"),
        ("Jane", "not-an-email", "Invalid email format"),
        ("Jane", "a@b", "Invalid email format"),
    ],
)
def test_validate_name_and_email_rejects(name, email, message):
    with pytest.raises(ValidationError, match=message):
        validate_name_and_email(name, email)


# ---------------------------------------------------------------------------
# create_user
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_loan_officer_scopes_by_name(db_session):
    user, code = await create_user(db_session, UserRole.LOAN_OFFICER, name=" Test LO ", email="LO@Example.com")

    assert code is not None
    assert user.name == "Test LO"
    assert user.email == "lo@example.com"
    assert user.sf_field == "Loan_Partners__c"
    assert user.sf_value == "Test LO"
    assert user.status == UserStatus.ACTIVE
    assert verify_password(code, user.password_hash)


@pytest.mark.asyncio
async def test_create_agent_uses_referral_field(db_session):
    user, _ = await create_user(db_session, UserRole.AGENT, name="Test Agent", email="agent@example.com")
    assert user.sf_field == "MtgPlanner_CRM__Referred_By_Text__c"
    assert user.sf_value == "Test Agent"


@pytest.mark.asyncio
async def test_create_admin_requires_password(db_session):
    with pytest.raises(ValidationError):
        await create_user(db_session, UserRole.ADMIN, name="Root", email="root@example.com")
    with pytest.raises(ValidationError, match="at least 6"):
        await create_user(db_session, UserRole.ADMIN, name="Root", email="root@example.com", password="12345")


@pytest.mark.asyncio
async def test_create_admin_returns_no_code(db_session):
    user, code = await create_user(
        db_session, UserRole.ADMIN, name="Root", email="root@example.com", password="s3cret!"
    )
    assert code is None
    assert user.sf_field is None
    assert verify_password("s3cret!", user.password_hash)


@pytest.mark.asyncio
async def test_duplicate_email_same_role_conflicts(db_session):
    await create_user(db_session, UserRole.AGENT, name="A", email="dup@example.com")
    with pytest.raises(AlreadyExistsError) as exc_info:
        await create_user(db_session, UserRole.AGENT, name="B", email="DUP@example.com")
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_same_email_different_role_allowed(db_session):
    await create_user(db_session, UserRole.AGENT, name="Pat", email="pat@example.com")
    user, _ = await create_user(db_session, UserRole.LOAN_OFFICER, name="Pat", email="pat@example.com")
    assert user.role == UserRole.LOAN_OFFICER


# ---------------------------------------------------------------------------
# list_users
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_users_filters_by_role_and_search(db_session):
    await create_user(db_session, UserRole.AGENT, name="Alice Agent", email="alice@example.com")
    await create_user(db_session, UserRole.AGENT, name="Bob Agent", email="bob@realty.com")
    await create_user(db_session, UserRole.LOAN_OFFICER, name="Alice LO", email="alice.lo@example.com")

    rows, total = await list_users(db_session, UserRole.AGENT, parse_pagination({}))
    assert total == 2
    assert [u.name for u in rows] == ["Alice Agent", "Bob Agent"]

    rows, total = await list_users(db_session, UserRole.AGENT, parse_pagination({"search": "REALTY"}))
    assert total == 1
    assert rows[0].name == "Bob Agent"


@pytest.mark.asyncio
async def test_list_users_pages(db_session):
    for i in range(5):
        await create_user(db_session, UserRole.AGENT, name=f"Agent {i}", email=f"a{i}@example.com")

    rows, total = await list_users(db_session, UserRole.AGENT, parse_pagination({"page": "2", "pageSize": "2"}))
    assert total == 5
    assert [u.name for u in rows] == ["Agent 2", "Agent 3"]


# ---------------------------------------------------------------------------
# update_user
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_rename_scoped_user_moves_scope(db_session):
    user, _ = await create_user(db_session, UserRole.LOAN_OFFICER, name="Old Name", email="lo@example.com")

    updated = await update_user(db_session, UserRole.LOAN_OFFICER, user.id, UpdateUserRequest(name="New Name"))

    assert updated.name == "New Name"
    assert updated.sf_value == "New Name"
    assert updated.sf_field == "Loan_Partners__c"


@pytest.mark.asyncio
async def test_scoped_user_scope_fields_ignored(db_session):
    """LO/agent scope follows the name; explicit scope edits are dropped."""
    user, _ = await create_user(db_session, UserRole.AGENT, name="Test Agent", email="agent@example.com")

    with pytest.raises(ValidationError, match="No fields to update"):
        await update_user(
            db_session, UserRole.AGENT, user.id, UpdateUserRequest(sf_field="Other__c", sf_value="Someone")
        )
    assert user.sf_value == "Test Agent"


@pytest.mark.asyncio
async def test_admin_scope_fields_editable(db_session):
    user, _ = await create_user(db_session, UserRole.ADMIN, name="Root", email="root@example.com", password="s3cret!")

    updated = await update_user(
        db_session, UserRole.ADMIN, user.id, UpdateUserRequest(sf_field="Owner_Name__c", sf_value="Root")
    )
    assert (updated.sf_field, updated.sf_value) == ("Owner_Name__c", "Root")

    updated = await update_user(db_session, UserRole.ADMIN, user.id, UpdateUserRequest(sf_value=None))
    assert updated.sf_value is None


@pytest.mark.asyncio
async def test_update_with_no_fields_rejected(db_session):
    user, _ = await create_user(db_session, UserRole.AGENT, name="Test Agent", email="agent@example.com")
    with pytest.raises(ValidationError, match="No fields to update"):
        await update_user(db_session, UserRole.AGENT, user.id, UpdateUserRequest())


@pytest.mark.asyncio
async def test_disable_and_reenable(db_session):
    user, _ = await create_user(db_session, UserRole.AGENT, name="Test Agent", email="agent@example.com")

    updated = await update_user(db_session, UserRole.AGENT, user.id, UpdateUserRequest(status=UserStatus.DISABLED))
    assert updated.status == UserStatus.DISABLED

    updated = await update_user(db_session, UserRole.AGENT, user.id, UpdateUserRequest(status=UserStatus.ACTIVE))
    assert updated.status == UserStatus.ACTIVE


@pytest.mark.asyncio
async def test_admin_cannot_disable_self(db_session):
    user, _ = await create_user(db_session, UserRole.ADMIN, name="Root", email="root@example.com", password="s3cret!")
    with pytest.raises(ValidationError, match="own account"):
        await update_user(
            db_session,
            UserRole.ADMIN,
            user.id,
            UpdateUserRequest(status=UserStatus.DISABLED),
            acting_user_id=user.id,
        )


@pytest.mark.asyncio
async def test_update_email_conflict(db_session):
    await create_user(db_session, UserRole.AGENT, name="A", email="a@example.com")
    b, _ = await create_user(db_session, UserRole.AGENT, name="B", email="b@example.com")
    with pytest.raises(AlreadyExistsError):
        await update_user(db_session, UserRole.AGENT, b.id, UpdateUserRequest(email="A@example.com"))


@pytest.mark.asyncio
async def test_update_wrong_role_not_found(db_session):
    """An agent id is not reachable through the loan-officer routes."""
    user, _ = await create_user(db_session, UserRole.AGENT, name="A", email="a@example.com")
    with pytest.raises(NotFoundError, match="Loan officer not found"):
        await update_user(db_session, UserRole.LOAN_OFFICER, user.id, UpdateUserRequest(name="X"))


# ---------------------------------------------------------------------------
# regenerate_code / delete_user
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_regenerate_code_invalidates_old(db_session):
    user, old_code = await create_user(db_session, UserRole.AGENT, name="A", email="a@example.com")

    new_code = await regenerate_code(db_session, UserRole.AGENT, user.id)

    assert verify_password(new_code, user.password_hash)
    if new_code != old_code:
        assert not verify_password(old_code, user.password_hash)


@pytest.mark.asyncio
async def test_regenerate_code_not_for_admins(db_session):
    user, _ = await create_user(db_session, UserRole.ADMIN, name="Root", email="root@example.com", password="s3cret!")
    with pytest.raises(ValidationError):
        await regenerate_code(db_session, UserRole.ADMIN, user.id)


@pytest.mark.asyncio
async def test_delete_keeps_audit_rows_without_owner(db_session):
    user, _ = await create_user(db_session, UserRole.LOAN_OFFICER, name="Test LO", email="lo@example.com")
    await write_audit_log(db_session, user_id=user.id, sf_record_id="003MOCK000000001", after={"status": "New"})

    await delete_user(db_session, UserRole.LOAN_OFFICER, user.id, acting_user_id="admin-user")

    assert await db_session.get(User, user.id) is None
    entries = (await db_session.execute(select(AuditLog))).scalars().all()
    assert len(entries) == 1
    assert entries[0].user_id is None


@pytest.mark.asyncio
async def test_delete_self_rejected(db_session):
    user, _ = await create_user(db_session, UserRole.ADMIN, name="Root", email="root@example.com", password="s3cret!")
    with pytest.raises(ValidationError, match="own account"):
        await delete_user(db_session, UserRole.ADMIN, user.id, acting_user_id=user.id)


@pytest.mark.asyncio
async def test_delete_missing_user(db_session):
    with pytest.raises(NotFoundError, match="Agent not found"):
        await delete_user(db_session, UserRole.AGENT, "missing", acting_user_id="admin-user")


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_lead_counts_per_principal(db_session):
    test_lo, _ = await create_user(db_session, UserRole.LOAN_OFFICER, name="Test LO", email="lo@example.com")
    nobody, _ = await create_user(db_session, UserRole.LOAN_OFFICER, name="Nobody", email="nobody@example.com")

    counts = await lead_counts(MockSalesforceClient(), UserRole.LOAN_OFFICER, [test_lo, nobody])

    # five fixture contacts name Test LO in at least one partner column
    assert counts == {test_lo.id: 5, nobody.id: 0}


@pytest.mark.asyncio
async def test_list_item_hides_scope_for_scoped_roles(db_session):
    agent, _ = await create_user(db_session, UserRole.AGENT, name="Test Agent", email="agent@example.com")
    root, _ = await create_user(
        db_session, UserRole.ADMIN, name="Root", email="root@example.com", password="s3cret!", sf_value="Root"
    )

    assert to_list_item(agent, 3).sf_value is None
    assert to_list_item(agent, 3).active_leads == 3
    assert to_list_item(root).sf_value == "Root"
