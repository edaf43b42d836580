# This project was developed with assistance from AI tools.
"""Scope resolution: which CRM contacts a principal may see and touch.

Centralizes the role -> SOQL WHERE logic so that listing, counting, and
write authorization all apply the same rules. Each role resolves to a
``ScopeRule`` once; every predicate builder goes through
``build_scope_condition`` so scope values are always escaped.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from db.enums import UserRole

from ..core.errors import ForbiddenError, NoScopeError
from ..schemas.auth import UserContext
from .salesforce.client import CRMClient


@dataclass(frozen=True)
class MatchAll:
    """No restriction."""


@dataclass(frozen=True)
class AnyOf:
    """Visible when any of ``fields`` equals the principal's scope value."""

    fields: tuple[str, ...]


ScopeRule = MatchAll | AnyOf

SCOPE_RULES: dict[str, ScopeRule] = {
    UserRole.ADMIN.value: MatchAll(),
    # LO name can sit in any of the three partner columns
    UserRole.LOAN_OFFICER.value: AnyOf(("Loan_Partners__c", "Leon_Loan_Partner__c", "Marat__c")),
    UserRole.AGENT.value: AnyOf(("MtgPlanner_CRM__Referred_By_Text__c",)),
}

_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_.]*$")


def escape_soql(value: str) -> str:
    """Escape a value for use inside a single-quoted SOQL string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def soql_literal(value: str) -> str:
    return f"'{escape_soql(value)}'"


def build_scope_condition(role: str | None, scope_field: str | None, scope_value: str | None) -> str | None:
    """Build the SOQL predicate restricting contacts to this principal.

    Returns ``None`` when the role sees everything. Roles without a rule
    fall back to a single equality on the token's own scope field.

    Raises:
        NoScopeError: a restricted principal has no scope value.
        ForbiddenError: the fallback scope field is not a plain identifier.
    """
    rule = SCOPE_RULES.get(role or "")
    if isinstance(rule, MatchAll):
        return None

    if not scope_value:
        raise NoScopeError()
    literal = soql_literal(scope_value)

    if isinstance(rule, AnyOf):
        return "(" + " OR ".join(f"{field} = {literal}" for field in rule.fields) + ")"

    if not scope_field or not _IDENTIFIER.match(scope_field):
        raise ForbiddenError("Invalid scope field")
    return f"{scope_field} = {literal}"


def resolve_scope(user: UserContext) -> str | None:
    """Scope predicate for an authenticated request."""
    return build_scope_condition(user.role, user.sf_field, user.sf_value)


async def verify_ids_in_scope(
    client: CRMClient,
    ids: Iterable[str],
    role: str | None,
    scope_field: str | None,
    scope_value: str | None,
) -> set[str]:
    """Return the subset of ``ids`` the principal may act on.

    One query for the whole list; admins skip the round trip.
    """
    ids = list(dict.fromkeys(ids))
    condition = build_scope_condition(role, scope_field, scope_value)
    if condition is None:
        return set(ids)
    if not ids:
        return set()

    id_list = ",".join(soql_literal(i) for i in ids)
    soql = f"SELECT Id FROM Contact WHERE Id IN ({id_list}) AND {condition}"
    result = await client.query(soql)
    return {r["Id"] for r in result.get("records", [])}
