# This project was developed with assistance from AI tools.
"""Field permission gate.

Static bijection between dashboard (camelCase) field names and CRM API
names, plus the per-role write allow-lists. Every write is validated here
before anything is sent to the CRM.
"""

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from db.enums import UserRole

from ..core.errors import FieldNotEditableError, UnknownFieldError

FIELD_MAP: Mapping[str, str] = MappingProxyType(
    {
        "status": "Status__c",
        "temperature": "Temparture__c",  # CRM API name carries the typo
        "noOfCalls": "No_of_Calls__c",
        "message": "Message_QuickUpdate__c",
        "hotLead": "Hot_Lead__c",
        "paal": "PAAL__c",
        "inProcess": "In_Process__c",
        "stage": "MtgPlanner_CRM__Stage__c",
        "thankYouToReferralSource": "MtgPlanner_CRM__Thank_you_to_Referral_Source__c",
        "bdr": "BDR__c",
        "loanPartner": "Loan_Partners__c",
        "leonLoanPartner": "Leon_Loan_Partner__c",
        "maratLoanPartner": "Marat__c",
        "leonBdr": "Leon_BDR__c",
        "maratBdr": "Marat_BDR__c",
        "leadSource": "LeadSource",
        "isClient": "Is_Client__c",
        "referredByText": "MtgPlanner_CRM__Referred_By_Text__c",
        "lastTouch": "MtgPlanner_CRM__Last_Touch__c",
        "lastTouchSms": "Last_Touch_via_360_SMS__c",
    }
)


def _build_reverse(forward: Mapping[str, str]) -> Mapping[str, str]:
    reverse: dict[str, str] = {}
    for internal, external in forward.items():
        if external in reverse:
            raise RuntimeError(
                f"Field map is not a bijection: {external} claimed by "
                f"{reverse[external]} and {internal}"
            )
        reverse[external] = internal
    return MappingProxyType(reverse)


REVERSE_FIELD_MAP: Mapping[str, str] = _build_reverse(FIELD_MAP)

# Scoped roles may touch pipeline progress and notes; never identity,
# ownership, or partner assignment.
_SCOPED_WRITABLE = frozenset(
    {
        "status",
        "temperature",
        "noOfCalls",
        "message",
        "hotLead",
        "paal",
        "inProcess",
        "stage",
        "thankYouToReferralSource",
    }
)

WRITABLE_FIELDS: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        UserRole.LOAN_OFFICER.value: _SCOPED_WRITABLE,
        UserRole.AGENT.value: _SCOPED_WRITABLE,
    }
)


def map_internal_to_external(name: str) -> str:
    """Strict lookup. Raises UnknownFieldError for anything not in FIELD_MAP."""
    try:
        return FIELD_MAP[name]
    except KeyError:
        raise UnknownFieldError(name) from None


def is_writable_by_role(name: str, role: str) -> bool:
    if name not in FIELD_MAP:
        return False
    if role == UserRole.ADMIN.value:
        return True
    return name in WRITABLE_FIELDS.get(role, frozenset())


def validate_write_set(fields: Mapping[str, Any], role: str) -> dict[str, Any]:
    """Translate one record's internal field values to CRM names.

    Raises:
        UnknownFieldError: a field is not in the map (checked first).
        FieldNotEditableError: a mapped field is outside the role's allow-list.
    """
    external: dict[str, Any] = {}
    for name, value in fields.items():
        sf_name = map_internal_to_external(name)
        if not is_writable_by_role(name, role):
            raise FieldNotEditableError(name)
        external[sf_name] = value
    return external


def validate_updates(updates: Sequence[Any], role: str) -> list[dict[str, Any]]:
    """Validate every record of a batch; the first bad field fails the batch.

    Each update needs ``id`` and ``fields`` attributes. Returns CRM-shaped
    records ``{"Id": ..., <sf name>: value}`` in input order.
    """
    return [{"Id": u.id, **validate_write_set(u.fields, role)} for u in updates]
