# This project was developed with assistance from AI tools.
"""
Domain enums for dashboard principals.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    LOAN_OFFICER = "loan_officer"
    AGENT = "agent"

    @classmethod
    def scoped_roles(cls) -> frozenset["UserRole"]:
        """Roles whose CRM visibility is restricted to a scope value."""
        return frozenset({cls.LOAN_OFFICER, cls.AGENT})


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    DISABLED = "disabled"

    @classmethod
    def valid_transitions(cls) -> dict["UserStatus", frozenset["UserStatus"]]:
        """Admin-toggled status changes. Hard delete is handled separately."""
        return {
            cls.ACTIVE: frozenset({cls.DISABLED}),
            cls.DISABLED: frozenset({cls.ACTIVE}),
        }


class AuditAction(str, enum.Enum):
    UPDATE = "update"
