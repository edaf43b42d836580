# This project was developed with assistance from AI tools.
"""
Lead Lens -- relational models

Internal dashboard principals, the append-only audit trail of CRM writes,
and the picklist metadata cache. Contact records themselves live in the
external CRM and are never stored here.
"""

import uuid

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)

from .database import Base
from .enums import UserRole, UserStatus


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Dashboard principal. One row per (email, role) identity."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", "role", name="users_email_role_unique"),
        Index("users_role_idx", "role"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.LOAN_OFFICER,
    )
    status = Column(
        Enum(UserStatus, name="user_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    sf_field = Column(String(255), nullable=True)
    sf_value = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


class AuditLog(Base):
    """Append-only record of successful CRM writes.

    Rows are never updated except to null ``user_id`` when the owning
    principal is hard-deleted.
    """

    __tablename__ = "audit_log"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    sf_record_id = Column(String(18), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    before_json = Column(JSON, nullable=True)
    after_json = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ip = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, record='{self.sf_record_id}', action='{self.action}')>"


class MetadataCache(Base):
    """Cached picklist values per (CRM object, field)."""

    __tablename__ = "sf_metadata_cache"

    object_name = Column(String(100), primary_key=True)
    field_name = Column(String(100), primary_key=True)
    metadata_json = Column("metadata", JSON, nullable=False)
    cached_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<MetadataCache(object='{self.object_name}', field='{self.field_name}')>"
